"""Pydantic schema for the versioning configuration file."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Schema(BaseModel):
	# Accept both snake_case and the camelCase keys used by build tool plugins
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class RuleSchema(_Schema):
	"""A branch, tag or commit rule."""

	pattern: str | None = None
	version_format: str | None = None
	properties: dict[str, str] = Field(default_factory=dict)
	describe_tag_pattern: str | None = None
	update_properties_file: bool | None = None

	@field_validator("properties", mode="before")
	@classmethod
	def _properties_from_list(cls, value: Any) -> Any:
		"""Accept the list form ``[{name: ..., value_format: ...}]``."""
		if not isinstance(value, list):
			return value
		properties: dict[str, str] = {}
		for item in value:
			if not isinstance(item, dict) or "name" not in item:
				msg = f"Property entries need a 'name': {item!r}"
				raise ValueError(msg)
			properties[item["name"]] = item.get("value_format", item.get("valueFormat", "${value}"))
		return properties


class AppConfigSchema(_Schema):
	"""Top level versioning configuration."""

	disable: bool = False
	prefer_tags: bool = False
	update_properties_file: bool | None = None
	describe_tag_pattern: str | None = None
	slug_lowercase: bool = True
	skip_on_no_match: bool = False
	branches: list[RuleSchema] = Field(default_factory=lambda: [RuleSchema()])
	tags: list[RuleSchema] = Field(default_factory=lambda: [RuleSchema()])
	commit: RuleSchema | None = Field(default_factory=RuleSchema)
