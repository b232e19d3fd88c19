"""Normalization of configured rules into resolver rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gitversioning.config.options import OPTION_UPDATE_PROPERTIES_FILE, get_boolean_option
from gitversioning.versioning.models import MATCH_ALL_PATTERN, RefType, ResolutionOptions, Rule
from gitversioning.versioning.patterns import compile_pattern

if TYPE_CHECKING:
	from collections.abc import Mapping

	from gitversioning.config.config_schema import AppConfigSchema, RuleSchema

logger = logging.getLogger(__name__)

DEFAULT_VERSION_FORMATS = {
	RefType.BRANCH: "${branch}-SNAPSHOT",
	RefType.TAG: "${tag}",
	RefType.COMMIT: "${commit}",
}


@dataclass(frozen=True)
class NormalizedConfig:
	"""Rules and global flags ready for resolution."""

	branch_rules: tuple[Rule, ...]
	tag_rules: tuple[Rule, ...]
	commit_rule: Rule | None
	config: AppConfigSchema


def normalize_rule(schema: RuleSchema, ref_type: RefType, name: str) -> Rule:
	"""
	Turn a configured rule into a resolver rule.

	The pattern (and describe tag pattern) are compiled so malformed
	expressions fail here, and a missing version format gets the default
	for the ref type.

	Raises:
		InvalidPatternError: If a pattern does not compile

	"""
	pattern = compile_pattern(schema.pattern, name) if schema.pattern is not None else None
	if schema.describe_tag_pattern is not None:
		compile_pattern(schema.describe_tag_pattern, name)
	return Rule(
		ref_type=ref_type,
		name=name,
		version_format=schema.version_format or DEFAULT_VERSION_FORMATS[ref_type],
		pattern=pattern,
		properties=dict(schema.properties),
		describe_tag_pattern=schema.describe_tag_pattern,
		update_properties_file=schema.update_properties_file,
	)


def normalize_config(config: AppConfigSchema) -> NormalizedConfig:
	"""Normalize every rule of ``config``, in configured order."""
	if config.describe_tag_pattern is not None:
		compile_pattern(config.describe_tag_pattern, "describe_tag_pattern")
	logger.debug(
		"Normalizing %d branch rules, %d tag rules, commit rule: %s",
		len(config.branches),
		len(config.tags),
		config.commit is not None,
	)
	return NormalizedConfig(
		branch_rules=tuple(
			normalize_rule(rule, RefType.BRANCH, f"branches[{index}]") for index, rule in enumerate(config.branches)
		),
		tag_rules=tuple(normalize_rule(rule, RefType.TAG, f"tags[{index}]") for index, rule in enumerate(config.tags)),
		commit_rule=normalize_rule(config.commit, RefType.COMMIT, "commit") if config.commit is not None else None,
		config=config,
	)


def resolve_rule_options(
	config: AppConfigSchema,
	rule: Rule,
	parameters: Mapping[str, Any] | None = None,
	environment: Mapping[str, str] | None = None,
) -> ResolutionOptions:
	"""
	Resolve the options of the matched rule.

	Unset rule options inherit the global configuration, which falls back to
	the built-in default. The update-properties-file command option wins over
	both.

	"""
	describe_tag_pattern = next(
		(pattern for pattern in (rule.describe_tag_pattern, config.describe_tag_pattern) if pattern is not None),
		MATCH_ALL_PATTERN,
	)

	update_properties_file = get_boolean_option(OPTION_UPDATE_PROPERTIES_FILE, parameters, environment)
	if update_properties_file is None:
		update_properties_file = next(
			(value for value in (rule.update_properties_file, config.update_properties_file) if value is not None),
			False,
		)

	return ResolutionOptions(
		describe_tag_pattern=compile_pattern(describe_tag_pattern, rule.name),
		update_properties_file=update_properties_file,
	)
