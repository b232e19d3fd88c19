"""Resolution of the project version for a repository snapshot."""

from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from gitversioning.config.options import (
	OPTION_DISABLE,
	OPTION_PREFER_TAGS,
	get_boolean_option,
)
from gitversioning.versioning.errors import NoMatchingRuleError
from gitversioning.versioning.models import MatchResult, RepositorySnapshot, ResolutionOutput
from gitversioning.versioning.normalize import normalize_config, resolve_rule_options
from gitversioning.versioning.placeholders import build_placeholder_registry, is_scalar, slugify
from gitversioning.versioning.resolver import resolve
from gitversioning.versioning.template import render

if TYPE_CHECKING:
	from collections.abc import Mapping

	from gitversioning.config.config_schema import AppConfigSchema

logger = logging.getLogger(__name__)

NO_COMMIT_ISO_DATETIME = "0000-00-00T00:00:00Z"


def format_iso_timestamp(timestamp: int) -> str:
	"""Format a commit timestamp as an ISO-8601 UTC instant."""
	if timestamp == 0:
		return NO_COMMIT_ISO_DATETIME
	return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def git_metadata(snapshot: RepositorySnapshot, match: MatchResult, *, slug_lowercase: bool = True) -> dict[str, str]:
	"""Build the fixed ``git.*`` metadata properties."""
	ref_type = match.ref_type.value
	ref_slug = slugify(match.ref_name, lowercase=slug_lowercase)
	return {
		"git.commit": snapshot.commit,
		"git.commit.short": snapshot.commit[:7],
		"git.commit.timestamp": str(snapshot.commit_timestamp),
		"git.commit.timestamp.datetime": format_iso_timestamp(snapshot.commit_timestamp),
		"git.ref": match.ref_name,
		"git.ref.slug": ref_slug,
		f"git.{ref_type}": match.ref_name,
		f"git.{ref_type}.slug": ref_slug,
		"git.dirty": str(not snapshot.clean).lower(),
	}


def is_disabled(
	config: AppConfigSchema,
	parameters: Mapping[str, Any] | None = None,
	environment: Mapping[str, str] | None = None,
) -> bool:
	"""Whether versioning is disabled by command option or configuration."""
	disabled = get_boolean_option(OPTION_DISABLE, parameters, environment)
	if disabled is not None:
		if disabled:
			logger.info("skip - versioning is disabled by command option")
		return disabled
	if config.disable:
		logger.info("skip - versioning is disabled by config option")
	return config.disable


def resolve_version(
	snapshot: RepositorySnapshot,
	config: AppConfigSchema,
	*,
	parameters: Mapping[str, Any] | None = None,
	environment: Mapping[str, str] | None = None,
	project_version: str | None = None,
) -> ResolutionOutput | None:
	"""
	Resolve the version and properties for ``snapshot``.

	Args:
		snapshot: Repository state
		config: Versioning configuration
		parameters: Build parameters; exposed as ``property.<name>`` and used
			as the original values of configured properties
		environment: Environment variables (defaults to ``os.environ``)
		project_version: Version currently declared by the project

	Returns:
		The resolution output, or None when versioning is disabled or no rule
		matched and ``skip_on_no_match`` is configured

	Raises:
		NoMatchingRuleError: If no rule matches
		InvalidPatternError: If a configured pattern is malformed
		MissingPlaceholderError: If a template references an unknown placeholder

	"""
	parameters = parameters or {}
	environment = dict(os.environ) if environment is None else environment

	if is_disabled(config, parameters, environment):
		return None

	normalized = normalize_config(config)

	prefer_tags = get_boolean_option(OPTION_PREFER_TAGS, parameters, environment)
	if prefer_tags is None:
		prefer_tags = config.prefer_tags
	logger.debug("option - prefer tags: %s", prefer_tags)

	try:
		match = resolve(
			snapshot,
			normalized.branch_rules,
			normalized.tag_rules,
			normalized.commit_rule,
			prefer_tags=prefer_tags,
		)
	except NoMatchingRuleError as e:
		if config.skip_on_no_match:
			logger.warning("skip - %s", e)
			return None
		raise
	logger.info("git ref: %s (%s)", match.ref_name, match.ref_type.value)

	options = resolve_rule_options(config, match.rule, parameters, environment)
	logger.debug("option - describe tag pattern: %s", options.describe_tag_pattern.pattern)
	logger.debug("option - update properties file: %s", options.update_properties_file)

	registry = build_placeholder_registry(
		snapshot.with_describe_tag_pattern(options.describe_tag_pattern),
		match,
		parameters=parameters,
		environment=environment,
		project_version=project_version,
		slug_lowercase=config.slug_lowercase,
	)

	version = render(match.rule.version_format, registry)
	logger.info("version: %s", version)

	properties: dict[str, str] = {}
	for name, value_format in match.rule.properties.items():
		original = parameters.get(name, "")
		original_value = str(original) if is_scalar(original) else ""
		properties[name] = render(value_format, registry.derive({"value": original_value}))
		logger.info("property %s: %s", name, properties[name])

	return ResolutionOutput(
		version=version,
		properties=properties,
		metadata=git_metadata(snapshot, match, slug_lowercase=config.slug_lowercase),
		match=match,
		update_properties_file=options.update_properties_file,
	)
