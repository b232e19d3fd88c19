"""
Version resolution core.

Selects the rule matching the repository state, builds the lazily
evaluated placeholder registry and renders the version and property
templates of the matched rule.

"""

from gitversioning.versioning.arithmetic import VersionComponents, increment, parse_version
from gitversioning.versioning.driver import resolve_version
from gitversioning.versioning.errors import (
	GitVersioningError,
	InvalidOverrideRefError,
	InvalidPatternError,
	MissingPlaceholderError,
	NoMatchingRuleError,
	NonNumericIncrementInputError,
)
from gitversioning.versioning.models import (
	GitDescription,
	MatchResult,
	RefType,
	RepositorySnapshot,
	ResolutionOutput,
	Rule,
)
from gitversioning.versioning.patterns import compile_pattern, extract_groups, pattern_groups
from gitversioning.versioning.placeholders import PlaceholderRegistry, build_placeholder_registry
from gitversioning.versioning.resolver import resolve, tag_version_key
from gitversioning.versioning.template import render

__all__ = [
	"GitDescription",
	"GitVersioningError",
	"InvalidOverrideRefError",
	"InvalidPatternError",
	"MatchResult",
	"MissingPlaceholderError",
	"NoMatchingRuleError",
	"NonNumericIncrementInputError",
	"PlaceholderRegistry",
	"RefType",
	"RepositorySnapshot",
	"ResolutionOutput",
	"Rule",
	"VersionComponents",
	"build_placeholder_registry",
	"compile_pattern",
	"extract_groups",
	"increment",
	"parse_version",
	"pattern_groups",
	"render",
	"resolve",
	"resolve_version",
	"tag_version_key",
]
