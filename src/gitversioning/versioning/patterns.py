"""Regular expression helpers for rule patterns and named capture groups."""

from __future__ import annotations

import re
from functools import lru_cache

from gitversioning.versioning.errors import InvalidPatternError

# (?<name>...) but not the look-behind assertions (?<=...) and (?<!...)
_ANGLE_NAMED_GROUP = re.compile(r"\(\?<(?=[A-Za-z_])")


def translate_pattern(pattern: str) -> str:
	"""Rewrite ``(?<name>...)`` groups into Python's ``(?P<name>...)`` syntax."""
	return _ANGLE_NAMED_GROUP.sub("(?P<", pattern)


@lru_cache(maxsize=256)
def compile_pattern(pattern: str, rule: str | None = None) -> re.Pattern[str]:
	"""
	Compile a rule pattern.

	Args:
		pattern: Regular expression, in Python or ``(?<name>...)`` group syntax
		rule: Identity of the rule owning the pattern, used in error messages

	Returns:
		The compiled pattern

	Raises:
		InvalidPatternError: If the pattern is not a valid regular expression

	"""
	try:
		return re.compile(translate_pattern(pattern))
	except re.error as e:
		raise InvalidPatternError(pattern, str(e), rule) from e


def _as_pattern(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
	return compile_pattern(pattern) if isinstance(pattern, str) else pattern


def pattern_groups(pattern: str | re.Pattern[str]) -> list[str]:
	"""Return the named groups of ``pattern`` in the order they appear."""
	compiled = _as_pattern(pattern)
	return sorted(compiled.groupindex, key=compiled.groupindex.__getitem__)


def extract_groups(pattern: str | re.Pattern[str], text: str) -> dict[str, str]:
	"""
	Extract named capture group values from a full match of ``pattern`` against ``text``.

	Only named groups are returned. Groups that did not take part in the match
	map to an empty string. If ``text`` does not match, an empty dict is returned.

	Args:
		pattern: Pattern to match
		text: Text to match against

	Returns:
		Mapping of group name to captured value

	"""
	match = _as_pattern(pattern).fullmatch(text)
	if match is None:
		return {}
	return {name: value or "" for name, value in match.groupdict().items()}
