"""Exceptions raised while resolving a version."""

from __future__ import annotations


class GitVersioningError(Exception):
	"""Base exception for version resolution errors."""


class NoMatchingRuleError(GitVersioningError):
	"""Raised when no configured rule matches and no commit rule exists."""

	def __init__(self, ref_type: str, ref_name: str) -> None:
		self.ref_type = ref_type
		self.ref_name = ref_name
		super().__init__(f"No versioning rule matches {ref_type} '{ref_name}' and no commit rule applies")


class InvalidPatternError(GitVersioningError):
	"""Raised when a rule pattern is not a valid regular expression."""

	def __init__(self, pattern: str, reason: str, rule: str | None = None) -> None:
		self.pattern = pattern
		self.rule = rule
		location = f" in rule {rule}" if rule else ""
		super().__init__(f"Invalid pattern '{pattern}'{location}: {reason}")


class MissingPlaceholderError(GitVersioningError):
	"""Raised when a template references a placeholder that is not defined."""

	def __init__(self, key: str, template: str) -> None:
		self.key = key
		self.template = template
		super().__init__(f"Unknown placeholder '${{{key}}}' in template '{template}'")


class NonNumericIncrementInputError(GitVersioningError):
	"""Raised when a non-numeric value is incremented."""

	def __init__(self, value: str) -> None:
		self.value = value
		super().__init__(f"Cannot increment non-numeric value '{value}'")


class InvalidOverrideRefError(GitVersioningError):
	"""Raised when an externally supplied ref override is malformed."""

	def __init__(self, value: str, source: str) -> None:
		self.value = value
		self.source = source
		super().__init__(
			f"Invalid ref '{value}' provided by {source}: expected a 'refs/heads/' or 'refs/tags/' prefix"
		)
