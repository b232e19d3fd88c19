"""Data model shared by the version resolution pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Callable

NO_DESCRIBE_TAG = "root"
MATCH_ALL_PATTERN = ".*"


class RefType(Enum):
	"""Kind of git ref a rule applies to."""

	BRANCH = "branch"
	TAG = "tag"
	COMMIT = "commit"


@dataclass(frozen=True)
class GitDescription:
	"""Nearest matching tag reachable from HEAD and the distance to it."""

	commit: str
	tag: str = NO_DESCRIBE_TAG
	distance: int = 0

	def __str__(self) -> str:
		"""Render like ``git describe --long``."""
		return f"{self.tag}-{self.distance}-g{self.commit[:7]}"


@dataclass(frozen=True)
class RepositorySnapshot:
	"""
	State of a repository at the time a version is resolved.

	The describe walk is expensive, so it is supplied as a callable and only
	invoked when a template references one of the ``describe`` placeholders.

	"""

	commit: str
	commit_timestamp: int = 0
	branch: str | None = None
	tags: tuple[str, ...] = ()
	clean: bool = True
	describer: Callable[[re.Pattern[str]], GitDescription] | None = field(default=None, compare=False)
	describe_tag_pattern: re.Pattern[str] = field(default=re.compile(MATCH_ALL_PATTERN), compare=False)

	@property
	def is_detached(self) -> bool:
		"""Whether HEAD points directly at a commit."""
		return self.branch is None

	def describe(self) -> GitDescription:
		"""Describe HEAD relative to the nearest tag matching the describe pattern."""
		if self.describer is None:
			return GitDescription(commit=self.commit)
		return self.describer(self.describe_tag_pattern)

	def with_describe_tag_pattern(self, pattern: re.Pattern[str]) -> RepositorySnapshot:
		"""Return a copy describing against ``pattern``."""
		return replace(self, describe_tag_pattern=pattern)


@dataclass(frozen=True)
class Rule:
	"""A normalized versioning rule."""

	ref_type: RefType
	name: str
	version_format: str
	pattern: re.Pattern[str] | None = None
	properties: dict[str, str] = field(default_factory=dict)
	describe_tag_pattern: str | None = None
	update_properties_file: bool | None = None

	def matches(self, value: str) -> bool:
		"""Check whether ``value`` fully matches the rule pattern (no pattern matches all)."""
		return self.pattern is None or self.pattern.fullmatch(value) is not None


@dataclass(frozen=True)
class MatchResult:
	"""The rule selected for the current repository state."""

	rule: Rule
	ref_type: RefType
	ref_name: str
	groups: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolutionOptions:
	"""Options resolved for the matched rule."""

	describe_tag_pattern: re.Pattern[str]
	update_properties_file: bool


@dataclass
class ResolutionOutput:
	"""Final result of one resolution pass."""

	version: str
	properties: dict[str, str]
	metadata: dict[str, str]
	match: MatchResult
	update_properties_file: bool = False
