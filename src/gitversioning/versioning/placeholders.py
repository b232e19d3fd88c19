"""
Lazily evaluated placeholder values for version templates.

A registry is built once per resolution pass. Each entry starts out as an
unevaluated producer and is replaced by its value the first time it is
looked up, so expensive facts such as the describe walk are only computed
when a template references them, and at most once.

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any

from gitversioning.versioning.arithmetic import NUMERIC_FIELDS, increment, parse_version
from gitversioning.versioning.patterns import extract_groups, pattern_groups

if TYPE_CHECKING:
	from collections.abc import Callable, Iterator, Mapping

	from gitversioning.versioning.models import MatchResult, RepositorySnapshot

logger = logging.getLogger(__name__)

NO_COMMIT_DATETIME = "00000000.000000"
VERSION_DATETIME_FORMAT = "%Y%m%d.%H%M%S"
SNAPSHOT_SUFFIX = "-SNAPSHOT"


@dataclass
class Unevaluated:
	"""A placeholder value that has not been computed yet."""

	producer: Callable[[], str]


@dataclass(frozen=True)
class Evaluated:
	"""A computed placeholder value."""

	value: str


class PlaceholderRegistry:
	"""Memoizing mapping of placeholder key to string value."""

	def __init__(self, parent: PlaceholderRegistry | None = None) -> None:
		"""
		Initialize an empty registry.

		Args:
			parent: Registry to fall back to for keys not registered here

		"""
		self._entries: dict[str, Unevaluated | Evaluated] = {}
		self._parent = parent

	def register(self, key: str, producer: Callable[[], str]) -> None:
		"""Register a deferred value for ``key``."""
		self._entries[key] = Unevaluated(producer)

	def register_value(self, key: str, value: str) -> None:
		"""Register an already known value for ``key``."""
		self._entries[key] = Evaluated(value)

	def get(self, key: str) -> str:
		"""
		Get the value of ``key``, evaluating and memoizing it on first access.

		Raises:
			KeyError: If ``key`` is not registered

		"""
		entry = self._entries.get(key)
		if entry is None:
			if self._parent is not None:
				return self._parent.get(key)
			raise KeyError(key)
		if isinstance(entry, Unevaluated):
			entry = Evaluated(entry.producer())
			self._entries[key] = entry
		return entry.value

	def is_evaluated(self, key: str) -> bool:
		"""Whether ``key`` has already been computed."""
		entry = self._entries.get(key)
		if entry is None:
			return self._parent is not None and self._parent.is_evaluated(key)
		return isinstance(entry, Evaluated)

	def derive(self, values: Mapping[str, str]) -> PlaceholderRegistry:
		"""Create a child registry that adds ``values`` on top of this one."""
		child = PlaceholderRegistry(parent=self)
		for key, value in values.items():
			child.register_value(key, value)
		return child

	def keys(self) -> list[str]:
		"""All keys visible from this registry."""
		keys = set(self._entries)
		if self._parent is not None:
			keys.update(self._parent.keys())
		return sorted(keys)

	def __contains__(self, key: object) -> bool:
		return key in self._entries or (self._parent is not None and key in self._parent)

	def __iter__(self) -> Iterator[str]:
		return iter(self.keys())

	def __len__(self) -> int:
		return len(self.keys())


def slugify(value: str, *, lowercase: bool = True) -> str:
	"""Make ``value`` safe for use in a version: slashes become dashes."""
	slug = value.replace("/", "-")
	return slug.lower() if lowercase else slug


def format_commit_datetime(timestamp: int) -> str:
	"""Format a commit timestamp as ``yyyyMMdd.HHmmss`` in UTC."""
	if timestamp == 0:
		return NO_COMMIT_DATETIME
	return datetime.fromtimestamp(timestamp, tz=UTC).strftime(VERSION_DATETIME_FORMAT)


def is_scalar(value: Any) -> bool:
	"""Whether ``value`` can be exposed as a placeholder (strings and numbers)."""
	return isinstance(value, str | int | float) and not isinstance(value, bool)


def _tag_version(tag: str, groups: Mapping[str, str]) -> str:
	if groups.get("version"):
		return groups["version"]
	match = re.search(r"\d.*", tag)
	return match.group() if match else "0.0.0"


class _PlaceholderBuilder:
	"""Populates a registry from a snapshot and a rule match."""

	def __init__(self, registry: PlaceholderRegistry, *, slug_lowercase: bool) -> None:
		self.registry = registry
		self.slug_lowercase = slug_lowercase

	def add(self, key: str, producer: Callable[[], str], *, slug: bool = False) -> None:
		self.registry.register(key, producer)
		if slug:
			self.registry.register(key + ".slug", lambda: slugify(self.registry.get(key), lowercase=self.slug_lowercase))

	def add_commit(self, snapshot: RepositorySnapshot) -> None:
		self.add("commit", lambda: snapshot.commit)
		self.add("commit.short", lambda: snapshot.commit[:7])

		commit_time = cache(lambda: datetime.fromtimestamp(snapshot.commit_timestamp, tz=UTC))
		self.add("commit.timestamp", lambda: str(snapshot.commit_timestamp))
		self.add("commit.timestamp.year", lambda: str(commit_time().year))
		self.add("commit.timestamp.year.2digit", lambda: f"{commit_time().year % 100:02d}")
		self.add("commit.timestamp.month", lambda: f"{commit_time().month:02d}")
		self.add("commit.timestamp.day", lambda: f"{commit_time().day:02d}")
		self.add("commit.timestamp.hour", lambda: f"{commit_time().hour:02d}")
		self.add("commit.timestamp.minute", lambda: f"{commit_time().minute:02d}")
		self.add("commit.timestamp.second", lambda: f"{commit_time().second:02d}")
		self.add("commit.timestamp.datetime", lambda: format_commit_datetime(snapshot.commit_timestamp))

	def add_ref(self, match: MatchResult) -> None:
		self.add("ref", lambda: match.ref_name, slug=True)
		self.add(match.ref_type.value, lambda: match.ref_name, slug=True)

		if match.rule.pattern is None:
			return
		for group in pattern_groups(match.rule.pattern):
			value = match.groups.get(group, "")
			self.add(f"ref.{group}", lambda value=value: value, slug=True)

	def add_dirty(self, snapshot: RepositorySnapshot) -> None:
		self.add("dirty", lambda: "" if snapshot.clean else "-DIRTY")
		self.add("dirty.snapshot", lambda: "" if snapshot.clean else SNAPSHOT_SUFFIX)

	def add_describe(self, snapshot: RepositorySnapshot) -> None:
		description = cache(snapshot.describe)
		self.add("describe", lambda: str(description()))
		self.add("describe.tag", lambda: description().tag)
		self.add("describe.distance", lambda: str(description().distance))

		tag_pattern = snapshot.describe_tag_pattern
		tag_groups = cache(lambda: extract_groups(tag_pattern, description().tag))
		for group in pattern_groups(tag_pattern):
			self.add(f"describe.tag.{group}", lambda group=group: tag_groups().get(group, ""), slug=True)

		version = cache(lambda: parse_version(self.registry.get("describe.tag.version")))
		self.add("describe.tag.version", lambda: _tag_version(description().tag, tag_groups()))
		self.add("describe.tag.version.core", lambda: version().core)
		self.add("describe.tag.version.label", lambda: version().label)
		for field_name in NUMERIC_FIELDS:
			key = f"describe.tag.version.{field_name}"
			self.add(key, lambda field_name=field_name: getattr(version(), field_name))
			self.add(f"{key}.next", lambda key=key: increment(self.registry.get(key)))
			self.add(
				f"{key}.plus.describe.distance",
				lambda key=key: increment(self.registry.get(key), description().distance),
			)
			self.add(
				f"{key}.next.plus.describe.distance",
				lambda key=key: increment(self.registry.get(f"{key}.next"), description().distance),
			)

	def add_project_version(self, project_version: str) -> None:
		self.add("version", lambda: project_version)
		self.add("version.release", lambda: project_version.removesuffix(SNAPSHOT_SUFFIX))

	def add_parameters(self, parameters: Mapping[str, Any]) -> None:
		for name, value in parameters.items():
			if not is_scalar(value):
				logger.debug("Skipping non-scalar parameter %s", name)
				continue
			self.registry.register_value(f"property.{name}", str(value))

	def add_environment(self, environment: Mapping[str, str]) -> None:
		for name, value in environment.items():
			self.registry.register_value(f"env.{name}", value)


def build_placeholder_registry(
	snapshot: RepositorySnapshot,
	match: MatchResult,
	*,
	parameters: Mapping[str, Any] | None = None,
	environment: Mapping[str, str] | None = None,
	project_version: str | None = None,
	slug_lowercase: bool = True,
) -> PlaceholderRegistry:
	"""
	Build the placeholder registry for one resolution pass.

	Args:
		snapshot: Repository state, with the describe tag pattern already set
		match: The rule matched for the snapshot
		parameters: Build parameters, exposed as ``property.<name>`` when scalar
		environment: Environment variables, exposed as ``env.<NAME>``
		project_version: Current project version, exposed as ``version``
		slug_lowercase: Whether ``.slug`` values are lower-cased

	Returns:
		A fresh registry

	"""
	registry = PlaceholderRegistry()
	builder = _PlaceholderBuilder(registry, slug_lowercase=slug_lowercase)
	builder.add_commit(snapshot)
	builder.add_ref(match)
	builder.add_dirty(snapshot)
	builder.add_describe(snapshot)
	if project_version is not None:
		builder.add_project_version(project_version)
	builder.add_parameters(parameters or {})
	builder.add_environment(environment or {})
	logger.debug("Built placeholder registry with %d keys", len(registry))
	return registry
