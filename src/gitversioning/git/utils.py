"""Utilities for reading the repository state with pygit2."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

from pygit2 import Commit, discover_repository
from pygit2 import GitError as Pygit2GitError
from pygit2.enums import SortMode
from pygit2.repository import Repository

from gitversioning.versioning.models import GitDescription, RepositorySnapshot
from gitversioning.versioning.resolver import tag_version_key

if TYPE_CHECKING:
	import re

logger = logging.getLogger(__name__)

TAG_REF_PREFIX = "refs/tags/"


class GitError(Exception):
	"""Custom exception for Git-related errors."""


class GitRepoContext:
	"""Reads the state of a git repository using pygit2."""

	def __init__(self, path: Path | None = None) -> None:
		"""
		Open the repository containing ``path``.

		Args:
			path: Directory inside the repository (defaults to the current directory)

		Raises:
			GitError: If ``path`` is not inside a git repository

		"""
		self.git_dir = self.get_git_dir(path)
		self.repo = Repository(str(self.git_dir))

	@classmethod
	def get_git_dir(cls, path: Path | None = None) -> Path:
		"""Get the ``.git`` directory of the repository containing ``path``."""
		git_dir = discover_repository(str(path or Path.cwd()))
		if git_dir is None:
			msg = f"Not a git repository: {path or Path.cwd()}"
			logger.error(msg)
			raise GitError(msg)
		return Path(git_dir)

	@classmethod
	def validate_repo_path(cls, path: Path | None = None) -> Path | None:
		"""Validate and return the ``.git`` directory, or None if ``path`` is not in a repository."""
		try:
			return cls.get_git_dir(path)
		except GitError:
			return None

	@property
	def work_tree(self) -> Path | None:
		"""Root of the working tree, None for a bare repository."""
		return Path(self.repo.workdir) if self.repo.workdir else None

	def get_head_commit(self) -> Commit:
		"""
		Get the commit HEAD points at.

		Raises:
			GitError: If the repository has no commits yet

		"""
		if self.repo.head_is_unborn:
			msg = f"Repository {self.repo.path} has no commits"
			raise GitError(msg)
		return self.repo.head.peel(Commit)

	def get_branch(self) -> str | None:
		"""
		Get the current branch name.

		Returns:
			str | None: The branch name, or None if HEAD is detached.

		"""
		if self.repo.head_is_detached:
			return None
		return self.repo.head.shorthand

	def get_tags_by_commit(self) -> dict[str, list[str]]:
		"""Map commit ids to the names of the tags pointing at them."""
		tags: dict[str, list[str]] = defaultdict(list)
		for ref_name in self.repo.references:
			if not ref_name.startswith(TAG_REF_PREFIX):
				continue
			try:
				commit = self.repo.references[ref_name].peel(Commit)
			except (KeyError, Pygit2GitError, ValueError):
				logger.debug("Skipping tag %s, it does not point to a commit", ref_name)
				continue
			tags[str(commit.id)].append(ref_name.removeprefix(TAG_REF_PREFIX))
		return tags

	def get_head_tags(self) -> list[str]:
		"""Get the names of the tags pointing at HEAD."""
		head = self.get_head_commit()
		return sorted(self.get_tags_by_commit().get(str(head.id), []))

	def is_clean(self) -> bool:
		"""Whether the working tree and index have no changes (ignored files excluded)."""
		return not self.repo.status()

	def describe(self, tag_pattern: re.Pattern[str]) -> GitDescription:
		"""
		Find the nearest tag matching ``tag_pattern`` reachable from HEAD.

		The distance to a tagged commit is the number of commits reachable from
		HEAD but not from that commit. The tag with the smallest distance wins,
		ties going to the highest version. Without a matching tag the
		description uses the ``root`` tag and the distance to the first commit.

		Args:
			tag_pattern: Pattern tag names must fully match

		Returns:
			GitDescription: The description of HEAD

		"""
		head = self.get_head_commit()
		tags_by_commit = self.get_tags_by_commit()

		candidates: list[tuple[int, str]] = []
		commit_count = 0
		for commit in self.repo.walk(head.id, SortMode.TOPOLOGICAL):
			commit_count += 1
			matching = [tag for tag in tags_by_commit.get(str(commit.id), []) if tag_pattern.fullmatch(tag)]
			if not matching:
				continue
			walker = self.repo.walk(head.id, SortMode.TOPOLOGICAL)
			walker.hide(commit.id)
			distance = sum(1 for _ in walker)
			candidates.extend((distance, tag) for tag in matching)

		if not candidates:
			return GitDescription(commit=str(head.id), distance=commit_count - 1)

		nearest = min(distance for distance, _ in candidates)
		tag = max((tag for distance, tag in candidates if distance == nearest), key=tag_version_key)
		logger.debug("Described HEAD as %s commits after %s", nearest, tag)
		return GitDescription(commit=str(head.id), tag=tag, distance=nearest)

	def get_snapshot(self) -> RepositorySnapshot:
		"""
		Capture the repository state.

		Returns:
			RepositorySnapshot: Snapshot with a lazy describer

		Raises:
			GitError: If HEAD has no commit

		"""
		head = self.get_head_commit()
		snapshot = RepositorySnapshot(
			commit=str(head.id),
			commit_timestamp=head.commit_time,
			branch=self.get_branch(),
			tags=tuple(self.get_head_tags()),
			clean=self.is_clean(),
			describer=self.describe,
		)
		logger.debug("git situation:")
		logger.debug("  root directory: %s", self.repo.workdir)
		logger.debug("  head commit: %s", snapshot.commit)
		logger.debug("  head commit timestamp: %s", snapshot.commit_timestamp)
		logger.debug("  head branch: %s", snapshot.branch)
		logger.debug("  head tags: %s", list(snapshot.tags))
		return snapshot
