"""Global test fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pygit2
import pytest
from pygit2.enums import ObjectType

from gitversioning.versioning.models import GitDescription, RepositorySnapshot

COMMIT_ID = "0123456789abcdef0123456789abcdef01234567"
COMMIT_TIMESTAMP = 1700000000

CI_ENVIRONMENT_VARIABLES = (
	"GITHUB_ACTIONS",
	"GITLAB_CI",
	"CIRCLECI",
	"JENKINS_HOME",
	"JENKINS_URL",
	"VERSIONING_DISABLE",
	"VERSIONING_PREFER_TAGS",
	"VERSIONING_UPDATE_PROPERTIES_FILE",
	"VERSIONING_GIT_BRANCH",
	"VERSIONING_GIT_TAG",
	"VERSIONING_GIT_REF",
)


@pytest.fixture(autouse=True)
def clean_ci_environment(monkeypatch: pytest.MonkeyPatch) -> None:
	"""Keep the CI system running the tests from overriding refs."""
	for name in CI_ENVIRONMENT_VARIABLES:
		monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_snapshot() -> Callable[..., RepositorySnapshot]:
	"""Factory for repository snapshots with sensible defaults."""

	def factory(**kwargs: Any) -> RepositorySnapshot:
		values: dict[str, Any] = {
			"commit": COMMIT_ID,
			"commit_timestamp": COMMIT_TIMESTAMP,
			"branch": "main",
			"tags": (),
			"clean": True,
		}
		values.update(kwargs)
		return RepositorySnapshot(**values)

	return factory


def describer_for(tag: str, distance: int) -> Callable[..., GitDescription]:
	"""Build a describer returning a fixed description."""

	def describer(pattern: Any) -> GitDescription:
		return GitDescription(commit=COMMIT_ID, tag=tag, distance=distance)

	return describer


class RepoBuilder:
	"""Creates commits, tags and branches in a throw-away repository."""

	signature_name = "Test User"
	signature_email = "test@example.com"

	def __init__(self, path: Path) -> None:
		self.path = path
		self.repo = pygit2.init_repository(str(path), initial_head="main")

	def signature(self, timestamp: int) -> pygit2.Signature:
		return pygit2.Signature(self.signature_name, self.signature_email, timestamp, 0)

	def commit(self, message: str, timestamp: int = COMMIT_TIMESTAMP, filename: str = "file.txt") -> pygit2.Oid:
		(self.path / filename).write_text(f"{message}\n", encoding="utf-8")
		index = self.repo.index
		index.add(filename)
		index.write()
		tree = index.write_tree()
		parents = [] if self.repo.head_is_unborn else [self.repo.head.target]
		signature = self.signature(timestamp)
		return self.repo.create_commit("HEAD", signature, signature, message, tree, parents)

	def tag(self, name: str, target: pygit2.Oid | None = None) -> None:
		self.repo.create_reference(f"refs/tags/{name}", target or self.repo.head.target)

	def annotated_tag(self, name: str, target: pygit2.Oid | None = None) -> None:
		oid = target or self.repo.head.target
		self.repo.create_tag(name, oid, ObjectType.COMMIT, self.signature(COMMIT_TIMESTAMP), f"Release {name}")

	def branch(self, name: str) -> None:
		self.repo.branches.local.create(name, self.repo[self.repo.head.target])
		self.repo.set_head(f"refs/heads/{name}")

	def checkout(self, name: str) -> None:
		self.repo.checkout(f"refs/heads/{name}")

	def merge(self, name: str, timestamp: int = COMMIT_TIMESTAMP) -> pygit2.Oid:
		"""Record a merge of branch ``name`` into HEAD, keeping the tree of HEAD."""
		other = self.repo.branches.local[name].target
		tree = self.repo.index.write_tree()
		signature = self.signature(timestamp)
		return self.repo.create_commit(
			"HEAD", signature, signature, f"Merge {name}", tree, [self.repo.head.target, other]
		)

	def detach(self) -> None:
		self.repo.set_head(self.repo.head.target)


@pytest.fixture
def git_repo(tmp_path: Path) -> RepoBuilder:
	"""Create an empty repository with ``main`` as the initial branch."""
	return RepoBuilder(tmp_path / "repo")
