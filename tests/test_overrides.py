"""Tests for ref overrides supplied by the build environment."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from gitversioning.git.overrides import (
	RefOverride,
	circleci_override,
	command_option_override,
	detect_override,
	environment_override,
	github_actions_override,
	gitlab_ci_override,
	jenkins_override,
	parse_ref,
)
from gitversioning.versioning.errors import InvalidOverrideRefError
from gitversioning.versioning.models import RepositorySnapshot

SnapshotFactory = Callable[..., RepositorySnapshot]


@pytest.mark.unit
class TestRefOverride:
	"""Test cases for applying overrides to a snapshot."""

	def test_branch_override(self, make_snapshot: SnapshotFactory) -> None:
		"""A branch override replaces the current branch."""
		snapshot = RefOverride(branch="release/1.x").apply(make_snapshot(branch=None, tags=("v1.0.0",)))

		assert snapshot.branch == "release/1.x"
		assert snapshot.tags == ("v1.0.0",)

	def test_tag_override_detaches(self, make_snapshot: SnapshotFactory) -> None:
		"""A tag override detaches HEAD and replaces its tags."""
		snapshot = RefOverride(tag="v2.0.0").apply(make_snapshot(tags=("v1.0.0",)))

		assert snapshot.is_detached
		assert snapshot.tags == ("v2.0.0",)

	def test_empty_tag_clears_tags(self, make_snapshot: SnapshotFactory) -> None:
		"""An empty tag override removes all tags."""
		snapshot = RefOverride(tag="").apply(make_snapshot(branch=None, tags=("v1.0.0",)))

		assert snapshot.tags == ()

	def test_branch_and_tag(self, make_snapshot: SnapshotFactory) -> None:
		"""A branch and tag can be set together."""
		snapshot = RefOverride(branch="main", tag="v1.0.0").apply(make_snapshot(branch="dev"))

		assert snapshot.branch == "main"
		assert snapshot.tags == ("v1.0.0",)

	def test_is_empty(self) -> None:
		"""An override without branch or tag is empty."""
		assert RefOverride().is_empty
		assert not RefOverride(tag="").is_empty


@pytest.mark.unit
class TestParseRef:
	"""Test cases for parse_ref."""

	def test_branch_ref(self) -> None:
		"""Branch refs become branch overrides."""
		assert parse_ref("refs/heads/feature/x", "test") == RefOverride(branch="feature/x", source="test")

	def test_tag_ref(self) -> None:
		"""Tag refs become tag overrides."""
		assert parse_ref("refs/tags/v1.0.0", "test") == RefOverride(tag="v1.0.0", source="test")

	def test_invalid_ref(self) -> None:
		"""Other refs are rejected."""
		with pytest.raises(InvalidOverrideRefError, match="refs/pull/1/merge"):
			parse_ref("refs/pull/1/merge", "test")


@pytest.mark.unit
class TestProviders:
	"""Test cases for the individual override providers."""

	def test_command_option(self) -> None:
		"""Parameters set the branch, tag or full ref."""
		assert command_option_override({"git.branch": "dev"}, {}) == RefOverride(
			branch="dev", source="command option"
		)
		assert command_option_override({"git.tag": "v1"}, {}) == RefOverride(tag="v1", source="command option")
		assert command_option_override({"git.ref": "refs/tags/v2", "git.branch": "dev"}, {}) == RefOverride(
			tag="v2", source="command option"
		)
		assert command_option_override({}, {}) is None

	def test_environment(self) -> None:
		"""Environment variables set the branch, tag or full ref."""
		assert environment_override({}, {"VERSIONING_GIT_BRANCH": "dev"}).branch == "dev"
		assert environment_override({}, {"VERSIONING_GIT_TAG": "v1"}).tag == "v1"
		assert environment_override({}, {"VERSIONING_GIT_REF": "refs/heads/main"}).branch == "main"
		assert environment_override({}, {}) is None

	def test_github_actions_push(self) -> None:
		"""Pushes are versioned from GITHUB_REF."""
		environment = {"GITHUB_ACTIONS": "true", "GITHUB_EVENT_NAME": "push", "GITHUB_REF": "refs/tags/v1.2.3"}

		assert github_actions_override({}, environment) == RefOverride(tag="v1.2.3", source="GitHub Actions")

	def test_github_actions_pull_request(self) -> None:
		"""Pull requests are versioned from the head branch."""
		environment = {
			"GITHUB_ACTIONS": "true",
			"GITHUB_EVENT_NAME": "pull_request",
			"GITHUB_REF": "refs/pull/7/merge",
			"GITHUB_HEAD_REF": "feature/x",
		}

		assert github_actions_override({}, environment) == RefOverride(branch="feature/x", source="GitHub Actions")

	def test_github_actions_inactive(self) -> None:
		"""Nothing is read outside GitHub Actions."""
		assert github_actions_override({}, {"GITHUB_REF": "refs/heads/main"}) is None

	def test_gitlab_ci(self) -> None:
		"""GitLab prefers the tag, then the merge request source branch."""
		base = {"GITLAB_CI": "true", "CI_COMMIT_REF_NAME": "main"}

		assert gitlab_ci_override({}, {**base, "CI_COMMIT_TAG": "v1"}).tag == "v1"
		assert gitlab_ci_override({}, {**base, "CI_MERGE_REQUEST_SOURCE_BRANCH_NAME": "mr"}).branch == "mr"
		assert gitlab_ci_override({}, base).branch == "main"
		assert gitlab_ci_override({}, {"CI_COMMIT_TAG": "v1"}) is None

	def test_circleci(self) -> None:
		"""CircleCI provides a tag or a branch."""
		assert circleci_override({}, {"CIRCLECI": "true", "CIRCLE_TAG": "v1", "CIRCLE_BRANCH": "main"}).tag == "v1"
		assert circleci_override({}, {"CIRCLECI": "true", "CIRCLE_BRANCH": "main"}).branch == "main"
		assert circleci_override({}, {"CIRCLECI": "true"}) is None

	def test_jenkins(self) -> None:
		"""Jenkins provides a tag or a branch."""
		assert jenkins_override({}, {"JENKINS_URL": "http://ci", "TAG_NAME": "v1"}).tag == "v1"
		assert jenkins_override({}, {"JENKINS_HOME": "/var/jenkins", "BRANCH_NAME": "dev"}).branch == "dev"
		assert jenkins_override({}, {"BRANCH_NAME": "dev"}) is None


@pytest.mark.unit
class TestDetectOverride:
	"""Test cases for detect_override."""

	def test_priority(self) -> None:
		"""Command options win over environment variables, which win over CI detection."""
		environment = {
			"VERSIONING_GIT_BRANCH": "from-env",
			"GITHUB_ACTIONS": "true",
			"GITHUB_REF": "refs/heads/from-ci",
		}

		assert detect_override({"git.branch": "from-option"}, environment).branch == "from-option"
		assert detect_override({}, environment).branch == "from-env"
		del environment["VERSIONING_GIT_BRANCH"]
		assert detect_override({}, environment).branch == "from-ci"

	def test_no_override(self) -> None:
		"""Without any source no override is detected."""
		assert detect_override({}, {}) is None

	def test_invalid_ref_propagates(self) -> None:
		"""Malformed refs are reported instead of ignored."""
		with pytest.raises(InvalidOverrideRefError):
			detect_override({"git.ref": "main"}, {})

	def test_custom_providers(self) -> None:
		"""Only the given providers are consulted."""
		assert detect_override({"git.branch": "dev"}, {}, providers=(environment_override,)) is None
