"""
Branch and tag overrides supplied by the build environment.

CI systems usually check out a detached commit, so the branch or tag being
built has to be read from their environment instead of the repository.
Providers are tried in order and the first one returning a value wins.

"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from gitversioning.config.options import OPTION_GIT_BRANCH, OPTION_GIT_REF, OPTION_GIT_TAG, option_env_name
from gitversioning.versioning.errors import InvalidOverrideRefError

if TYPE_CHECKING:
	from collections.abc import Sequence

	from gitversioning.versioning.models import RepositorySnapshot

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"
TAG_REF_PREFIX = "refs/tags/"


@dataclass(frozen=True)
class RefOverride:
	"""Branch and/or tag the build should be versioned as."""

	branch: str | None = None
	tag: str | None = None
	source: str = ""

	@property
	def is_empty(self) -> bool:
		"""Whether neither a branch nor a tag is set."""
		return self.branch is None and self.tag is None

	def apply(self, snapshot: RepositorySnapshot) -> RepositorySnapshot:
		"""
		Apply the override to ``snapshot``.

		A tag override detaches HEAD and replaces the tags (an empty tag clears
		them), a branch override then sets the branch.

		"""
		if self.tag is not None:
			logger.debug("set git head tag by %s: %s", self.source, self.tag)
			snapshot = replace(snapshot, branch=None, tags=(self.tag,) if self.tag else ())
		if self.branch is not None:
			logger.debug("set git head branch by %s: %s", self.source, self.branch)
			snapshot = replace(snapshot, branch=self.branch)
		return snapshot


OverrideProvider = Callable[[Mapping[str, Any], Mapping[str, str]], RefOverride | None]


def parse_ref(ref: str, source: str) -> RefOverride:
	"""
	Parse a full ref name into a branch or tag override.

	Raises:
		InvalidOverrideRefError: If ``ref`` is neither a branch nor a tag ref

	"""
	if ref.startswith(BRANCH_REF_PREFIX):
		return RefOverride(branch=ref.removeprefix(BRANCH_REF_PREFIX), source=source)
	if ref.startswith(TAG_REF_PREFIX):
		return RefOverride(tag=ref.removeprefix(TAG_REF_PREFIX), source=source)
	raise InvalidOverrideRefError(ref, source)


def command_option_override(parameters: Mapping[str, Any], environment: Mapping[str, str]) -> RefOverride | None:
	"""Override from ``-Dgit.branch``, ``-Dgit.tag`` or ``-Dgit.ref`` parameters."""
	return _options_override(
		parameters.get(OPTION_GIT_BRANCH),
		parameters.get(OPTION_GIT_TAG),
		parameters.get(OPTION_GIT_REF),
		"command option",
	)


def environment_override(parameters: Mapping[str, Any], environment: Mapping[str, str]) -> RefOverride | None:
	"""Override from ``VERSIONING_GIT_BRANCH``, ``VERSIONING_GIT_TAG`` or ``VERSIONING_GIT_REF``."""
	return _options_override(
		environment.get(option_env_name(OPTION_GIT_BRANCH)),
		environment.get(option_env_name(OPTION_GIT_TAG)),
		environment.get(option_env_name(OPTION_GIT_REF)),
		"environment variable",
	)


def _options_override(branch: Any, tag: Any, ref: Any, source: str) -> RefOverride | None:
	if ref is not None:
		return parse_ref(str(ref), source)
	if branch is None and tag is None:
		return None
	return RefOverride(
		branch=None if branch is None else str(branch),
		tag=None if tag is None else str(tag),
		source=source,
	)


def github_actions_override(parameters: Mapping[str, Any], environment: Mapping[str, str]) -> RefOverride | None:
	"""Override from GitHub Actions' ``GITHUB_REF`` (``GITHUB_HEAD_REF`` for pull requests)."""
	if environment.get("GITHUB_ACTIONS") != "true":
		return None
	source = "GitHub Actions"
	if environment.get("GITHUB_EVENT_NAME", "").startswith("pull_request"):
		head_ref = environment.get("GITHUB_HEAD_REF")
		return RefOverride(branch=head_ref, source=source) if head_ref else None
	ref = environment.get("GITHUB_REF")
	return parse_ref(ref, source) if ref else None


def gitlab_ci_override(parameters: Mapping[str, Any], environment: Mapping[str, str]) -> RefOverride | None:
	"""Override from GitLab CI's ``CI_COMMIT_TAG`` / ``CI_COMMIT_BRANCH`` variables."""
	if environment.get("GITLAB_CI") != "true":
		return None
	source = "GitLab CI"
	if environment.get("CI_COMMIT_TAG"):
		return RefOverride(tag=environment["CI_COMMIT_TAG"], source=source)
	branch = (
		environment.get("CI_MERGE_REQUEST_SOURCE_BRANCH_NAME")
		or environment.get("CI_COMMIT_BRANCH")
		or environment.get("CI_COMMIT_REF_NAME")
	)
	return RefOverride(branch=branch, source=source) if branch else None


def circleci_override(parameters: Mapping[str, Any], environment: Mapping[str, str]) -> RefOverride | None:
	"""Override from CircleCI's ``CIRCLE_TAG`` / ``CIRCLE_BRANCH`` variables."""
	if environment.get("CIRCLECI") != "true":
		return None
	source = "CircleCI"
	if environment.get("CIRCLE_TAG"):
		return RefOverride(tag=environment["CIRCLE_TAG"], source=source)
	if environment.get("CIRCLE_BRANCH"):
		return RefOverride(branch=environment["CIRCLE_BRANCH"], source=source)
	return None


def jenkins_override(parameters: Mapping[str, Any], environment: Mapping[str, str]) -> RefOverride | None:
	"""Override from Jenkins' ``TAG_NAME`` / ``BRANCH_NAME`` variables."""
	if not (environment.get("JENKINS_HOME") or environment.get("JENKINS_URL")):
		return None
	source = "Jenkins"
	if environment.get("TAG_NAME"):
		return RefOverride(tag=environment["TAG_NAME"], source=source)
	branch = environment.get("BRANCH_NAME") or environment.get("GIT_LOCAL_BRANCH")
	return RefOverride(branch=branch, source=source) if branch else None


DEFAULT_PROVIDERS: tuple[OverrideProvider, ...] = (
	command_option_override,
	environment_override,
	github_actions_override,
	gitlab_ci_override,
	circleci_override,
	jenkins_override,
)


def detect_override(
	parameters: Mapping[str, Any] | None = None,
	environment: Mapping[str, str] | None = None,
	providers: Sequence[OverrideProvider] = DEFAULT_PROVIDERS,
) -> RefOverride | None:
	"""
	Find the ref override of the build environment.

	Args:
		parameters: ``-D`` style build parameters
		environment: Environment variables (defaults to ``os.environ``)
		providers: Providers to try, in priority order

	Returns:
		The first non-empty override, or None

	Raises:
		InvalidOverrideRefError: If a provider finds a malformed ref

	"""
	parameters = parameters or {}
	environment = os.environ if environment is None else environment
	for provider in providers:
		override = provider(parameters, environment)
		if override is not None and not override.is_empty:
			logger.debug("Using ref override from %s", override.source)
			return override
	return None
