"""Selection of the versioning rule that applies to a repository snapshot."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from gitversioning.versioning.errors import NoMatchingRuleError
from gitversioning.versioning.models import MatchResult, RefType, RepositorySnapshot, Rule
from gitversioning.versioning.patterns import extract_groups

if TYPE_CHECKING:
	from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

_TAG_VERSION = re.compile(r"^(?P<prefix>\D*)(?P<numbers>\d+(?:\.\d+)*)?(?P<label>.*)$", re.DOTALL)


def tag_version_key(tag: str) -> tuple[tuple[int, ...], int, str, str]:
	"""
	Sort key ordering tags by the version they carry.

	Dot separated numbers compare numerically with missing components counting
	as zero. For equal numbers a tag without a label ranks above labelled
	(pre-release) tags, labels compare lexically, and the tag itself breaks
	any remaining tie.

	Args:
		tag: Tag name, e.g. ``v1.2.0-rc.1``

	Returns:
		A tuple usable as a sort key

	"""
	match = _TAG_VERSION.match(tag)
	numbers_text = match.group("numbers") if match else None
	label = match.group("label") if match else tag
	numbers = [int(part) for part in numbers_text.split(".")] if numbers_text else []
	while numbers and numbers[-1] == 0:
		numbers.pop()
	return tuple(numbers), 0 if label else 1, label, tag


def _match(rule: Rule, ref_type: RefType, ref_name: str) -> MatchResult:
	groups = extract_groups(rule.pattern, ref_name) if rule.pattern is not None else {}
	return MatchResult(rule=rule, ref_type=ref_type, ref_name=ref_name, groups=groups)


def _match_branch(branch: str, branch_rules: Iterable[Rule]) -> MatchResult | None:
	for rule in branch_rules:
		if rule.matches(branch):
			return _match(rule, RefType.BRANCH, branch)
	return None


def _match_tags(tags: Sequence[str], tag_rules: Iterable[Rule]) -> MatchResult | None:
	for rule in tag_rules:
		candidates = [tag for tag in tags if rule.matches(tag)]
		if candidates:
			return _match(rule, RefType.TAG, max(candidates, key=tag_version_key))
	return None


def resolve(
	snapshot: RepositorySnapshot,
	branch_rules: Sequence[Rule],
	tag_rules: Sequence[Rule],
	commit_rule: Rule | None,
	*,
	prefer_tags: bool = False,
) -> MatchResult:
	"""
	Select the rule for ``snapshot``.

	Branch rules apply when HEAD is on a branch, tag rules when HEAD is
	detached and tagged (or first, when ``prefer_tags`` is set). The commit rule
	is the fallback. Within each list the first matching rule wins.

	Args:
		snapshot: Repository state
		branch_rules: Ordered branch rules
		tag_rules: Ordered tag rules
		commit_rule: Fallback rule, if any
		prefer_tags: Try tag rules before branch rules

	Returns:
		The match

	Raises:
		NoMatchingRuleError: If nothing matches and there is no usable commit rule

	"""
	result: MatchResult | None = None

	if snapshot.tags and (prefer_tags or snapshot.is_detached):
		result = _match_tags(snapshot.tags, tag_rules)

	if result is None and snapshot.branch is not None:
		result = _match_branch(snapshot.branch, branch_rules)

	if result is None and commit_rule is not None and commit_rule.matches(snapshot.commit):
		result = _match(commit_rule, RefType.COMMIT, snapshot.commit)

	if result is None:
		if snapshot.branch is not None:
			raise NoMatchingRuleError(RefType.BRANCH.value, snapshot.branch)
		raise NoMatchingRuleError(RefType.COMMIT.value, snapshot.commit)

	logger.debug("Matched %s rule %s for '%s'", result.ref_type.value, result.rule.name, result.ref_name)
	return result
