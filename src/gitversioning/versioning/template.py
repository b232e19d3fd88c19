"""Rendering of ``${name}`` templates against a placeholder registry."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from gitversioning.versioning.errors import MissingPlaceholderError

if TYPE_CHECKING:
	from gitversioning.versioning.placeholders import PlaceholderRegistry

PLACEHOLDER_PATTERN = re.compile(r"\$\{(?P<key>[^}]+)\}")


def placeholders_in(template: str) -> list[str]:
	"""List the placeholder names referenced by ``template``, in order of appearance."""
	return [match.group("key") for match in PLACEHOLDER_PATTERN.finditer(template)]


def render(template: str, registry: PlaceholderRegistry) -> str:
	"""
	Substitute every ``${name}`` token in ``template`` with its registry value.

	Substitution is single pass, values are not scanned for further tokens.
	Slashes in the rendered result are replaced with dashes.

	Args:
		template: Template text
		registry: Placeholder values

	Returns:
		The rendered string

	Raises:
		MissingPlaceholderError: If a token names an unknown placeholder

	"""

	def substitute(match: re.Match[str]) -> str:
		key = match.group("key")
		if key not in registry:
			raise MissingPlaceholderError(key, template)
		return registry.get(key)

	return PLACEHOLDER_PATTERN.sub(substitute, template).replace("/", "-")
