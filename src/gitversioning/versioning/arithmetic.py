"""Version string parsing and width-preserving numeric increments."""

from __future__ import annotations

import re
from dataclasses import dataclass

from gitversioning.versioning.errors import NonNumericIncrementInputError

VERSION_PATTERN = re.compile(
	r"(?P<core>(?P<major>\d+)(?:\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?)?)(?:-(?P<label>.*))?"
)
NUMERIC_FIELDS = ("major", "minor", "patch")


@dataclass(frozen=True)
class VersionComponents:
	"""Components of a dotted version string."""

	core: str = "0.0.0"
	major: str = "0"
	minor: str = "0"
	patch: str = "0"
	label: str = ""


def parse_version(value: str) -> VersionComponents:
	"""
	Parse ``major[.minor[.patch]][-label]`` out of ``value``.

	Missing numeric components default to ``"0"``, a missing numeric prefix
	yields a core of ``"0.0.0"`` and a missing label yields ``""``.

	Args:
		value: Version-like string, e.g. ``1.2.3-rc.1``

	Returns:
		The parsed components

	"""
	match = VERSION_PATTERN.search(value)
	if match is None:
		return VersionComponents()
	return VersionComponents(
		core=match.group("core"),
		major=match.group("major"),
		minor=match.group("minor") or "0",
		patch=match.group("patch") or "0",
		label=match.group("label") or "",
	)


def increment(number: str, delta: int = 1) -> str:
	"""
	Add ``delta`` to a decimal string, keeping at least its original width.

	Args:
		number: Digits to increment, an empty string counts as ``"0"``
		delta: Amount to add

	Returns:
		The incremented number, zero padded to the input width

	Raises:
		NonNumericIncrementInputError: If ``number`` contains non-digit characters

	"""
	if number == "":
		number = "0"
	if not number.isascii() or not number.isdigit():
		raise NonNumericIncrementInputError(number)
	return str(int(number) + delta).zfill(len(number))
