"""Tests for version parsing and numeric increments."""

from __future__ import annotations

import pytest

from gitversioning.versioning.arithmetic import VersionComponents, increment, parse_version
from gitversioning.versioning.errors import NonNumericIncrementInputError


@pytest.mark.unit
@pytest.mark.parametrize(
	("number", "delta", "expected"),
	[
		("007", 1, "008"),
		("999", 1, "1000"),
		("0", 1, "1"),
		("", 1, "1"),
		("09", 3, "12"),
		("41", 0, "41"),
		("0010", 5, "0015"),
	],
)
def test_increment(number: str, delta: int, expected: str) -> None:
	"""Increments keep at least the width of the input."""
	assert increment(number, delta) == expected


@pytest.mark.unit
@pytest.mark.parametrize("number", ["1a", "-1", "1.0", " 1", "²"])
def test_increment_rejects_non_digits(number: str) -> None:
	"""Only plain digit strings can be incremented."""
	with pytest.raises(NonNumericIncrementInputError) as excinfo:
		increment(number)

	assert excinfo.value.value == number


@pytest.mark.unit
class TestParseVersion:
	"""Test cases for parse_version."""

	def test_full_version(self) -> None:
		"""All components are extracted."""
		assert parse_version("1.2.3-rc.1") == VersionComponents(
			core="1.2.3", major="1", minor="2", patch="3", label="rc.1"
		)

	def test_prefix_is_ignored(self) -> None:
		"""A leading non-numeric prefix such as ``v`` is skipped."""
		assert parse_version("v4.5.6").core == "4.5.6"

	def test_missing_components_default_to_zero(self) -> None:
		"""Missing minor and patch components are zero."""
		components = parse_version("7")

		assert components.core == "7"
		assert components.minor == "0"
		assert components.patch == "0"
		assert components.label == ""

	def test_label_without_patch(self) -> None:
		"""A label may follow a partial version."""
		components = parse_version("2.0-beta")

		assert components.major == "2"
		assert components.minor == "0"
		assert components.patch == "0"
		assert components.label == "beta"

	def test_no_numbers(self) -> None:
		"""Without a numeric prefix the core is 0.0.0."""
		assert parse_version("release") == VersionComponents()
		assert parse_version("").core == "0.0.0"

	def test_width_is_preserved(self) -> None:
		"""Components keep their leading zeros."""
		assert parse_version("2024.01.007").patch == "007"
