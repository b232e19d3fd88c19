"""Utility functions for CLI operations in gitversioning."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NoReturn

import typer
from rich.table import Table

from gitversioning.utils.log_setup import console, display_error_summary, display_warning_summary

if TYPE_CHECKING:
	from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


def parse_parameters(values: Iterable[str]) -> dict[str, str]:
	"""
	Parse ``key=value`` build parameters.

	A parameter without ``=`` is set to an empty string.

	Args:
		values: Raw ``-D`` values

	Returns:
		Mapping of parameter name to value

	Raises:
		typer.BadParameter: If a parameter has an empty name

	"""
	parameters: dict[str, str] = {}
	for value in values:
		key, _, parameter_value = value.partition("=")
		if not key.strip():
			msg = f"Invalid parameter '{value}', expected key=value"
			raise typer.BadParameter(msg)
		parameters[key.strip()] = parameter_value
	return parameters


def properties_table(title: str, properties: Mapping[str, str]) -> Table:
	"""Build a two column table of property names and values."""
	table = Table(title=title, show_header=True, header_style="bold")
	table.add_column("Property", style="cyan", no_wrap=True)
	table.add_column("Value")
	for name, value in sorted(properties.items()):
		table.add_row(name, value)
	return table


def show_error(message: str, exception: Exception | None = None) -> None:
	"""
	Display an error summary with standardized formatting.

	Args:
		message: The error message to display
		exception: Optional exception that caused the error

	"""
	error_text = message
	if exception:
		error_text += f"\n\nDetails: {exception!s}"
		logger.debug("Error occurred", exc_info=exception)

	display_error_summary(error_text)


def show_warning(message: str) -> None:
	"""
	Display a warning summary with standardized formatting.

	Args:
		message: The warning message to display

	"""
	display_warning_summary(message)


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> NoReturn:
	"""
	Display an error message and exit.

	Args:
		message: Error message to display
		exit_code: Exit code to use
		exception: Optional exception that caused the error

	"""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception


__all__ = ["console", "exit_with_error", "parse_parameters", "properties_table", "show_error", "show_warning"]
