"""Command options that override configuration values."""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
	from collections.abc import Mapping

OPTION_DISABLE = "versioning.disable"
OPTION_PREFER_TAGS = "versioning.preferTags"
OPTION_UPDATE_PROPERTIES_FILE = "versioning.updatePropertiesFile"
OPTION_GIT_BRANCH = "git.branch"
OPTION_GIT_TAG = "git.tag"
OPTION_GIT_REF = "git.ref"

ENV_PREFIX = "VERSIONING_"


def option_env_name(name: str) -> str:
	"""
	Map an option name to its environment variable.

	``versioning.preferTags`` becomes ``VERSIONING_PREFER_TAGS`` and
	``git.branch`` becomes ``VERSIONING_GIT_BRANCH``.

	"""
	plain_name = name.removeprefix("versioning.")
	words = re.sub(r"(?<!^)(?=[A-Z])", "_", plain_name)
	return ENV_PREFIX + words.replace(".", "_").upper()


def parse_boolean(value: str) -> bool:
	"""Parse a boolean option: only ``true``, in any case, is true."""
	return value.strip().lower() == "true"


def get_command_option(
	name: str,
	parameters: Mapping[str, Any] | None = None,
	environment: Mapping[str, str] | None = None,
) -> str | None:
	"""
	Look up a command option.

	Args:
		name: Option name, e.g. ``versioning.disable``
		parameters: ``-D`` style build parameters, consulted first
		environment: Environment variables (defaults to ``os.environ``)

	Returns:
		The option value, or None if it is not set

	"""
	value = (parameters or {}).get(name)
	if value is not None:
		return str(value)
	env = os.environ if environment is None else environment
	return env.get(option_env_name(name))


def get_boolean_option(
	name: str,
	parameters: Mapping[str, Any] | None = None,
	environment: Mapping[str, str] | None = None,
) -> bool | None:
	"""Look up a boolean command option, None if it is not set."""
	value = get_command_option(name, parameters, environment)
	return None if value is None else parse_boolean(value)
