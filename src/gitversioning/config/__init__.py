"""Configuration for gitversioning."""

from gitversioning.config.config_loader import (
	ConfigError,
	ConfigFileNotFoundError,
	ConfigLoader,
	ConfigParsingError,
)
from gitversioning.config.config_schema import AppConfigSchema, RuleSchema

__all__ = [
	"AppConfigSchema",
	"ConfigError",
	"ConfigFileNotFoundError",
	"ConfigLoader",
	"ConfigParsingError",
	"RuleSchema",
]
