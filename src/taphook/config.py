# Copyright 2026 Pennyworth Technologies, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration system for the taphook CLI.

Provides hierarchical configuration with precedence:
1. CLI flags (highest)
2. Environment variables
3. Project config (./.taphook.json)
4. Global config (~/.taphook.json)
5. Hardcoded defaults (lowest)
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from taphook.dispatch.templates import DEFAULT_TEMPLATE, TEMPLATES

logger = logging.getLogger(__name__)

# Valid values for enums
VALID_OUTPUT_FORMATS = ("text", "json")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Hardcoded defaults
DEFAULT_OUTPUT_FORMAT = "text"
DEFAULT_LOG_LEVEL = "WARNING"

CONFIG_FILE_NAME = ".taphook.json"

# Environment variable names
ENV_TEMPLATE = "TAPHOOK_TEMPLATE"
ENV_OUTPUT_FORMAT = "TAPHOOK_OUTPUT_FORMAT"
ENV_LOG_LEVEL = "TAPHOOK_LOG_LEVEL"


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


class ConfigLoadError(Exception):
    """Raised when configuration file cannot be loaded."""

    pass


@dataclass
class DefaultsConfig:
    """Default configuration values."""

    template: str = DEFAULT_TEMPLATE
    output_format: str = DEFAULT_OUTPUT_FORMAT
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> None:
        """Validate configuration values."""
        if self.template not in TEMPLATES:
            raise ConfigValidationError(
                f"Invalid template '{self.template}'. "
                f"Valid values: {', '.join(TEMPLATES)}"
            )
        if self.output_format not in VALID_OUTPUT_FORMATS:
            raise ConfigValidationError(
                f"Invalid output_format '{self.output_format}'. "
                f"Valid values: {', '.join(VALID_OUTPUT_FORMATS)}"
            )
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"Invalid log_level '{self.log_level}'. "
                f"Valid values: {', '.join(VALID_LOG_LEVELS)}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "template": self.template,
            "output_format": self.output_format,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], strict: bool = False
    ) -> "DefaultsConfig":
        """Create from dictionary."""
        if strict:
            known_fields = {f.name for f in fields(cls)}
            unknown = set(data.keys()) - known_fields
            if unknown:
                raise ConfigValidationError(
                    f"Unknown fields in defaults config: {', '.join(sorted(unknown))}"
                )

        return cls(
            template=data.get("template", DEFAULT_TEMPLATE),
            output_format=data.get("output_format", DEFAULT_OUTPUT_FORMAT),
            log_level=data.get("log_level", DEFAULT_LOG_LEVEL),
        )


@dataclass
class TaphookConfig:
    """Complete taphook configuration."""

    version: str = "1"
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    def validate(self) -> None:
        self.defaults.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "version": self.version,
            "defaults": self.defaults.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], strict: bool = False) -> "TaphookConfig":
        """Create from dictionary."""
        if strict:
            unknown = set(data.keys()) - {"version", "defaults"}
            if unknown:
                raise ConfigValidationError(
                    f"Unknown fields in config: {', '.join(sorted(unknown))}"
                )

        return cls(
            version=data.get("version", "1"),
            defaults=DefaultsConfig.from_dict(data.get("defaults", {}), strict),
        )


def get_global_config_path() -> Path:
    """Get path to global config file."""
    return Path.home() / CONFIG_FILE_NAME


def get_project_config_path(project_dir: Path | None = None) -> Path:
    """Get path to project config file."""
    return (project_dir or Path.cwd()) / CONFIG_FILE_NAME


def load_config_file(path: Path, strict: bool = False) -> TaphookConfig:
    """Load configuration from a JSON file.

    Args:
        path: Path to the config file
        strict: If True, fail on unknown fields

    Returns:
        TaphookConfig instance; defaults when the file does not exist

    Raises:
        ConfigLoadError: If file cannot be read or parsed
        ConfigValidationError: If strict=True and unknown fields found
    """
    if not path.exists():
        return TaphookConfig()

    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigLoadError(f"Error reading {path}: {e}")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config in {path} must be a JSON object")

    logger.debug("Loaded config from %s", path)
    return TaphookConfig.from_dict(data, strict=strict)


def merge_configs(*configs: TaphookConfig) -> TaphookConfig:
    """Merge multiple configs with later configs taking precedence.

    Values left at their defaults in later configs do NOT override
    earlier values, so partial configs layer properly.
    """
    if not configs:
        return TaphookConfig()

    result = copy.deepcopy(configs[0])

    for config in configs[1:]:
        if config.defaults.template != DEFAULT_TEMPLATE:
            result.defaults.template = config.defaults.template
        if config.defaults.output_format != DEFAULT_OUTPUT_FORMAT:
            result.defaults.output_format = config.defaults.output_format
        if config.defaults.log_level != DEFAULT_LOG_LEVEL:
            result.defaults.log_level = config.defaults.log_level

    return result


def apply_env_overrides(config: TaphookConfig) -> TaphookConfig:
    """Apply environment variable overrides to config.

    Args:
        config: Base configuration

    Returns:
        New config with env var overrides applied
    """
    result = copy.deepcopy(config)

    if template := os.environ.get(ENV_TEMPLATE):
        result.defaults.template = template

    if output_format := os.environ.get(ENV_OUTPUT_FORMAT):
        result.defaults.output_format = output_format

    if log_level := os.environ.get(ENV_LOG_LEVEL):
        result.defaults.log_level = log_level.upper()

    return result


def get_config(project_dir: Path | None = None) -> TaphookConfig:
    """Load and merge configuration from all sources.

    Loads in order (later sources override earlier):
    1. Hardcoded defaults
    2. Global config (~/.taphook.json)
    3. Project config (./.taphook.json)
    4. Environment variables

    Raises:
        ConfigValidationError: If the merged configuration is invalid
    """
    global_config = load_config_file(get_global_config_path())
    project_config = load_config_file(get_project_config_path(project_dir))

    merged = merge_configs(TaphookConfig(), global_config, project_config)
    result = apply_env_overrides(merged)
    result.validate()
    return result
