"""Configuration system for folder-size application.

This module implements the configuration schema using Pydantic for
validation, with support for environment variable resolution and fail-fast
validation with actionable error messages.
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Final

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from folder_size.core.data.filesystem.ignore_file import DEFAULT_IGNORE_FILE
from folder_size.core.data.filesystem.limiter import DEFAULT_CONCURRENCY_LIMIT
from folder_size.core.orchestrator import DEFAULT_TARGET_FOLDERS, DEFAULT_TOP_CHILDREN

# Matches ${VARIABLE_NAME} syntax where VARIABLE_NAME can contain letters, digits, and underscores
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Z0-9_]+)\}")


class AnalysisConfig(BaseModel):
    """Configuration for folder size analysis.

    Defines how walks are bounded and pruned and which folders a workspace
    analysis reports on.
    """

    concurrency_limit: Annotated[
        int,
        Field(
            ge=1,
            description="Maximum number of filesystem syscalls in flight",
        ),
    ] = DEFAULT_CONCURRENCY_LIMIT
    ignore_patterns: Annotated[
        list[str],
        Field(
            description="Glob patterns matched against absolute paths to prune from walks",
        ),
    ] = []
    ignore_file: Annotated[
        str,
        Field(
            min_length=1,
            description="Ignore file name relative to the workspace root",
        ),
    ] = DEFAULT_IGNORE_FILE
    target_folders: Annotated[
        list[str],
        Field(
            description="Folder names analyzed relative to the workspace root",
        ),
    ] = list(DEFAULT_TARGET_FOLDERS)
    decimals: Annotated[
        int,
        Field(
            ge=0,
            description="Decimal places for formatted sizes",
        ),
    ] = 2
    top_children: Annotated[
        int,
        Field(
            gt=0,
            description="Rows shown when ranking a directory's children",
        ),
    ] = DEFAULT_TOP_CHILDREN

    @field_validator("ignore_patterns", mode="after")
    @classmethod
    def validate_patterns_not_blank(cls, v: list[str]) -> list[str]:
        """Validate that no ignore pattern is blank.

        Args:
            v: List of glob patterns

        Returns:
            Patterns with surrounding whitespace removed

        Raises:
            ValueError: If a pattern is empty after trimming
        """
        patterns = [pattern.strip() for pattern in v]
        if any(not pattern for pattern in patterns):
            msg = "Ignore patterns must not be empty"
            raise ValueError(msg)
        return patterns

    @field_validator("target_folders", mode="after")
    @classmethod
    def validate_target_folders_relative(cls, v: list[str]) -> list[str]:
        """Validate that target folders are non-empty relative names.

        Args:
            v: List of folder names

        Returns:
            Validated folder names

        Raises:
            ValueError: If a folder name is empty or absolute
        """
        for folder in v:
            if not folder or Path(folder).is_absolute():
                msg = f"Target folder must be a relative name, got: {folder!r}"
                raise ValueError(msg)
        return v


class ApplicationConfig(BaseModel):
    """Configuration for application-level settings."""

    log_level: Annotated[
        str,
        Field(
            description="Logging level",
            pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        ),
    ] = "INFO"
    syslog_enabled: Annotated[
        bool,
        Field(
            description="Enable syslog integration",
        ),
    ] = False


class MainConfig(BaseModel):
    """Main application configuration schema.

    Top-level configuration container aggregating all configuration sections:
    - analysis: Walk bounds, ignore patterns and workspace targets
    - application: Application-level settings

    Every section has defaults, so an empty file is a valid configuration.
    """

    analysis: Annotated[
        AnalysisConfig,
        Field(
            description="Folder size analysis configuration",
        ),
    ] = AnalysisConfig()
    application: Annotated[
        ApplicationConfig,
        Field(
            description="Application-level configuration",
        ),
    ] = ApplicationConfig()


class EnvironmentVariableError(Exception):
    """Exception raised when environment variable resolution fails.

    This exception is raised when a required environment variable is missing.
    """


def resolve_env_var(value: str) -> str:
    """Resolve environment variable references in a string value.

    Parses ${VARIABLE_NAME} syntax and replaces with environment variable values.
    Supports multiple environment variable references in a single string.

    Args:
        value: String potentially containing environment variable references

    Returns:
        String with environment variables resolved

    Raises:
        EnvironmentVariableError: If a required environment variable is missing

    Examples:
        >>> os.environ["WORKSPACE"] = "/work"
        >>> resolve_env_var("${WORKSPACE}/node_modules/**")
        '/work/node_modules/**'
        >>> resolve_env_var("no variables here")
        'no variables here'
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)

        if env_value is None:
            msg = (
                f"Required environment variable '{var_name}' is not set. "
                f"Please set this variable before starting the application."
            )
            raise EnvironmentVariableError(msg)

        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _resolve_env_vars_in_value(value: object) -> object:
    if isinstance(value, str):
        return resolve_env_var(value)
    if isinstance(value, dict):
        # YAML data is untyped at load time; validated by Pydantic after resolution
        return resolve_env_vars_in_dict(value)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    if isinstance(value, list):
        return [_resolve_env_vars_in_value(item) for item in value]  # pyright: ignore[reportUnknownVariableType]  # YAML list items
    return value


def resolve_env_vars_in_dict(data: Mapping[str, object]) -> dict[str, object]:
    """Recursively resolve environment variables in a dictionary.

    Traverses nested dictionaries and lists, resolving environment variable
    references in string values. Non-string values are preserved as-is.

    Args:
        data: Dictionary potentially containing environment variable references

    Returns:
        New dictionary with environment variables resolved

    Raises:
        EnvironmentVariableError: If a required environment variable is missing

    Examples:
        >>> os.environ["WORKSPACE"] = "/work"
        >>> resolve_env_vars_in_dict({"analysis": {"ignore_patterns": ["${WORKSPACE}/tmp/**"]}})
        {'analysis': {'ignore_patterns': ['/work/tmp/**']}}
    """
    return {key: _resolve_env_vars_in_value(value) for key, value in data.items()}


class ConfigurationError(Exception):
    """Exception raised when configuration loading or validation fails.

    This exception provides detailed, actionable error messages for configuration
    issues including file not found, YAML parsing errors, and validation failures.
    """


def load_main_config(config_path: Path) -> MainConfig:
    """Load and validate main application configuration from YAML file.

    Loads the configuration file, resolves environment variables, and
    validates against the MainConfig schema. An empty file yields defaults.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Validated MainConfig instance

    Raises:
        ConfigurationError: If configuration file cannot be loaded or is invalid

    Examples:
        >>> config = load_main_config(Path("folder-size.yaml"))
        >>> config.analysis.concurrency_limit
        8
    """
    if not config_path.exists():
        msg = (
            f"Configuration file not found: {config_path}\n"
            f"Please create a configuration file at this location.\n"
            f"See documentation for configuration file format."
        )
        raise ConfigurationError(msg)

    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = (
            f"Failed to parse YAML configuration file: {config_path}\n"
            f"YAML parsing error: {e}\n"
            f"Please check the file for syntax errors."
        )
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Failed to read configuration file: {config_path}\nError: {e}\nPlease check file permissions."
        raise ConfigurationError(msg) from e

    if raw_data is None:
        raw_data = {}

    if not isinstance(raw_data, dict):
        msg = (
            f"Invalid configuration file format: {config_path}\n"
            f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}\n"
            f"Configuration file must contain key-value pairs."
        )
        raise ConfigurationError(msg)

    try:
        resolved_data = resolve_env_vars_in_dict(raw_data)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    except EnvironmentVariableError as e:
        msg = (
            f"Environment variable resolution failed in: {config_path}\n"
            f"{e}\n"
            f"Set the required environment variable before starting the application."
        )
        raise ConfigurationError(msg) from e

    try:
        config = MainConfig.model_validate(resolved_data)
    except ValidationError as e:
        error_lines = ["Configuration validation failed:", ""]
        for error in e.errors():
            field_path = " → ".join(str(loc) for loc in error["loc"])
            error_lines.append(f"  Field: {field_path}")
            error_lines.append(f"  Error: {error['msg']}")
            error_lines.append(f"  Type: {error['type']}")
            error_lines.append("")

        error_lines.append(f"Configuration file: {config_path}")
        error_lines.append("Please fix the above errors and try again.")

        msg = "\n".join(error_lines)
        raise ConfigurationError(msg) from e

    return config
