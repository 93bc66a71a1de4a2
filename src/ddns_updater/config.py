"""
Configuration management for DDNS Updater.

This module handles loading and validating configuration from TOML files,
the environment and command-line arguments. Configuration priority
(high to low):
1. Command-line arguments
2. Environment variables (API token only)
3. Configuration file
4. Default values
"""

from __future__ import annotations

import argparse
import copy
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError

from ddns_updater.discovery import DEFAULT_TIMEOUT, DEFAULT_TRACE_URL
from ddns_updater.logging_config import DATE_FORMAT, LOG_FORMAT
from ddns_updater.providers.cloudflare import CF_API_BASE, HTTP_TIMEOUT

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any, Final

# Environment variable holding the CloudFlare API token
API_TOKEN_ENV: Final[str] = "CLOUDFLARE_API_TOKEN"

# Configure basic logging for early startup messages.
# This ensures log messages during config loading (before "setup_logging()" is called)
# are visible with proper formatting. The main logging setup in "setup_logging()"
# will reconfigure the "ddns_updater" logger with full settings later.
# Note: Logs from this logger will not be output to a file as the log file path has not been parsed yet.
logger_basic = logging.getLogger(__name__)
logger_basic.setLevel(logging.DEBUG)
handler = logging.StreamHandler()
formatter = logging.Formatter(
    fmt=LOG_FORMAT,
    datefmt=DATE_FORMAT,
)
handler.setFormatter(formatter)
logger_basic.addHandler(handler)
logger_basic.propagate = False


class ConfigValidationError(Exception):
    """
    Exception raised when configuration validation fails.

    This exception is raised when the TOML configuration contains
    invalid types or values, or a required option is missing.

    Attributes
    ----------
    message : str
        Human-readable error message describing the validation failures.
    config_path : Path | None
        Path to the configuration file that failed validation.
    """

    def __init__(self, message: str, config_path: Path | None = None) -> None:
        """
        Initialize ConfigValidationError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        config_path : Path | None, optional
            Path to the configuration file.
        """
        self.config_path = config_path
        super().__init__(message)


# Configuration models (Pydantic with type validation and coercion)


class UpdateConfig(BaseModel):
    """
    Update run configuration.

    Attributes
    ----------
    domain : str | None
        Fully qualified domain name whose records are updated.
    deadline : float
        Upper bound in seconds for the whole run.
    """

    domain: str | None = None
    deadline: float = Field(default=60.0, gt=0)


class ProbeConfig(BaseModel):
    """
    Address discovery configuration.

    Attributes
    ----------
    trace_url : str
        URL of the endpoint echoing the caller's address.
    timeout : float
        HTTP timeout in seconds for each probe.
    """

    trace_url: str = DEFAULT_TRACE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)


class CloudflareConfig(BaseModel):
    """
    CloudFlare API configuration.

    Attributes
    ----------
    api_token : str | None
        API Token; overridden by the CLOUDFLARE_API_TOKEN environment variable.
    api_base : str
        API base URL.
    timeout : float
        HTTP timeout in seconds for each API call.
    """

    api_token: str | None = None
    api_base: str = CF_API_BASE
    timeout: float = Field(default=HTTP_TIMEOUT, gt=0)


class LoggingConfig(BaseModel):
    """
    Logging configuration.

    Attributes
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    file_enabled : bool
        Whether to log to file.
    file_path : str
        Path to the log file.
    """

    level: str = "INFO"
    file_enabled: bool = False
    file_path: str = "/var/log/ddns-updater.log"

    @property
    def file_path_as_path(self) -> Path:
        """
        Get the log file path as a Path object.

        Returns
        -------
        Path
            The resolved log file path.
        """
        return Path(self.file_path)


class Config(BaseModel):
    """
    Application configuration.

    Attributes
    ----------
    update : UpdateConfig
        Update run configuration.
    probe : ProbeConfig
        Address discovery configuration.
    cloudflare : CloudflareConfig
        CloudFlare API configuration.
    logging : LoggingConfig
        Logging configuration.
    """

    update: UpdateConfig = UpdateConfig()
    probe: ProbeConfig = ProbeConfig()
    cloudflare: CloudflareConfig = CloudflareConfig()
    logging: LoggingConfig = LoggingConfig()


def _format_validation_errors(
    error: ValidationError,
    config_path: Path | None,
) -> str:
    """
    Format Pydantic validation errors into human-readable messages.

    Parameters
    ----------
    error : ValidationError
        Pydantic validation error.
    config_path : Path | None
        Path to the configuration file.

    Returns
    -------
    str
        Human-readable error message.
    """
    lines: list[str] = []

    if config_path:
        lines.append(f'Configuration error in "{config_path}":')
    else:
        lines.append("Configuration error:")

    for err in error.errors():
        # Build field path (e.g., "probe.timeout")
        field_path = ".".join(str(loc) for loc in err["loc"])

        # Get error details
        error_type = err["type"]
        error_input = err["input"]
        input_type = type(error_input).__name__

        # Format the value for display
        value_repr = (
            f'"{error_input}"' if isinstance(error_input, str) else repr(error_input)
        )

        expected_type = _get_expected_type(error_type)
        if expected_type is None:
            lines.append(f"  [{field_path}]: {err['msg']} (value: {value_repr}).")
        else:
            lines.append(
                f"  [{field_path}]: Expected {expected_type}, got {input_type} (value: {value_repr}). {err['msg']}.",
            )

    return "\n".join(lines)


def _get_expected_type(error_type: str) -> str | None:
    """
    Get human-readable expected type from Pydantic error type.

    Parameters
    ----------
    error_type : str
        Pydantic error type string.

    Returns
    -------
    str | None
        Human-readable type name, or None for non-type errors.
    """
    type_mapping = {
        "int_type": "int",
        "int_parsing": "int",
        "float_type": "float",
        "float_parsing": "float",
        "bool_type": "bool",
        "bool_parsing": "bool",
        "string_type": "str",
        "list_type": "list",
    }
    return type_mapping.get(error_type)


def validate_config_dict(
    data: dict[str, Any],
    config_path: Path | None = None,
) -> None:
    """
    Validate configuration dictionary using Pydantic.

    Parameters
    ----------
    data : dict[str, Any]
        Configuration dictionary to validate.
    config_path : Path | None, optional
        Path to the configuration file (for error messages).

    Raises
    ------
    ConfigValidationError
        If validation fails.
    """
    try:
        Config(**data)
    except ValidationError as e:
        msg = _format_validation_errors(e, config_path)
        raise ConfigValidationError(msg, config_path) from e


def check_required(config: Config, config_path: Path | None = None) -> None:
    """
    Check that the options needed for an update run are set.

    Parameters
    ----------
    config : Config
        Merged configuration.
    config_path : Path | None, optional
        Path to the configuration file (for error messages).

    Raises
    ------
    ConfigValidationError
        If the domain or the API token is missing.
    """
    missing: list[str] = []
    if not config.update.domain:
        missing.append("  [update.domain]: Missing domain (use -dns-domain).")
    if not config.cloudflare.api_token:
        missing.append(
            f"  [cloudflare.api_token]: Missing API token (set {API_TOKEN_ENV}).",
        )
    if missing:
        msg = "\n".join(["Configuration error:", *missing])
        raise ConfigValidationError(msg, config_path)


def load_config_from_file(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from a TOML file.

    Parameters
    ----------
    config_path : Path
        Path to the configuration file.

    Returns
    -------
    dict[str, Any]
        Parsed configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    tomllib.TOMLDecodeError
        If the configuration file is not valid TOML.
    """
    with config_path.open("rb") as f:
        return tomllib.load(f)


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    Parameters
    ----------
    base : dict[str, Any]
        Base configuration.
    override : dict[str, Any]
        Override configuration (takes precedence).

    Returns
    -------
    dict[str, Any]
        Merged configuration.
    """
    # Use deep copy to avoid modifying the original base configuration
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_config(result[key], value)
        else:
            result[key] = value
    return result


def dict_to_config(data: dict[str, Any]) -> Config:
    """
    Convert a dictionary to a Config object.

    Parameters
    ----------
    data : dict[str, Any]
        Configuration dictionary.

    Returns
    -------
    Config
        Configuration object.
    """
    # Handle file_path expansion before Pydantic validation
    if "logging" in data and "file_path" in data["logging"]:
        data = copy.deepcopy(data)
        data["logging"]["file_path"] = str(
            Path(data["logging"]["file_path"]).expanduser(),
        )

    return Config.model_validate(data)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Parameters
    ----------
    args : list[str] | None, optional
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="ddns-updater",
        description=(
            "DDNS Updater - Point A/AAAA records at this host's public addresses"
        ),
    )

    # Config arguments
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml)",
    )

    # Update arguments
    parser.add_argument(
        "-dns-domain",
        "--dns-domain",
        type=str,
        dest="dns_domain",
        default=None,
        help="Domain to update (e.g., home.example.com)",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Upper bound in seconds for the whole run",
    )

    # Network arguments
    parser.add_argument(
        "--trace-url",
        type=str,
        dest="trace_url",
        default=None,
        help="URL of the address echo endpoint",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds for each request",
    )

    # Logging arguments
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Log level",
    )
    log_file_group = parser.add_mutually_exclusive_group()
    log_file_group.add_argument(
        "--log-file-enabled",
        action="store_true",
        dest="log_file_enabled",
        default=None,
        help="Enable logging to file",
    )
    log_file_group.add_argument(
        "--log-file-disabled",
        action="store_false",
        dest="log_file_enabled",
        default=None,
        help="Disable logging to file",
    )
    parser.add_argument(
        "--log-file-path",
        type=Path,
        dest="log_file_path",
        default=None,
        help="Path to the log file",
    )

    return parser.parse_args(args)


def load_config(
    args: argparse.Namespace | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """
    Load configuration from file, environment and command-line arguments.

    Priority (high to low):
    1. Command-line arguments
    2. Environment variables
    3. Configuration file
    4. Default values

    Parameters
    ----------
    args : argparse.Namespace | None, optional
        Parsed command-line arguments.
    environ : Mapping[str, str] | None, optional
        Environment to read the API token from. If None, uses os.environ.

    Returns
    -------
    Config
        Loaded configuration.

    Raises
    ------
    ConfigValidationError
        If a value is invalid or the domain or API token is missing.
    """
    if args is None:
        args = parse_args()
    if environ is None:
        environ = os.environ

    # Start with empty config dict
    config_dict: dict[str, Any] = {}

    # Load from config file if specified or if default exists
    config_path = args.config
    if config_path is not None:
        config_path = config_path.expanduser()
    if config_path is None:
        default_config = Path("config.toml")
        if default_config.exists():
            config_path = default_config

    if config_path is not None:
        if config_path.exists():
            logger_basic.info('Loading configuration from "%s".', config_path)
            try:
                config_dict = load_config_from_file(config_path)
            except tomllib.TOMLDecodeError as e:
                logger_basic.critical('Failed to parse configuration file: "%s".', e)
                sys.exit(1)
        else:
            logger_basic.critical("Configuration file not found: %s", config_path)
            sys.exit(1)

    # Apply environment overrides
    env_overrides: dict[str, Any] = {}
    if api_token := environ.get(API_TOKEN_ENV):
        env_overrides.setdefault("cloudflare", {})["api_token"] = api_token

    # Apply command-line overrides
    cli_overrides: dict[str, Any] = {}

    # Update overrides
    if args.dns_domain is not None:
        cli_overrides.setdefault("update", {})["domain"] = args.dns_domain
    if args.deadline is not None:
        cli_overrides.setdefault("update", {})["deadline"] = args.deadline

    # Network overrides
    if args.trace_url is not None:
        cli_overrides.setdefault("probe", {})["trace_url"] = args.trace_url
    if args.timeout is not None:
        cli_overrides.setdefault("probe", {})["timeout"] = args.timeout
        cli_overrides.setdefault("cloudflare", {})["timeout"] = args.timeout

    # Logging overrides
    if args.log_level is not None:
        cli_overrides.setdefault("logging", {})["level"] = args.log_level
    if args.log_file_enabled is not None:
        cli_overrides.setdefault("logging", {})["file_enabled"] = args.log_file_enabled
    if args.log_file_path is not None:
        cli_overrides.setdefault("logging", {})["file_path"] = str(args.log_file_path)

    for overrides in (env_overrides, cli_overrides):
        if overrides:
            config_dict = merge_config(config_dict, overrides)

    # Validate merged configuration
    validate_config_dict(config_dict, config_path)

    config = dict_to_config(config_dict)
    check_required(config, config_path)
    return config
