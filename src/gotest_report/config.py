"""Configuration for gotest-report.

Configuration precedence (highest to lowest):
1. Command-line options
2. Environment variables (GOTEST_REPORT_*)
3. YAML configuration file (--config or GOTEST_REPORT_CONFIG)
4. Default values
"""

import os
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from loguru import logger

from .errors import ConfigurationError
from .writers import REPORT_FORMATS

ENV_PREFIX = "GOTEST_REPORT_"
CONFIG_FILE_ENV = ENV_PREFIX + "CONFIG"

# Environment variable suffix -> config field
ENV_FIELDS = {
    "OUTPUT": "output_path",
    "FORMAT": "output_format",
    "LOG_LEVEL": "log_level",
    "LOG_FILE": "log_file",
}

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def default_output_path() -> Path:
    return Path(tempfile.gettempdir()) / "cov" / "cov.xml"


@dataclass
class ReportConfig:
    """Settings for one gotest-report run."""

    output_path: Optional[Path] = None
    output_format: str = "xml"
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        if self.output_path is None:
            self.output_path = default_output_path()
        self.output_path = Path(self.output_path)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
        self.output_format = str(self.output_format).lower()
        self.log_level = str(self.log_level).upper()
        self.validate()

    def validate(self) -> None:
        """Check values that cannot be caught by types alone."""
        if self.output_format not in REPORT_FORMATS:
            raise ConfigurationError(
                f"output_format must be one of {', '.join(REPORT_FORMATS)}, "
                f"got {self.output_format!r}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load settings from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, unparseable, not a mapping
            or names unknown settings
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"configuration file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping of settings")

    known = {f.name for f in fields(ReportConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"unknown settings in {path}: {', '.join(unknown)}")
    return data


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> ReportConfig:
    """
    Build the effective configuration.

    Args:
        config_file: Optional YAML file; falls back to GOTEST_REPORT_CONFIG
        environ: Environment to read (defaults to os.environ)
        **overrides: Command-line values; None means "not given"

    Returns:
        Validated ReportConfig
    """
    environ = os.environ if environ is None else environ
    settings: Dict[str, Any] = {}

    config_file = config_file or environ.get(CONFIG_FILE_ENV)
    if config_file:
        settings.update(load_config_file(config_file))
        logger.debug("Loaded configuration from {}", config_file)

    for suffix, name in ENV_FIELDS.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value:
            settings[name] = value

    settings.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ReportConfig(**settings)
    except TypeError as e:
        raise ConfigurationError(str(e)) from e
