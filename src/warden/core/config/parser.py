"""Configuration file loading.

Reads a YAML file and validates it against ``WardenConfig``. Known failure
modes (missing file, YAML syntax, schema violations) come back as
``Err(WardenError)`` with code CONFIG_VALIDATION_FAILED, so callers never
need to catch for them.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from warden.core.errors import ErrorCategory, ErrorCode, WardenError
from warden.core.result import Err, Ok, Result

from .models import DistributedConfig, WardenConfig


def _config_error(message: str, config_path: Path, **context: object) -> Err[WardenError]:
    return Err(
        WardenError(
            message,
            ErrorCategory.CONFIG,
            False,
            {"config_path": str(config_path), **context},
            ErrorCode.CONFIG_VALIDATION_FAILED,
        )
    )


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def parse_config_string(text: str, source: Path | None = None) -> Result[WardenConfig, WardenError]:
    """Parse and validate configuration from a YAML string."""
    config_path = source or Path("<string>")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return _config_error(f"Invalid YAML in {config_path}: {e}", config_path)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return _config_error(
            f"Configuration root must be a mapping, got {type(data).__name__}",
            config_path,
        )

    try:
        return Ok(WardenConfig.model_validate(data))
    except ValidationError as e:
        return _config_error(
            f"Configuration validation failed: {_format_validation_error(e)}",
            config_path,
            error_count=e.error_count(),
        )


def parse_config(config_path: Path | str) -> Result[WardenConfig, WardenError]:
    """Load and validate a configuration file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Ok(WardenConfig) or Err(WardenError) with CONFIG_VALIDATION_FAILED.
    """
    path = Path(config_path)
    if not path.is_file():
        return _config_error(f"Configuration file not found: {path}", path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return _config_error(f"Cannot read configuration file {path}: {e}", path)
    return parse_config_string(text, source=path)


def distribute_config(config: WardenConfig | None) -> DistributedConfig:
    """Flatten a parsed config into the per-agent view."""
    if config is None:
        return DistributedConfig()
    rules = config.rules
    return DistributedConfig(
        avoid=list(rules.avoid) if rules else [],
        focus=list(rules.focus) if rules else [],
        authentication=config.authentication,
    )


__all__ = ["distribute_config", "parse_config", "parse_config_string"]
