"""Warden CLI commands."""

from .preflight import preflight
from .run import run
from .validate import validate_config

__all__ = ["preflight", "run", "validate_config"]
