"""Configuration for Warden runs.

Pydantic models for the optional YAML configuration file, its loader, and
the environment-derived runtime settings.
"""

from warden.core.config.environment import (
    ExecutorOptions,
    get_api_key,
    get_base_url,
    get_execution_model,
    get_max_output_tokens,
    get_preflight_model,
)
from warden.core.config.models import (
    Authentication,
    Credentials,
    DistributedConfig,
    PipelineConfig,
    Rule,
    Rules,
    SuccessCondition,
    WardenConfig,
)
from warden.core.config.parser import distribute_config, parse_config, parse_config_string

__all__ = [
    "Authentication",
    "Credentials",
    "DistributedConfig",
    "ExecutorOptions",
    "PipelineConfig",
    "Rule",
    "Rules",
    "SuccessCondition",
    "WardenConfig",
    "distribute_config",
    "get_api_key",
    "get_base_url",
    "get_execution_model",
    "get_max_output_tokens",
    "get_preflight_model",
    "parse_config",
    "parse_config_string",
]
