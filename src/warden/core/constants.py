"""Global constants for Warden.

Centralizes defaults and magic numbers used across the preflight gate and
the execution pipeline.
"""

# =============================================================================
# Remote API defaults
# =============================================================================

DEFAULT_API_BASE_URL = "https://api.openai.com/v1"
"""Base URL for the OpenAI-compatible chat completions API."""

DEFAULT_EXECUTION_MODEL = "gpt-4.1"
"""Model used for agent executions when OPENAI_MODEL is unset."""

DEFAULT_PREFLIGHT_MODEL = "gpt-4.1-mini"
"""Model used for the credential ping when OPENAI_MODEL is unset."""

DEFAULT_MAX_OUTPUT_TOKENS = 64000
"""Output token budget when OPENAI_MAX_OUTPUT_TOKENS is unset."""

PREFLIGHT_PING_PROMPT = "ping"
PREFLIGHT_PING_MAX_TOKENS = 16

DEFAULT_REQUEST_TIMEOUT_SECONDS = 600.0
"""Upper bound on a single completion request (10 minutes)."""

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0

# =============================================================================
# Environment variable names
# =============================================================================

ENV_API_KEY = "OPENAI_API_KEY"
ENV_MODEL = "OPENAI_MODEL"
ENV_MAX_OUTPUT_TOKENS = "OPENAI_MAX_OUTPUT_TOKENS"
ENV_BASE_URL = "OPENAI_BASE_URL"

# =============================================================================
# Execution
# =============================================================================

HEARTBEAT_INTERVAL_SECONDS = 30.0
"""Minimum gap between heartbeat status lines when the loader is disabled."""

UNMETERED_CALL_COST = 0.0
"""Cost recorded per call; the completions endpoint is not billed here."""

SINGLE_TURN = 1

# =============================================================================
# Text truncation limits (characters)
# =============================================================================

TRUNCATE_ERROR_LOG_PROMPT_CHARS = 200
"""Prompt characters kept in error.log entries."""

TRUNCATE_RESULT_PROMPT_CHARS = 100
"""Prompt characters kept in failure results."""

TRUNCATE_SPENDING_CAP_TEXT_CHARS = 100
"""Response characters quoted in spending-cap error messages."""

TRUNCATE_CONSOLE_ERROR_CHARS = 200
"""Error message characters shown in the console failure summary."""

# =============================================================================
# Files
# =============================================================================

ERROR_LOG_FILENAME = "error.log"
ERROR_LOG_AGENT = "llm-executor"

# =============================================================================
# Retry guidance (seconds)
# =============================================================================

BILLING_BACKOFF_MIN_SECONDS = 300.0
"""Spending caps reset slowly; wait at least 5 minutes."""

NETWORK_BACKOFF_SECONDS = 30.0

SPENDING_CAP_MAX_TEXT_CHARS = 500
"""Longest reply still considered a spending-cap placeholder."""
