"""Pytest fixtures for Warden tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from warden.core.constants import ENV_API_KEY, ENV_BASE_URL, ENV_MAX_OUTPUT_TOKENS, ENV_MODEL


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset CLI logging state, structlog and root handlers around each test."""
    import warden.cli.helpers as cli_helpers

    cli_helpers.reset_logging_state()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    cli_helpers.reset_logging_state()
    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without any API settings from the developer's shell."""
    for name in (ENV_API_KEY, ENV_MODEL, ENV_MAX_OUTPUT_TOKENS, ENV_BASE_URL):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set a fake API key."""
    key = "sk-test-fake-key"
    monkeypatch.setenv(ENV_API_KEY, key)
    return key


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a directory that looks like a git checkout."""
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    return repo


@pytest.fixture
def sample_yaml_config(tmp_path: Path) -> Path:
    """Write a complete, valid configuration file."""
    config = tmp_path / "config.yaml"
    config.write_text(
        """\
rules:
  avoid:
    - description: Skip logout
      type: path
      url_path: /logout
  focus:
    - description: API surface
      type: path
      url_path: /api
authentication:
  login_type: form
  login_url: https://app.example.com/login
  credentials:
    username: tester
    password: hunter2
  login_flow:
    - Type $username into the email field
    - Type $password into the password field
  success_condition:
    type: url
    value: /dashboard
pipeline:
  retry_preset: subscription
  max_concurrent_pipelines: 2
"""
    )
    return config
