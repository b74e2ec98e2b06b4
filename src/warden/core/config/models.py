"""Configuration file models.

Defines the optional YAML configuration consumed by a pentest run: scope
rules, target authentication, and pipeline tuning.

Example YAML:
    rules:
      avoid:
        - description: "Skip logout"
          type: path
          url_path: "/logout"
      focus:
        - description: "API surface"
          type: path
          url_path: "/api"
    authentication:
      login_type: form
      login_url: "https://app.example.com/login"
      credentials:
        username: "tester"
        password: "hunter2"
      login_flow:
        - "Type $username into the email field"
        - "Type $password into the password field"
        - "Click 'Sign in'"
      success_condition:
        type: url
        value: "/dashboard"
    pipeline:
      retry_preset: subscription
      max_concurrent_pipelines: 2
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RuleType = Literal["path", "subdomain", "domain", "method", "header", "parameter"]
LoginType = Literal["form", "sso", "api", "basic"]
SuccessConditionType = Literal["url", "cookie", "element", "redirect"]
RetryPreset = Literal["default", "subscription"]


class Rule(BaseModel):
    """A single scope rule: something to avoid or to focus on."""

    model_config = ConfigDict(extra="forbid")

    description: str = Field(min_length=1, description="Human-readable purpose of the rule")
    type: RuleType = Field(description="What the rule matches against")
    url_path: str = Field(min_length=1, description="Path, host, method, header or parameter value")


class Rules(BaseModel):
    """Scope rules for the engagement."""

    model_config = ConfigDict(extra="forbid")

    avoid: list[Rule] = Field(default_factory=list)
    focus: list[Rule] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_conflicts(self) -> Rules:
        """A target cannot be both avoided and focused on."""
        avoided = {(r.type, r.url_path) for r in self.avoid}
        conflicts = sorted(
            f"{r.type}:{r.url_path}" for r in self.focus if (r.type, r.url_path) in avoided
        )
        if conflicts:
            raise ValueError(
                f"Rules appear in both avoid and focus: {', '.join(conflicts)}"
            )
        return self


class SuccessCondition(BaseModel):
    """How to tell that a login attempt succeeded."""

    model_config = ConfigDict(extra="forbid")

    type: SuccessConditionType
    value: str = Field(min_length=1)


class Credentials(BaseModel):
    """Login credentials for the target application."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    totp_secret: str | None = Field(
        default=None,
        description="Base32 TOTP seed for targets with two-factor login",
    )


class Authentication(BaseModel):
    """Authentication block describing how agents log into the target."""

    model_config = ConfigDict(extra="forbid")

    login_type: LoginType
    login_url: str = Field(min_length=1)
    credentials: Credentials
    login_flow: list[str] = Field(
        default_factory=list,
        description="Ordered natural-language login steps",
    )
    success_condition: SuccessCondition

    @field_validator("login_url")
    @classmethod
    def require_http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("login_url must start with http:// or https://")
        return v


class PipelineConfig(BaseModel):
    """Pipeline tuning settings."""

    model_config = ConfigDict(extra="forbid")

    retry_preset: RetryPreset = Field(
        default="default",
        description="'subscription' uses longer backoff for plans with rolling usage windows",
    )
    max_concurrent_pipelines: int = Field(default=1, ge=1)


class WardenConfig(BaseModel):
    """Top-level configuration file model. Every section is optional."""

    model_config = ConfigDict(extra="forbid")

    rules: Rules | None = None
    authentication: Authentication | None = None
    pipeline: PipelineConfig | None = None


class DistributedConfig(BaseModel):
    """Flattened view of the config handed to individual agents."""

    avoid: list[Rule] = Field(default_factory=list)
    focus: list[Rule] = Field(default_factory=list)
    authentication: Authentication | None = None


__all__ = [
    "Authentication",
    "Credentials",
    "DistributedConfig",
    "LoginType",
    "PipelineConfig",
    "RetryPreset",
    "Rule",
    "RuleType",
    "Rules",
    "SuccessCondition",
    "SuccessConditionType",
    "WardenConfig",
]
