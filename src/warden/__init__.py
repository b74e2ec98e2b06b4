"""Warden - preflight-gated LLM execution for pentest agent pipelines."""

__version__ = "0.1.0"

__all__ = ["__version__"]
