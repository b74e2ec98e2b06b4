"""Remote model backends."""

from warden.backends.openai_api import Completion, OpenAIChatClient

__all__ = ["Completion", "OpenAIChatClient"]
