"""External completion API wrappers."""

from digital_tick.services.providers.completion import (
    AnthropicCompletionClient,
    CompletionClient,
    OpenAICompletionClient,
    build_completion_client,
)

__all__ = [
    "AnthropicCompletionClient",
    "CompletionClient",
    "OpenAICompletionClient",
    "build_completion_client",
]
