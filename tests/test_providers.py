"""Tests for the completion providers."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import anthropic
import httpx
import openai
import pytest

from digital_tick.exceptions import CollaboratorError
from digital_tick.services.core.chat import bound_transcript
from digital_tick.services.providers.completion import (
    AnthropicCompletionClient,
    OpenAICompletionClient,
    _anthropic_messages,
    _split_system_messages,
    build_completion_client,
)

MESSAGES = [
    {"role": "system", "content": "domain rules"},
    {"role": "system", "content": "plan rules"},
    {"role": "user", "content": "my freeview has no signal"},
]


def _request() -> httpx.Request:
    return httpx.Request("POST", "https://api.example.test/v1/chat")


def _openai_response(content):
    return SimpleNamespace(
        id="chatcmpl-1",
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
    )


class TestBuildCompletionClient:
    """Test provider routing by model prefix."""

    def test_gpt_models_use_openai(self, settings):
        settings.model = "gpt-4o-mini"
        assert isinstance(build_completion_client(settings), OpenAICompletionClient)

    def test_claude_models_use_anthropic(self, settings):
        settings.model = "claude-3-5-haiku-latest"
        assert isinstance(build_completion_client(settings), AnthropicCompletionClient)

    def test_unknown_prefix_raises(self, settings):
        settings.model = "llama-3-70b"
        with pytest.raises(ValueError, match="Unsupported model prefix"):
            build_completion_client(settings)


class TestOpenAICompletionClient:
    """Test the OpenAI wrapper."""

    def _client(self, settings, create: AsyncMock) -> OpenAICompletionClient:
        client = OpenAICompletionClient(settings)
        client._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        return client

    def test_complete_returns_text(self, settings):
        create = AsyncMock(return_value=_openai_response("  Reposition the aerial.  "))
        client = self._client(settings, create)

        reply = asyncio.run(client.complete(MESSAGES, max_tokens=400, temperature=0.4))

        assert reply == "Reposition the aerial."
        create.assert_awaited_once_with(
            model=settings.model,
            messages=MESSAGES,
            max_tokens=400,
            temperature=0.4,
        )

    def test_api_error_becomes_collaborator_error(self, settings):
        error = openai.APIError(message="rate limited", request=_request(), body=None)
        client = self._client(settings, AsyncMock(side_effect=error))

        with pytest.raises(CollaboratorError, match="rate limited") as exc_info:
            asyncio.run(client.complete(MESSAGES, max_tokens=400, temperature=0.4))
        assert exc_info.value.provider == "openai"

    def test_empty_reply_is_an_error(self, settings):
        client = self._client(settings, AsyncMock(return_value=_openai_response(None)))

        with pytest.raises(CollaboratorError, match="empty reply"):
            asyncio.run(client.complete(MESSAGES, max_tokens=400, temperature=0.4))

    def test_missing_api_key(self, settings):
        settings.openai_api_key = None
        client = OpenAICompletionClient(settings)

        with pytest.raises(CollaboratorError, match="API key not configured"):
            asyncio.run(client.complete(MESSAGES, max_tokens=400, temperature=0.4))

    def test_sdk_client_is_built_from_settings(self, settings, monkeypatch):
        factory = Mock()
        monkeypatch.setattr(openai, "AsyncOpenAI", factory)
        settings.openai_base_url = "https://gateway.example.test/v1"

        OpenAICompletionClient(settings)._get_client()

        factory.assert_called_once_with(
            api_key="sk-test",
            base_url="https://gateway.example.test/v1",
            timeout=settings.request_timeout_seconds,
            max_retries=0,
        )


class TestAnthropicTranslation:
    """Test message translation for the Messages API."""

    def test_system_messages_are_merged(self):
        system, remaining = _split_system_messages(MESSAGES)
        assert system == "domain rules\n\nplan rules"
        assert remaining == [MESSAGES[2]]

    def test_image_data_url_becomes_base64_block(self):
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "is this router ok?"},
                    {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw0KGgo="}},
                ],
            },
            {"role": "assistant", "content": "It looks fine."},
        ]

        converted = _anthropic_messages(messages)

        assert converted[0]["content"] == [
            {"type": "text", "text": "is this router ok?"},
            {
                "type": "image",
                "source": {"type": "base64", "media_type": "image/png", "data": "iVBORw0KGgo="},
            },
        ]
        assert converted[1] == {"role": "assistant", "content": "It looks fine."}

    def test_bounded_long_transcript_starts_with_user_turn(self):
        roles = ("user", "assistant")
        transcript = [{"role": roles[i % 2], "content": f"turn {i}"} for i in range(13)]

        converted = _anthropic_messages(bound_transcript(transcript, 12))

        assert converted[0] == {"role": "user", "content": "turn 2"}

    def test_empty_assistant_turns_are_skipped(self):
        messages = [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": ""},
            {"role": "assistant", "content": []},
            {"role": "user", "content": "second"},
        ]

        assert _anthropic_messages(messages) == [
            {"role": "user", "content": "first"},
            {"role": "user", "content": "second"},
        ]

    def test_non_data_url_images_are_dropped(self):
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "see link"},
                    {"type": "image_url", "image_url": {"url": "https://example.test/a.png"}},
                ],
            }
        ]
        assert _anthropic_messages(messages)[0]["content"] == [{"type": "text", "text": "see link"}]


class TestAnthropicCompletionClient:
    """Test the Anthropic wrapper."""

    def _client(self, settings, create: AsyncMock) -> AnthropicCompletionClient:
        settings.model = "claude-3-5-haiku-latest"
        settings.anthropic_api_key = "sk-ant-test"
        client = AnthropicCompletionClient(settings)
        client._client = SimpleNamespace(messages=SimpleNamespace(create=create))
        return client

    def test_complete_joins_text_blocks(self, settings):
        response = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Check the "),
                SimpleNamespace(type="text", text="coax connector."),
            ]
        )
        create = AsyncMock(return_value=response)
        client = self._client(settings, create)

        reply = asyncio.run(client.complete(MESSAGES, max_tokens=1200, temperature=0.4))

        assert reply == "Check the coax connector."
        kwargs = create.await_args.kwargs
        assert kwargs["system"] == "domain rules\n\nplan rules"
        assert kwargs["messages"] == [{"role": "user", "content": "my freeview has no signal"}]
        assert kwargs["max_tokens"] == 1200

    def test_api_error_becomes_collaborator_error(self, settings):
        error = anthropic.APIError(message="overloaded", request=_request(), body=None)
        client = self._client(settings, AsyncMock(side_effect=error))

        with pytest.raises(CollaboratorError, match="overloaded") as exc_info:
            asyncio.run(client.complete(MESSAGES, max_tokens=400, temperature=0.4))
        assert exc_info.value.provider == "anthropic"
