"""Completion provider abstraction.

Routes a chat transcript to the configured model vendor and returns the
generated text. SDK failures and empty replies surface as CollaboratorError;
nothing here retries.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Protocol

import anthropic
import openai

from digital_tick.config import Settings
from digital_tick.exceptions import CollaboratorError

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<media_type>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


class CompletionClient(Protocol):
    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str: ...


def build_completion_client(settings: Settings) -> CompletionClient:
    """Pick the provider for the configured model."""
    model = (settings.model or "").strip()
    if model.startswith("claude-"):
        return AnthropicCompletionClient(settings)
    if model.startswith(("gpt-", "o1", "o3", "o4")):
        return OpenAICompletionClient(settings)
    raise ValueError(f"Unsupported model prefix: {model}")


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


class OpenAICompletionClient:
    """Chat completions through the OpenAI SDK (or a compatible base URL)."""

    provider = "openai"

    def __init__(self, settings: Settings) -> None:
        self.model = settings.model
        self._settings = settings
        self._client: openai.AsyncOpenAI | None = None

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            if not self._settings.openai_api_key:
                raise CollaboratorError("OpenAI API key not configured", self.provider)
            self._client = openai.AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
                timeout=self._settings.request_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise CollaboratorError(f"OpenAI API error: {e}", self.provider) from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        text = (content or "").strip()
        if not text:
            raise CollaboratorError("OpenAI returned an empty reply", self.provider)
        return text


# ---------------------------------------------------------------------------
# Anthropic (Claude)
# ---------------------------------------------------------------------------


def _split_system_messages(messages: list[dict[str, Any]]) -> tuple[str, list[dict[str, Any]]]:
    system_parts: list[str] = []
    remaining: list[dict[str, Any]] = []
    for msg in messages:
        if msg.get("role") == "system":
            system_parts.append(str(msg.get("content") or ""))
        else:
            remaining.append(msg)
    return "\n\n".join(part for part in system_parts if part), remaining


def _anthropic_image_block(url: str) -> dict[str, Any] | None:
    match = _DATA_URL_RE.match(url or "")
    if not match:
        return None
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": match.group("media_type"),
            "data": match.group("data"),
        },
    }


def _anthropic_content(content: Any) -> str | list[dict[str, Any]]:
    if not isinstance(content, list):
        return str(content or "")

    blocks: list[dict[str, Any]] = []
    for part in content:
        part_type = part.get("type") if isinstance(part, dict) else None
        if part_type == "text":
            blocks.append({"type": "text", "text": str(part.get("text") or "")})
        elif part_type == "image_url":
            image = _anthropic_image_block((part.get("image_url") or {}).get("url", ""))
            if image:
                blocks.append(image)
            else:
                logger.warning("Dropping image part that is not a base64 data URL")
    return blocks


def _anthropic_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    converted: list[dict[str, Any]] = []
    for msg in messages:
        role = msg.get("role")
        if role not in ("user", "assistant"):
            continue
        content = _anthropic_content(msg.get("content"))
        # The Messages API rejects empty assistant turns
        if role == "assistant" and not content:
            continue
        converted.append({"role": role, "content": content})
    return converted


class AnthropicCompletionClient:
    """Messages API through the Anthropic SDK."""

    provider = "anthropic"

    def __init__(self, settings: Settings) -> None:
        self.model = settings.model
        self._settings = settings
        self._client: anthropic.AsyncAnthropic | None = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self._settings.anthropic_api_key:
                raise CollaboratorError("Anthropic API key not configured", self.provider)
            self._client = anthropic.AsyncAnthropic(
                api_key=self._settings.anthropic_api_key,
                timeout=self._settings.request_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        client = self._get_client()
        system_prompt, remaining = _split_system_messages(messages)
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": _anthropic_messages(remaining),
            "temperature": temperature,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise CollaboratorError(f"Anthropic API error: {e}", self.provider) from e

        text_chunks: list[str] = []
        for block in response.content or []:
            if getattr(block, "type", None) == "text":
                text_chunks.append(getattr(block, "text", "") or "")
        text = "".join(text_chunks).strip()
        if not text:
            raise CollaboratorError("Anthropic returned an empty reply", self.provider)
        return text
