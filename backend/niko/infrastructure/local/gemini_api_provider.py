"""
Gemini API provider.

Uses Gemini API with API Key (no GCP project required) and streams replies
through the async google-genai client.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, AsyncIterator, Optional, Sequence

from google import genai
from google.genai.types import Content, GenerateContentConfig, Part

from niko.core.config import Settings, get_settings
from niko.core.exceptions import ConfigurationError, LLMError
from niko.interfaces.llm_provider import ILLMProvider
from niko.models.chat_session import ChatMessage, InlineData, MessagePart
from niko.models.enums import Role
from niko.models.tool_call import EmptyChunk, StreamChunk, TextChunk, ToolCallChunk
from niko.tools.notion_tools import parse_tool_call

logger = logging.getLogger(__name__)


def _inline_part(inline: InlineData) -> Part:
    try:
        raw = base64.b64decode(inline.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise LLMError(f"Invalid base64 image payload: {e}")
    return Part.from_bytes(data=raw, mime_type=inline.mime_type)


def _to_provider_part(part: MessagePart) -> Part:
    if part.inline_data is not None:
        return _inline_part(part.inline_data)
    return Part(text=part.text or "")


def build_contents(
    text: str,
    history: Sequence[ChatMessage],
    image: Optional[InlineData] = None,
) -> list[Content]:
    """Map history plus the current turn to the alternating user/model shape."""
    contents = [
        Content(
            role="user" if message.role == Role.USER else "model",
            parts=[_to_provider_part(part) for part in message.parts],
        )
        for message in history
    ]
    current_parts = [Part(text=text)]
    if image is not None:
        current_parts.append(_inline_part(image))
    contents.append(Content(role="user", parts=current_parts))
    return contents


def _chunk_text(response: Any) -> str:
    """Text of the first candidate, skipping thought parts."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(
        part.text
        for part in parts
        if getattr(part, "text", None) and not getattr(part, "thought", False)
    )


def to_stream_chunks(response: Any) -> list[StreamChunk]:
    """
    Convert one provider chunk into tagged stream chunks.

    Function calls come first, then text. A chunk carrying neither becomes
    a single EmptyChunk.
    """
    chunks: list[StreamChunk] = []

    calls = []
    for function_call in getattr(response, "function_calls", None) or []:
        request = parse_tool_call(function_call.name, function_call.args)
        if request is not None:
            calls.append(request)
    if calls:
        chunks.append(ToolCallChunk(calls=calls))

    text = _chunk_text(response)
    if text:
        chunks.append(TextChunk(text=text))

    return chunks or [EmptyChunk()]


class GeminiAPIProvider(ILLMProvider):
    """Gemini API provider using API Key."""

    def __init__(
        self,
        model_name: str,
        settings: Optional[Settings] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize Gemini API provider.

        Args:
            model_name: Gemini model name (e.g., "gemini-2.0-flash")
            settings: Settings override
            client: Pre-built genai client (tests inject a fake here)
        """
        self._model_name = model_name
        self._settings = settings or get_settings()

        if client is None:
            if not self._settings.GOOGLE_API_KEY:
                raise ConfigurationError(
                    "GOOGLE_API_KEY is required for Gemini API provider. "
                    "Get your API key from https://aistudio.google.com/apikey"
                )
            client = genai.Client(api_key=self._settings.GOOGLE_API_KEY)
        self._client = client

    async def stream_reply(
        self,
        text: str,
        history: Sequence[ChatMessage],
        image: Optional[InlineData] = None,
        system_instruction: Optional[str] = None,
        tools: Optional[Sequence[Any]] = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream the model reply as tagged chunks."""
        contents = build_contents(text, history, image)

        config_kwargs: dict = {}
        if system_instruction:
            config_kwargs["system_instruction"] = system_instruction
        if tools:
            config_kwargs["tools"] = list(tools)

        try:
            response_stream = await self._client.aio.models.generate_content_stream(
                model=self._model_name,
                contents=contents,
                config=GenerateContentConfig(**config_kwargs),
            )
            async for response in response_stream:
                for chunk in to_stream_chunks(response):
                    yield chunk
        except LLMError:
            raise
        except Exception as e:
            logger.warning(f"Gemini stream failed: {e}")
            raise LLMError(f"Gemini request failed: {e}") from e
