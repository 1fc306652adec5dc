"""
LLM provider interface.

Defines the contract for streaming inference with declared tools.
Implementation: Gemini API.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Optional, Sequence

from niko.models.chat_session import ChatMessage, InlineData
from niko.models.tool_call import StreamChunk


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def stream_reply(
        self,
        text: str,
        history: Sequence[ChatMessage],
        image: Optional[InlineData] = None,
        system_instruction: Optional[str] = None,
        tools: Optional[Sequence[Any]] = None,
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream the model reply to ``text`` given the prior ``history``.

        The iterator is lazy, single-pass and cannot be restarted. The backend
        holds no session, so the full history is sent on every call.

        Args:
            text: Current user text
            history: Prior messages, oldest first
            image: Optional inline image sent with the current turn
            system_instruction: System prompt
            tools: Provider tool declarations

        Yields:
            TextChunk, ToolCallChunk or EmptyChunk in emission order

        Raises:
            LLMError: Once, on any transport or provider failure
        """
        pass
