"""
Chat model definitions.

Models for the streaming chat endpoint between the client and the tutor.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from niko.core.config import get_settings
from niko.models.chat_session import InlineData
from niko.models.notion import NotionConfig

settings = get_settings()


class ChatRequest(BaseModel):
    """Request model for the chat stream endpoint."""

    text: str = Field("", max_length=settings.MAX_TEXT_LENGTH, description="User text")
    image: Optional[InlineData] = Field(None, description="Optional attached image")
    session_id: Optional[str] = Field(None, description="Session ID (new session when omitted)")
    notion_config: NotionConfig = Field(
        default_factory=NotionConfig, description="Client-side Notion settings"
    )


class StreamingChatChunk(BaseModel):
    """Streaming chat response chunk."""

    chunk_type: Literal["session", "text", "tool_result", "done", "error"]
    content: str = Field("", description="Text fragment or error message")
    accumulated: Optional[str] = Field(None, description="Full in-progress model text")
    session_id: Optional[str] = None
    title: Optional[str] = None
    tool_result: Optional[dict[str, Any]] = None
