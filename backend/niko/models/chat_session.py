"""
Chat session and message models.

A session is an append-only conversation log. Messages are never edited;
a new session value is produced for every append.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from niko.models.enums import Role


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InlineData(BaseModel):
    """Inline binary payload (base64 encoded)."""

    mime_type: str = Field(..., max_length=100, description="MIME type, e.g. image/png")
    data: str = Field(..., description="Base64 encoded bytes")


class MessagePart(BaseModel):
    """One content fragment of a message: text or inline image."""

    text: Optional[str] = None
    inline_data: Optional[InlineData] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "MessagePart":
        if (self.text is None) == (self.inline_data is None):
            raise ValueError("MessagePart must carry exactly one of text or inline_data")
        return self

    @classmethod
    def from_text(cls, text: str) -> "MessagePart":
        return cls(text=text)

    @classmethod
    def from_image(cls, image: InlineData) -> "MessagePart":
        return cls(inline_data=image)


class ChatMessage(BaseModel):
    """Chat message model."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: str(uuid4()))
    role: Role
    parts: tuple[MessagePart, ...] = Field(default_factory=tuple)
    timestamp: datetime = Field(default_factory=utcnow)

    @property
    def text(self) -> str:
        """Concatenated text parts."""
        return "".join(part.text for part in self.parts if part.text)


class ChatSession(BaseModel):
    """Chat session model."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: str(uuid4()), max_length=100)
    title: str = Field("새로운 대화", max_length=200)
    messages: tuple[ChatMessage, ...] = Field(default_factory=tuple)
    last_updated: datetime = Field(default_factory=utcnow)

    @property
    def is_empty(self) -> bool:
        return not self.messages

    def append(self, message: ChatMessage, title: Optional[str] = None) -> "ChatSession":
        """Return a new session with ``message`` appended."""
        last_updated = max(utcnow(), message.timestamp)
        return self.model_copy(
            update={
                "messages": self.messages + (message,),
                "last_updated": last_updated,
                "title": title if title is not None else self.title,
            }
        )
