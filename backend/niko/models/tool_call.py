"""
Tool-call requests and streamed chunk variants.

The inference stream yields exactly one of TextChunk, ToolCallChunk or
EmptyChunk per provider chunk; consumers match on ``kind``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class WordEntry(BaseModel):
    """One vocabulary item."""

    word: str = ""
    meaning: str = ""
    example: str = ""


class SaveWordCall(BaseModel):
    """Request to store one or more words."""

    kind: Literal["save_word"] = "save_word"
    words: list[WordEntry] = Field(default_factory=list)


class SaveSentenceCall(BaseModel):
    """Request to store one analysed sentence."""

    kind: Literal["save_sentence"] = "save_sentence"
    sentence: str = ""
    meaning: str = ""
    key_phrases: str = ""


ToolCallRequest = Annotated[
    Union[SaveWordCall, SaveSentenceCall],
    Field(discriminator="kind"),
]


class TextChunk(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class ToolCallChunk(BaseModel):
    kind: Literal["tool_call"] = "tool_call"
    calls: list[ToolCallRequest]


class EmptyChunk(BaseModel):
    kind: Literal["empty"] = "empty"


StreamChunk = Annotated[
    Union[TextChunk, ToolCallChunk, EmptyChunk],
    Field(discriminator="kind"),
]
