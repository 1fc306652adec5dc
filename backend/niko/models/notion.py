"""
Notion (note sink) models.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from niko.models.enums import NoteType, ReconcileStatus


class NotionConfig(BaseModel):
    """User-scoped Notion settings. Kept by the client, never stored in a session."""

    model_config = ConfigDict(populate_by_name=True)

    integration_token: str = Field("", alias="apiKey", description="Notion integration token")
    word_database_id: str = Field("", alias="wordDbId", description="Word database ID")
    sentence_database_id: str = Field("", alias="sentenceDbId", description="Sentence database ID")
    enabled: bool = False


class NoteTarget(BaseModel):
    """Validated credentials for one Notion database."""

    token: str
    database_id: str


class NotionSaveRequest(BaseModel):
    """Body of POST /api/notion."""

    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = None
    database_id: Optional[str] = Field(None, alias="databaseId")
    type: Optional[NoteType] = None
    data: dict[str, Any] = Field(default_factory=dict)


class NotionSaveResponse(BaseModel):
    ok: bool
    error: Optional[str] = None


class WordItem(BaseModel):
    """A word read back from the study database."""

    word: str
    meaning: str = ""
    example: str = ""


class ReconcileResult(BaseModel):
    """Outcome of forwarding one tool call to the note sink."""

    tool_name: str
    status: ReconcileStatus
    requested: int = 0
    saved: int = 0
    error: Optional[str] = None
