"""
Tool-Call Reconciler.

Turns tool calls emitted by the model (or explicit save requests from the
client) into note sink writes.

Word batches are written one entry at a time. The first failure stops the
batch; entries already written stay written. There is no rollback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from niko.core.exceptions import NoteSinkError, NoteSinkPreconditionError, ValidationError
from niko.interfaces.note_sink import INoteSink
from niko.models.enums import NoteType, ReconcileStatus
from niko.models.notion import NoteTarget, NotionConfig, NotionSaveRequest, ReconcileResult
from niko.models.tool_call import SaveSentenceCall, SaveWordCall, ToolCallRequest, WordEntry
from niko.tools.notion_tools import SAVE_SENTENCE_TOOL_NAME, SAVE_WORD_TOOL_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteSinkUnavailable:
    """The user has not turned the note sink on."""

    reason: str


def require_target(token: str | None, database_id: str | None) -> NoteTarget:
    """
    Validate credentials before any network call.

    Raises:
        NoteSinkPreconditionError: If the token or database id is blank
    """
    token = (token or "").strip()
    database_id = (database_id or "").strip()
    if not token or not database_id:
        raise NoteSinkPreconditionError("Missing token or databaseId.")
    return NoteTarget(token=token, database_id=database_id)


def check_note_sink(
    config: NotionConfig,
    note_type: NoteType,
) -> Union[NoteTarget, NoteSinkUnavailable]:
    """Capability check: a usable target, or an explicit unavailable result."""
    if not config.enabled:
        return NoteSinkUnavailable(reason="Notion sync is disabled")
    database_id = (
        config.word_database_id if note_type == NoteType.WORD else config.sentence_database_id
    )
    return require_target(config.integration_token, database_id)


def _note_type_of(call: ToolCallRequest) -> NoteType:
    return NoteType.WORD if isinstance(call, SaveWordCall) else NoteType.SENTENCE


def _tool_name_of(call: ToolCallRequest) -> str:
    return SAVE_WORD_TOOL_NAME if isinstance(call, SaveWordCall) else SAVE_SENTENCE_TOOL_NAME


def _word_entry(data: dict) -> WordEntry:
    return WordEntry(
        word=data.get("word") or "",
        meaning=data.get("meaning") or "",
        example=data.get("example") or "",
    )


def call_from_save_request(request: NotionSaveRequest) -> ToolCallRequest:
    """Build a ToolCallRequest from a POST /api/notion body."""
    data = request.data or {}
    if request.type == NoteType.WORD:
        words = data.get("words")
        if isinstance(words, list):
            return SaveWordCall(words=[_word_entry(w) for w in words if isinstance(w, dict)])
        return SaveWordCall(words=[_word_entry(data)])
    if request.type == NoteType.SENTENCE:
        return SaveSentenceCall(
            sentence=data.get("sentence") or "",
            meaning=data.get("meaning") or "",
            key_phrases=data.get("key_phrases") or "",
        )
    raise ValidationError("Missing token, databaseId, or type.")


class ToolCallReconciler:
    """Forwards tool calls to the note sink."""

    def __init__(self, note_sink: INoteSink):
        self._note_sink = note_sink

    async def reconcile(self, call: ToolCallRequest, config: NotionConfig) -> ReconcileResult:
        """
        Forward one tool call using the client's Notion settings.

        Returns an UNAVAILABLE result when sync is turned off.

        Raises:
            NoteSinkPreconditionError: Sync is on but token or database id is missing
        """
        target = check_note_sink(config, _note_type_of(call))
        if isinstance(target, NoteSinkUnavailable):
            return ReconcileResult(
                tool_name=_tool_name_of(call),
                status=ReconcileStatus.UNAVAILABLE,
                requested=self._requested(call),
                error=target.reason,
            )
        return await self.execute(target, call)

    async def save(self, request: NotionSaveRequest) -> ReconcileResult:
        """Handle an explicit save request (POST /api/notion)."""
        if request.type is None:
            raise NoteSinkPreconditionError("Missing token, databaseId, or type.")
        target = require_target(request.token, request.database_id)
        return await self.execute(target, call_from_save_request(request))

    async def execute(self, target: NoteTarget, call: ToolCallRequest) -> ReconcileResult:
        """Write the call's records to ``target``, one request at a time."""
        if isinstance(call, SaveWordCall):
            return await self._save_words(target, call)
        return await self._save_sentence(target, call)

    @staticmethod
    def _requested(call: ToolCallRequest) -> int:
        return len(call.words) if isinstance(call, SaveWordCall) else 1

    async def _save_words(self, target: NoteTarget, call: SaveWordCall) -> ReconcileResult:
        saved = 0
        for entry in call.words:
            try:
                await self._note_sink.create_word(target, entry)
            except NoteSinkError as e:
                logger.warning(
                    f"Word batch stopped after {saved}/{len(call.words)} saved: {e.message}"
                )
                return ReconcileResult(
                    tool_name=SAVE_WORD_TOOL_NAME,
                    status=ReconcileStatus.PARTIAL if saved else ReconcileStatus.FAILED,
                    requested=len(call.words),
                    saved=saved,
                    error=e.message,
                )
            saved += 1

        return ReconcileResult(
            tool_name=SAVE_WORD_TOOL_NAME,
            status=ReconcileStatus.SAVED,
            requested=len(call.words),
            saved=saved,
        )

    async def _save_sentence(self, target: NoteTarget, call: SaveSentenceCall) -> ReconcileResult:
        try:
            await self._note_sink.create_sentence(target, call)
        except NoteSinkError as e:
            logger.warning(f"Sentence save failed: {e.message}")
            return ReconcileResult(
                tool_name=SAVE_SENTENCE_TOOL_NAME,
                status=ReconcileStatus.FAILED,
                requested=1,
                error=e.message,
            )
        return ReconcileResult(
            tool_name=SAVE_SENTENCE_TOOL_NAME,
            status=ReconcileStatus.SAVED,
            requested=1,
            saved=1,
        )
