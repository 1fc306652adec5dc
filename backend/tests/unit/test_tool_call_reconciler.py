"""
Unit tests for ToolCallReconciler.
"""

from unittest.mock import AsyncMock

import pytest

from niko.core.exceptions import NoteSinkError, NoteSinkPreconditionError, ValidationError
from niko.interfaces.note_sink import INoteSink
from niko.models.enums import NoteType, ReconcileStatus
from niko.models.notion import NoteTarget, NotionConfig, NotionSaveRequest
from niko.models.tool_call import SaveSentenceCall, SaveWordCall, WordEntry
from niko.services.tool_call_reconciler import (
    NoteSinkUnavailable,
    ToolCallReconciler,
    call_from_save_request,
    check_note_sink,
    require_target,
)


def _note_sink() -> AsyncMock:
    return AsyncMock(spec=INoteSink)


def _words(*names: str) -> SaveWordCall:
    return SaveWordCall(words=[WordEntry(word=n, meaning=f"{n} 뜻", example=f"{n}.") for n in names])


ENABLED = NotionConfig(
    integration_token="secret_token",
    word_database_id="word-db",
    sentence_database_id="sentence-db",
    enabled=True,
)


class TestPreconditions:
    def test_require_target_strips_values(self):
        target = require_target(" token ", " db ")
        assert target == NoteTarget(token="token", database_id="db")

    @pytest.mark.parametrize("token,database_id", [("", "db"), ("token", ""), (None, None), ("  ", "db")])
    def test_require_target_rejects_blank(self, token, database_id):
        with pytest.raises(NoteSinkPreconditionError):
            require_target(token, database_id)

    def test_disabled_config_is_unavailable(self):
        result = check_note_sink(NotionConfig(), NoteType.WORD)
        assert isinstance(result, NoteSinkUnavailable)

    def test_enabled_config_picks_database_by_type(self):
        assert check_note_sink(ENABLED, NoteType.WORD).database_id == "word-db"
        assert check_note_sink(ENABLED, NoteType.SENTENCE).database_id == "sentence-db"

    def test_enabled_without_sentence_db_raises(self):
        config = ENABLED.model_copy(update={"sentence_database_id": ""})
        with pytest.raises(NoteSinkPreconditionError):
            check_note_sink(config, NoteType.SENTENCE)


class TestWordBatches:
    @pytest.mark.asyncio
    async def test_all_words_saved_in_order(self):
        sink = _note_sink()
        reconciler = ToolCallReconciler(sink)

        result = await reconciler.reconcile(_words("apple", "banana", "cherry"), ENABLED)

        assert result.status == ReconcileStatus.SAVED
        assert result.requested == 3
        assert result.saved == 3
        saved_words = [c.args[1].word for c in sink.create_word.await_args_list]
        assert saved_words == ["apple", "banana", "cherry"]
        assert sink.create_word.await_args_list[0].args[0].database_id == "word-db"

    @pytest.mark.asyncio
    async def test_failure_stops_batch_and_keeps_earlier_writes(self):
        sink = _note_sink()
        sink.create_word.side_effect = [None, NoteSinkError("rate limited", status_code=429), None]
        reconciler = ToolCallReconciler(sink)

        result = await reconciler.reconcile(_words("apple", "banana", "cherry"), ENABLED)

        assert result.status == ReconcileStatus.PARTIAL
        assert result.saved == 1
        assert result.requested == 3
        assert result.error == "rate limited"
        # Nothing after the failing entry is attempted, nothing before it is undone.
        assert sink.create_word.await_count == 2

    @pytest.mark.asyncio
    async def test_failure_on_first_word_is_failed(self):
        sink = _note_sink()
        sink.create_word.side_effect = NoteSinkError("unauthorized", status_code=401)
        reconciler = ToolCallReconciler(sink)

        result = await reconciler.reconcile(_words("apple", "banana"), ENABLED)

        assert result.status == ReconcileStatus.FAILED
        assert result.saved == 0

    @pytest.mark.asyncio
    async def test_disabled_sync_makes_no_requests(self):
        sink = _note_sink()
        reconciler = ToolCallReconciler(sink)

        result = await reconciler.reconcile(_words("apple"), NotionConfig())

        assert result.status == ReconcileStatus.UNAVAILABLE
        assert result.requested == 1
        sink.create_word.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_token_raises_before_any_request(self):
        sink = _note_sink()
        reconciler = ToolCallReconciler(sink)
        config = ENABLED.model_copy(update={"integration_token": ""})

        with pytest.raises(NoteSinkPreconditionError):
            await reconciler.reconcile(_words("apple"), config)
        sink.create_word.assert_not_awaited()


class TestSentences:
    @pytest.mark.asyncio
    async def test_sentence_saved(self):
        sink = _note_sink()
        reconciler = ToolCallReconciler(sink)
        call = SaveSentenceCall(sentence="I am here.", meaning="나는 여기 있다.", key_phrases="be here")

        result = await reconciler.reconcile(call, ENABLED)

        assert result.status == ReconcileStatus.SAVED
        target, sentence = sink.create_sentence.await_args.args
        assert target.database_id == "sentence-db"
        assert sentence == call

    @pytest.mark.asyncio
    async def test_sentence_failure(self):
        sink = _note_sink()
        sink.create_sentence.side_effect = NoteSinkError("bad request", status_code=400)
        reconciler = ToolCallReconciler(sink)

        result = await reconciler.reconcile(SaveSentenceCall(sentence="Hi."), ENABLED)

        assert result.status == ReconcileStatus.FAILED
        assert result.error == "bad request"


class TestSaveRequests:
    def test_single_word_request(self):
        request = NotionSaveRequest(
            token="t",
            databaseId="db",
            type=NoteType.WORD,
            data={"word": "apple", "meaning": "사과", "example": "An apple."},
        )
        call = call_from_save_request(request)
        assert call == SaveWordCall(words=[WordEntry(word="apple", meaning="사과", example="An apple.")])

    def test_word_list_request(self):
        request = NotionSaveRequest(
            token="t",
            databaseId="db",
            type=NoteType.WORD,
            data={"words": [{"word": "a"}, {"word": "b", "meaning": None}]},
        )
        call = call_from_save_request(request)
        assert [w.word for w in call.words] == ["a", "b"]
        assert call.words[1].meaning == ""

    def test_sentence_request(self):
        request = NotionSaveRequest(
            token="t",
            databaseId="db",
            type=NoteType.SENTENCE,
            data={"sentence": "Hi.", "meaning": "안녕.", "key_phrases": "greeting"},
        )
        call = call_from_save_request(request)
        assert call == SaveSentenceCall(sentence="Hi.", meaning="안녕.", key_phrases="greeting")

    def test_request_without_type_is_invalid(self):
        with pytest.raises(ValidationError):
            call_from_save_request(NotionSaveRequest(token="t", databaseId="db"))

    @pytest.mark.asyncio
    async def test_save_without_database_id_makes_no_requests(self):
        sink = _note_sink()
        reconciler = ToolCallReconciler(sink)
        request = NotionSaveRequest(token="t", type=NoteType.WORD, data={"word": "apple"})

        with pytest.raises(NoteSinkPreconditionError):
            await reconciler.save(request)
        sink.create_word.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_uses_request_target(self):
        sink = _note_sink()
        reconciler = ToolCallReconciler(sink)
        request = NotionSaveRequest(
            token="t", databaseId="db", type=NoteType.WORD, data={"word": "apple"}
        )

        result = await reconciler.save(request)

        assert result.status == ReconcileStatus.SAVED
        assert sink.create_word.await_args.args[0] == NoteTarget(token="t", database_id="db")
