"""
Conversation Service.

Owns the session lifecycle and drives one streamed tutor reply per send:
append the user message, persist, stream the model reply, hand tool calls
to the reconciler, then append the model message and persist again.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Optional, Sequence

from niko.agents.prompts.tutor_prompt import TUTOR_SYSTEM_PROMPT
from niko.core.config import Settings, get_settings
from niko.core.exceptions import BusinessLogicError, NikoError, NotFoundError, ValidationError
from niko.core.logger import logger
from niko.interfaces.chat_session_repository import IChatSessionRepository
from niko.interfaces.llm_provider import ILLMProvider
from niko.models.chat import StreamingChatChunk
from niko.models.chat_session import ChatMessage, ChatSession, InlineData, MessagePart
from niko.models.enums import ConversationState, ReconcileStatus, Role
from niko.models.notion import NotionConfig, ReconcileResult
from niko.models.tool_call import SaveWordCall, ToolCallRequest
from niko.services.tool_call_reconciler import ToolCallReconciler
from niko.tools.notion_tools import (
    SAVE_SENTENCE_TOOL_NAME,
    SAVE_WORD_TOOL_NAME,
    get_notion_tools,
)


@dataclass
class SessionActivity:
    """Live state of one session's send."""

    state: ConversationState = ConversationState.IDLE
    partial_text: str = ""


@dataclass
class ChatTurn:
    """A validated send waiting to be streamed."""

    user_id: str
    session: ChatSession
    text: str
    image: Optional[InlineData] = None
    notion_config: NotionConfig = field(default_factory=NotionConfig)


# Keyed by (user_id, session_id). Services are built per request, so the
# in-flight guard has to live at module level.
_activity: dict[tuple[str, str], SessionActivity] = {}

# Reconciliation tasks that outlive a disconnected stream.
_background_tasks: set[asyncio.Task] = set()


def _event(chunk_type: str, **fields: Any) -> dict[str, Any]:
    return StreamingChatChunk(chunk_type=chunk_type, **fields).model_dump(exclude_none=True)


class ConversationService:
    """Service for running tutor conversations."""

    def __init__(
        self,
        llm_provider: Optional[ILLMProvider],
        chat_repo: IChatSessionRepository,
        reconciler: ToolCallReconciler,
        settings: Optional[Settings] = None,
        system_instruction: Optional[str] = None,
        tools: Optional[Sequence[Any]] = None,
    ):
        """
        Initialize Conversation Service.

        Args:
            llm_provider: Streaming inference client
            chat_repo: Session store
            reconciler: Tool-call reconciler
            settings: Settings override
            system_instruction: Tutor prompt override
            tools: Tool declarations override
        """
        self._llm_provider = llm_provider
        self._chat_repo = chat_repo
        self._reconciler = reconciler
        self._settings = settings or get_settings()
        self._system_instruction = system_instruction or TUTOR_SYSTEM_PROMPT
        self._tools = list(tools) if tools is not None else get_notion_tools()

    # ===========================================
    # Session lifecycle
    # ===========================================

    def new_session(self) -> ChatSession:
        """Build an empty, unsaved session."""
        return ChatSession(title=self._settings.DEFAULT_SESSION_TITLE)

    async def create_session(self, user_id: str) -> ChatSession:
        """Create and persist an empty session."""
        return await self._chat_repo.save_session(user_id, self.new_session())

    async def load_sessions(self, user_id: str, limit: int = 50, offset: int = 0) -> list[ChatSession]:
        """Sessions for a user, most recently updated first."""
        return await self._chat_repo.list_sessions(user_id, limit=limit, offset=offset)

    async def get_session(self, user_id: str, session_id: str) -> ChatSession:
        session = await self._chat_repo.get_session(user_id, session_id)
        if session is None:
            raise NotFoundError(f"Session not found: {session_id}")
        return session

    async def delete_session(self, user_id: str, session_id: str) -> None:
        if self.get_activity(user_id, session_id).state != ConversationState.IDLE:
            raise BusinessLogicError("Cannot delete a session while a reply is streaming")
        deleted = await self._chat_repo.delete_session(user_id, session_id)
        if not deleted:
            raise NotFoundError(f"Session not found: {session_id}")

    def get_activity(self, user_id: str, session_id: str) -> SessionActivity:
        """Snapshot of the session's send state."""
        activity = _activity.get((user_id, session_id))
        if activity is None:
            return SessionActivity()
        return SessionActivity(state=activity.state, partial_text=activity.partial_text)

    def derive_title(self, session: ChatSession, text: str) -> str:
        """Title after the next user message; only the first message sets it."""
        if not session.is_empty:
            return session.title
        limit = self._settings.SESSION_TITLE_MAX_LENGTH
        return text[:limit] or self._settings.IMAGE_ONLY_SESSION_TITLE

    # ===========================================
    # Sending
    # ===========================================

    def _ensure_idle(self, user_id: str, session_id: str) -> None:
        state = self.get_activity(user_id, session_id).state
        if state in (ConversationState.SENDING, ConversationState.STREAMING):
            raise BusinessLogicError("A reply is already streaming for this session")

    async def start_turn(
        self,
        user_id: str,
        text: str,
        image: Optional[InlineData] = None,
        session_id: Optional[str] = None,
        notion_config: Optional[NotionConfig] = None,
    ) -> ChatTurn:
        """
        Validate a send and resolve its session.

        An unknown session_id starts a new session with that id.

        Raises:
            ValidationError: Neither text nor image was given
            BusinessLogicError: The session already has a send in flight
        """
        text = text or ""
        if not text.strip() and image is None:
            raise ValidationError("Message must contain text or an image")

        if session_id:
            self._ensure_idle(user_id, session_id)
            session = await self._chat_repo.get_session(user_id, session_id)
            if session is None:
                session = ChatSession(id=session_id, title=self._settings.DEFAULT_SESSION_TITLE)
        else:
            session = self.new_session()

        return ChatTurn(
            user_id=user_id,
            session=session,
            text=text,
            image=image,
            notion_config=notion_config or NotionConfig(),
        )

    async def send_message(
        self,
        user_id: str,
        text: str,
        image: Optional[InlineData] = None,
        session_id: Optional[str] = None,
        notion_config: Optional[NotionConfig] = None,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Validate and stream in one call."""
        turn = await self.start_turn(
            user_id=user_id,
            text=text,
            image=image,
            session_id=session_id,
            notion_config=notion_config,
        )
        async for event in self.stream_turn(turn):
            yield event

    async def stream_turn(self, turn: ChatTurn) -> AsyncGenerator[dict[str, Any], None]:
        """
        Run one send through the state machine and yield client events.

        Yields:
            session, text, tool_result, done and error events
        """
        key = (turn.user_id, turn.session.id)
        try:
            self._ensure_idle(*key)
        except BusinessLogicError as e:
            yield _event("error", content=e.message, session_id=turn.session.id)
            return

        activity = SessionActivity(state=ConversationState.SENDING)
        _activity[key] = activity
        pending: list[asyncio.Task] = []
        session = turn.session

        try:
            # IDLE -> SENDING. The turn's snapshot predates the guard; a send that
            # finished since then must not be overwritten.
            stored = await self._chat_repo.get_session(turn.user_id, turn.session.id)
            if stored is not None:
                session = stored

            user_parts = [MessagePart.from_text(turn.text)]
            if turn.image is not None:
                user_parts.append(MessagePart.from_image(turn.image))
            user_message = ChatMessage(role=Role.USER, parts=tuple(user_parts))
            history = session.messages
            session = session.append(user_message, title=self.derive_title(session, turn.text))
            session = await self._chat_repo.save_session(turn.user_id, session)

            yield _event("session", session_id=session.id, title=session.title)

            # SENDING -> STREAMING
            activity.state = ConversationState.STREAMING
            stream = self._llm_provider.stream_reply(
                text=turn.text,
                history=history,
                image=turn.image,
                system_instruction=self._system_instruction,
                tools=self._tools,
            )
            async for chunk in stream:
                if chunk.kind == "text":
                    activity.partial_text += chunk.text
                    yield _event(
                        "text",
                        content=chunk.text,
                        accumulated=activity.partial_text,
                    )
                elif chunk.kind == "tool_call":
                    for call in chunk.calls:
                        pending.append(self._spawn_reconcile(call, turn.notion_config))
                elif chunk.kind == "empty":
                    pass

                for result in self._collect_finished(pending):
                    yield _event("tool_result", tool_result=result.model_dump(mode="json"))

            # STREAMING -> IDLE
            model_message = ChatMessage(
                role=Role.MODEL,
                parts=(MessagePart.from_text(activity.partial_text),),
            )
            session = session.append(model_message)
            session = await self._chat_repo.save_session(turn.user_id, session)
            final_text = activity.partial_text
            activity.partial_text = ""

            for result in await self._wait_all(pending):
                yield _event("tool_result", tool_result=result.model_dump(mode="json"))

            activity.state = ConversationState.IDLE
            yield _event(
                "done",
                content=final_text,
                session_id=session.id,
                title=session.title,
            )

        except Exception as e:
            # * -> FAILED: the partial reply is dropped, the store keeps the last persist.
            activity.state = ConversationState.FAILED
            activity.partial_text = ""
            if isinstance(e, NikoError):
                logger.warning(f"Conversation send failed: {e.message}")
            else:
                logger.error(f"Conversation send failed: {e}", exc_info=True)

            for result in await self._wait_all(pending):
                yield _event("tool_result", tool_result=result.model_dump(mode="json"))

            yield _event(
                "error",
                content=f"메시지 전송에 실패했습니다: {e}",
                session_id=session.id,
            )
        finally:
            _activity.pop(key, None)

    # ===========================================
    # Reconciliation
    # ===========================================

    def _spawn_reconcile(self, call: ToolCallRequest, config: NotionConfig) -> asyncio.Task:
        task = asyncio.create_task(self._reconcile(call, config))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return task

    async def _reconcile(self, call: ToolCallRequest, config: NotionConfig) -> ReconcileResult:
        try:
            return await self._reconciler.reconcile(call, config)
        except NikoError as e:
            logger.warning(f"Tool call reconciliation failed: {e.message}")
            error = e.message
        except Exception as e:
            logger.error(f"Tool call reconciliation crashed: {e}", exc_info=True)
            error = str(e)

        is_word = isinstance(call, SaveWordCall)
        return ReconcileResult(
            tool_name=SAVE_WORD_TOOL_NAME if is_word else SAVE_SENTENCE_TOOL_NAME,
            status=ReconcileStatus.FAILED,
            requested=len(call.words) if is_word else 1,
            error=error,
        )

    @staticmethod
    def _collect_finished(pending: list[asyncio.Task]) -> list[ReconcileResult]:
        finished = [task for task in pending if task.done()]
        for task in finished:
            pending.remove(task)
        return [task.result() for task in finished]

    @staticmethod
    async def _wait_all(pending: list[asyncio.Task]) -> list[ReconcileResult]:
        if not pending:
            return []
        results = await asyncio.gather(*pending)
        pending.clear()
        return list(results)
