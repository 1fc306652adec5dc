"""
SQLite implementation of Chat session repository.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError

from niko.core.exceptions import InfrastructureError
from niko.infrastructure.local.database import ChatMessageORM, ChatSessionORM, get_session_factory
from niko.interfaces.chat_session_repository import IChatSessionRepository
from niko.models.chat_session import ChatMessage, ChatSession, MessagePart, utcnow
from niko.models.enums import Role


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _to_aware_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqliteChatSessionRepository(IChatSessionRepository):
    """SQLite implementation of chat session repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _message_orm_to_model(self, orm: ChatMessageORM) -> ChatMessage:
        """Convert message ORM object to Pydantic model."""
        return ChatMessage(
            id=orm.id,
            role=Role(orm.role),
            parts=tuple(MessagePart.model_validate(part) for part in (orm.parts or [])),
            timestamp=_to_aware_utc(orm.timestamp),
        )

    def _session_orm_to_model(
        self,
        orm: ChatSessionORM,
        messages: list[ChatMessageORM],
    ) -> ChatSession:
        """Convert session ORM object to Pydantic model."""
        return ChatSession(
            id=orm.session_id,
            title=orm.title or "",
            messages=tuple(self._message_orm_to_model(m) for m in messages),
            last_updated=_to_aware_utc(orm.last_updated),
        )

    async def _load_messages(self, session, user_id: str, session_id: str) -> list[ChatMessageORM]:
        result = await session.execute(
            select(ChatMessageORM)
            .where(
                and_(
                    ChatMessageORM.session_id == session_id,
                    ChatMessageORM.user_id == user_id,
                )
            )
            .order_by(ChatMessageORM.position.asc())
        )
        return list(result.scalars().all())

    async def save_session(self, user_id: str, session: ChatSession) -> ChatSession:
        """Create or overwrite a session with all of its messages."""
        last_updated = utcnow()
        if session.messages:
            last_updated = max(last_updated, session.messages[-1].timestamp)

        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(ChatSessionORM).where(
                        and_(
                            ChatSessionORM.session_id == session.id,
                            ChatSessionORM.user_id == user_id,
                        )
                    )
                )
                orm = result.scalar_one_or_none()

                if orm:
                    orm.title = session.title
                    orm.last_updated = _to_naive_utc(last_updated)
                else:
                    orm = ChatSessionORM(
                        session_id=session.id,
                        user_id=user_id,
                        title=session.title,
                        last_updated=_to_naive_utc(last_updated),
                    )
                    db.add(orm)

                # Sessions are written as whole values.
                await db.execute(
                    delete(ChatMessageORM).where(
                        and_(
                            ChatMessageORM.session_id == session.id,
                            ChatMessageORM.user_id == user_id,
                        )
                    )
                )
                for position, message in enumerate(session.messages):
                    db.add(
                        ChatMessageORM(
                            id=message.id,
                            session_id=session.id,
                            user_id=user_id,
                            position=position,
                            role=message.role.value,
                            parts=[
                                part.model_dump(exclude_none=True) for part in message.parts
                            ],
                            timestamp=_to_naive_utc(message.timestamp),
                        )
                    )

                await db.commit()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to save session: {e}")

        return session.model_copy(update={"last_updated": last_updated})

    async def get_session(self, user_id: str, session_id: str) -> Optional[ChatSession]:
        """Get one session with its messages in append order."""
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(ChatSessionORM).where(
                        and_(
                            ChatSessionORM.session_id == session_id,
                            ChatSessionORM.user_id == user_id,
                        )
                    )
                )
                orm = result.scalar_one_or_none()
                if not orm:
                    return None
                messages = await self._load_messages(db, user_id, session_id)
                return self._session_orm_to_model(orm, messages)
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to load session: {e}")

    async def list_sessions(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ChatSession]:
        """List chat sessions for a user."""
        try:
            async with self._session_factory() as db:
                query = (
                    select(ChatSessionORM)
                    .where(ChatSessionORM.user_id == user_id)
                    .order_by(ChatSessionORM.last_updated.desc())
                    .limit(limit)
                    .offset(offset)
                )
                result = await db.execute(query)
                sessions = []
                for orm in result.scalars().all():
                    messages = await self._load_messages(db, user_id, orm.session_id)
                    sessions.append(self._session_orm_to_model(orm, messages))
                return sessions
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to list sessions: {e}")

    async def delete_session(self, user_id: str, session_id: str) -> bool:
        """Delete a session and its messages."""
        try:
            async with self._session_factory() as db:
                await db.execute(
                    delete(ChatMessageORM).where(
                        and_(
                            ChatMessageORM.session_id == session_id,
                            ChatMessageORM.user_id == user_id,
                        )
                    )
                )
                result = await db.execute(
                    delete(ChatSessionORM).where(
                        and_(
                            ChatSessionORM.session_id == session_id,
                            ChatSessionORM.user_id == user_id,
                        )
                    )
                )
                await db.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to delete session: {e}")
