"""
Chat session repository interface.

Defines the contract for chat history persistence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from niko.models.chat_session import ChatSession


class IChatSessionRepository(ABC):
    """Abstract interface for chat session persistence."""

    @abstractmethod
    async def save_session(self, user_id: str, session: ChatSession) -> ChatSession:
        """
        Create or overwrite a session with all of its messages.

        The store assigns ``last_updated`` at write time.

        Args:
            user_id: Owner user ID
            session: Full session value

        Returns:
            The session as stored
        """
        pass

    @abstractmethod
    async def get_session(self, user_id: str, session_id: str) -> Optional[ChatSession]:
        """
        Get one session with its messages in append order.

        Returns:
            ChatSession, or None if it does not exist for this user
        """
        pass

    @abstractmethod
    async def list_sessions(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ChatSession]:
        """
        List sessions for a user, most recently updated first.

        Args:
            user_id: Owner user ID
            limit: Max sessions
            offset: Pagination offset

        Returns:
            List of chat sessions
        """
        pass

    @abstractmethod
    async def delete_session(self, user_id: str, session_id: str) -> bool:
        """
        Delete a session and its messages.

        Returns:
            True if something was deleted
        """
        pass
