"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from niko.core.config import get_settings
from niko.core.exceptions import AuthenticationError
from niko.infrastructure.local.preferences_store import LocalPreferencesStore
from niko.interfaces.auth_provider import IAuthProvider, User
from niko.interfaces.chat_session_repository import IChatSessionRepository
from niko.interfaces.llm_provider import ILLMProvider
from niko.interfaces.note_sink import INoteSink
from niko.services.conversation_service import ConversationService
from niko.services.tool_call_reconciler import ToolCallReconciler


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_chat_session_repository() -> IChatSessionRepository:
    """Get chat session repository instance."""
    from niko.infrastructure.local.chat_session_repository import SqliteChatSessionRepository

    return SqliteChatSessionRepository()


@lru_cache()
def get_preferences_store() -> LocalPreferencesStore:
    """Get local preferences store instance."""
    return LocalPreferencesStore(get_settings().PREFERENCES_PATH)


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_llm_provider() -> ILLMProvider:
    """
    Get LLM provider instance.

    Raises ConfigurationError when GOOGLE_API_KEY is missing.
    """
    from niko.infrastructure.local.gemini_api_provider import GeminiAPIProvider

    settings = get_settings()
    return GeminiAPIProvider(settings.GEMINI_MODEL)


@lru_cache()
def get_note_sink() -> INoteSink:
    """Get note sink instance."""
    from niko.infrastructure.notion.notion_client import NotionNoteSink

    return NotionNoteSink()


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "firebase":
        from niko.infrastructure.auth.firebase_auth import FirebaseAuthProvider

        return FirebaseAuthProvider(settings)

    from niko.infrastructure.local.mock_auth import MockAuthProvider

    return MockAuthProvider(enabled=settings.is_gcp)


# ===========================================
# Service Dependencies
# ===========================================


def get_tool_call_reconciler(
    note_sink: INoteSink = Depends(get_note_sink),
) -> ToolCallReconciler:
    return ToolCallReconciler(note_sink)


def get_conversation_service(
    llm_provider: ILLMProvider = Depends(get_llm_provider),
    chat_repo: IChatSessionRepository = Depends(get_chat_session_repository),
    reconciler: ToolCallReconciler = Depends(get_tool_call_reconciler),
) -> ConversationService:
    return ConversationService(
        llm_provider=llm_provider,
        chat_repo=chat_repo,
        reconciler=reconciler,
    )


def get_session_service(
    chat_repo: IChatSessionRepository = Depends(get_chat_session_repository),
    reconciler: ToolCallReconciler = Depends(get_tool_call_reconciler),
) -> ConversationService:
    """
    Conversation service for session CRUD.

    Does not need the LLM, so listing and deleting sessions keep working
    before GOOGLE_API_KEY is configured.
    """
    return ConversationService(
        llm_provider=None,
        chat_repo=chat_repo,
        reconciler=reconciler,
    )


# ===========================================
# User Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    In local mode without a token, returns the development user.
    """
    if not auth_provider.is_enabled() and not authorization:
        return User(id="dev_user", email="dev@example.com", display_name="Developer")

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return await auth_provider.verify_token(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

NoteSink = Annotated[INoteSink, Depends(get_note_sink)]
Reconciler = Annotated[ToolCallReconciler, Depends(get_tool_call_reconciler)]
Conversations = Annotated[ConversationService, Depends(get_conversation_service)]
Sessions = Annotated[ConversationService, Depends(get_session_service)]
PreferencesStore = Annotated[LocalPreferencesStore, Depends(get_preferences_store)]
CurrentUser = Annotated[User, Depends(get_current_user)]
