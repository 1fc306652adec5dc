"""Abstract interfaces for infrastructure abstraction."""

from niko.interfaces.auth_provider import IAuthProvider, User
from niko.interfaces.chat_session_repository import IChatSessionRepository
from niko.interfaces.llm_provider import ILLMProvider
from niko.interfaces.note_sink import INoteSink

__all__ = [
    "IAuthProvider",
    "User",
    "IChatSessionRepository",
    "ILLMProvider",
    "INoteSink",
]
