"""Pydantic models (schemas) for the application."""

from niko.models.enums import ConversationState, NoteType, ReconcileStatus, Role, Theme
from niko.models.chat_session import ChatMessage, ChatSession, InlineData, MessagePart
from niko.models.chat import ChatRequest, StreamingChatChunk
from niko.models.notion import (
    NoteTarget,
    NotionConfig,
    NotionSaveRequest,
    NotionSaveResponse,
    ReconcileResult,
    WordItem,
)
from niko.models.tool_call import (
    EmptyChunk,
    SaveSentenceCall,
    SaveWordCall,
    StreamChunk,
    TextChunk,
    ToolCallChunk,
    ToolCallRequest,
    WordEntry,
)

__all__ = [
    # Enums
    "Role",
    "ConversationState",
    "NoteType",
    "ReconcileStatus",
    "Theme",
    # Session
    "ChatSession",
    "ChatMessage",
    "MessagePart",
    "InlineData",
    # Chat
    "ChatRequest",
    "StreamingChatChunk",
    # Notion
    "NotionConfig",
    "NoteTarget",
    "NotionSaveRequest",
    "NotionSaveResponse",
    "ReconcileResult",
    "WordItem",
    # Tool calls
    "WordEntry",
    "SaveWordCall",
    "SaveSentenceCall",
    "ToolCallRequest",
    "TextChunk",
    "ToolCallChunk",
    "EmptyChunk",
    "StreamChunk",
]
