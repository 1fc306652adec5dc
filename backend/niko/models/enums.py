"""
Enum definitions for the application.

These enums are used across models and provide type-safe status values.
"""

from enum import Enum


class Role(str, Enum):
    """Author of a chat message."""

    USER = "user"
    MODEL = "model"


class ConversationState(str, Enum):
    """
    Per-session send state.

    IDLE -> SENDING -> STREAMING -> IDLE, or any -> FAILED -> IDLE.
    """

    IDLE = "IDLE"
    SENDING = "SENDING"
    STREAMING = "STREAMING"
    FAILED = "FAILED"


class NoteType(str, Enum):
    """Kind of record written to the note sink."""

    WORD = "word"
    SENTENCE = "sentence"


class ReconcileStatus(str, Enum):
    """Outcome of forwarding one tool call to the note sink."""

    SAVED = "SAVED"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"
    UNAVAILABLE = "UNAVAILABLE"


class Theme(str, Enum):
    """Client colour theme."""

    LIGHT = "light"
    DARK = "dark"
