"""
Note sink interface.

Defines the contract for writing vocabulary and sentence records to an
external workspace (Notion).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from niko.models.notion import NoteTarget, WordItem
from niko.models.tool_call import SaveSentenceCall, WordEntry


class INoteSink(ABC):
    """Abstract interface for note sinks."""

    @abstractmethod
    async def create_word(self, target: NoteTarget, entry: WordEntry) -> None:
        """
        Create one word page.

        Raises:
            NoteSinkError: If the remote API rejects the request
        """
        pass

    @abstractmethod
    async def create_sentence(self, target: NoteTarget, sentence: SaveSentenceCall) -> None:
        """
        Create one sentence page.

        Raises:
            NoteSinkError: If the remote API rejects the request
        """
        pass

    @abstractmethod
    async def query_words(self, target: NoteTarget) -> list[WordItem]:
        """
        Read the words currently being studied.

        Raises:
            NoteSinkError: If the remote API rejects the request
        """
        pass
