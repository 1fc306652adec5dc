"""
Notion API note sink.

Creates word/sentence pages and reads the study word list through the
Notion REST API.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from niko.core.config import Settings, get_settings
from niko.core.exceptions import NoteSinkError
from niko.interfaces.note_sink import INoteSink
from niko.models.notion import NoteTarget, WordItem
from niko.models.tool_call import SaveSentenceCall, WordEntry

logger = logging.getLogger(__name__)


def _title(content: str) -> dict[str, Any]:
    return {"title": [{"text": {"content": content or ""}}]}


def _rich_text(content: str) -> dict[str, Any]:
    return {"rich_text": [{"text": {"content": content or ""}}]}


def build_word_properties(entry: WordEntry) -> dict[str, Any]:
    return {
        "Word": _title(entry.word),
        "Meaning": _rich_text(entry.meaning),
        "Example": _rich_text(entry.example),
    }


def build_sentence_properties(sentence: SaveSentenceCall) -> dict[str, Any]:
    return {
        "Sentence": _title(sentence.sentence),
        "Meaning": _rich_text(sentence.meaning),
        "Key Phrases": _rich_text(sentence.key_phrases),
    }


def _plain_text(items: Optional[list[dict[str, Any]]]) -> str:
    if not items:
        return ""
    return "".join(item.get("plain_text", "") for item in items)


def parse_word_pages(results: list[dict[str, Any]]) -> list[WordItem]:
    """Map query results to WordItems, dropping pages without a word."""
    words = []
    for page in results or []:
        props = page.get("properties") or {}
        word = _plain_text((props.get("word") or {}).get("title"))
        if not word:
            continue
        words.append(
            WordItem(
                word=word,
                meaning=_plain_text((props.get("meaning") or {}).get("rich_text")),
                example=_plain_text((props.get("example") or {}).get("rich_text")),
            )
        )
    return words


class NotionNoteSink(INoteSink):
    """Note sink backed by the Notion REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            settings: Settings override
            transport: httpx transport override (tests use httpx.MockTransport)
        """
        self._settings = settings or get_settings()
        self._transport = transport

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Notion-Version": self._settings.NOTION_VERSION,
            "Content-Type": "application/json",
        }

    async def _post(self, token: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._settings.NOTION_API_BASE.rstrip('/')}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.NOTION_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = await client.post(url, headers=self._headers(token), json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Notion request failed: {e}")
            raise NoteSinkError(f"Notion request failed: {e}")

        if response.is_error:
            detail = response.text or "Notion API error"
            logger.warning(f"Notion API returned {response.status_code}: {detail}")
            raise NoteSinkError(detail, status_code=response.status_code)
        return response.json() if response.content else {}

    async def _create_page(self, target: NoteTarget, properties: dict[str, Any]) -> None:
        await self._post(
            target.token,
            "pages",
            {
                "parent": {"database_id": target.database_id},
                "properties": properties,
            },
        )

    async def create_word(self, target: NoteTarget, entry: WordEntry) -> None:
        """Create one word page."""
        await self._create_page(target, build_word_properties(entry))

    async def create_sentence(self, target: NoteTarget, sentence: SaveSentenceCall) -> None:
        """Create one sentence page."""
        await self._create_page(target, build_sentence_properties(sentence))

    async def query_words(self, target: NoteTarget) -> list[WordItem]:
        """Read the words whose status is the configured study status."""
        data = await self._post(
            target.token,
            f"databases/{target.database_id}/query",
            {
                "page_size": self._settings.NOTION_QUERY_PAGE_SIZE,
                "filter": {
                    "property": "status",
                    "status": {"equals": self._settings.NOTION_STUDY_STATUS},
                },
            },
        )
        return parse_word_pages(data.get("results", []))
