"""
Notion tools declared to the model.

The model calls these to ask for vocabulary or sentence notes to be saved.
Arguments are parsed into ToolCallRequest models; execution happens in
ToolCallReconciler.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from google.genai.types import FunctionDeclaration, Schema, Tool, Type
from pydantic import ValidationError as PydanticValidationError

from niko.models.tool_call import SaveSentenceCall, SaveWordCall, ToolCallRequest, WordEntry

logger = logging.getLogger(__name__)

SAVE_WORD_TOOL_NAME = "save_word_to_notion"
SAVE_SENTENCE_TOOL_NAME = "save_sentence_to_notion"

_WORD_ITEM_SCHEMA = Schema(
    type=Type.OBJECT,
    properties={
        "word": Schema(type=Type.STRING, description="영어 단어나 숙어"),
        "meaning": Schema(type=Type.STRING, description="한국어 뜻"),
        "example": Schema(type=Type.STRING, description="영어 예문"),
    },
    required=["word", "meaning", "example"],
)

save_word_declaration = FunctionDeclaration(
    name=SAVE_WORD_TOOL_NAME,
    description="영단어 또는 짧은 숙어의 뜻과 예문을 노션 단어장에 저장합니다. 여러 단어를 한 번에 저장할 수 있습니다.",
    parameters=Schema(
        type=Type.OBJECT,
        properties={
            "words": Schema(
                type=Type.ARRAY,
                description="저장할 단어 목록",
                items=_WORD_ITEM_SCHEMA,
            ),
        },
        required=["words"],
    ),
)

save_sentence_declaration = FunctionDeclaration(
    name=SAVE_SENTENCE_TOOL_NAME,
    description="완전한 영어 문장과 번역, 그리고 주요 문법 포인트를 노션에 저장합니다.",
    parameters=Schema(
        type=Type.OBJECT,
        properties={
            "sentence": Schema(type=Type.STRING, description="영어 문장 전체"),
            "meaning": Schema(type=Type.STRING, description="한국어 번역"),
            "key_phrases": Schema(
                type=Type.STRING,
                description="문장에 사용된 주요 문법이나 관용구 설명",
            ),
        },
        required=["sentence", "meaning", "key_phrases"],
    ),
)


def get_notion_tools() -> list[Tool]:
    """Tool list passed to GenerateContentConfig."""
    return [Tool(function_declarations=[save_word_declaration, save_sentence_declaration])]


def _parse_words(args: Mapping[str, Any]) -> list[WordEntry]:
    raw_words = args.get("words")
    if isinstance(raw_words, list):
        return [WordEntry.model_validate(item) for item in raw_words if isinstance(item, Mapping)]
    # Single-word form: {word, meaning, example}
    if args.get("word"):
        return [WordEntry.model_validate(args)]
    return []


def parse_tool_call(name: str, args: Optional[Mapping[str, Any]]) -> Optional[ToolCallRequest]:
    """
    Convert a model function call into a ToolCallRequest.

    Returns None for unknown tools or unusable arguments.
    """
    args = dict(args or {})
    try:
        if name == SAVE_WORD_TOOL_NAME:
            words = _parse_words(args)
            if not words:
                logger.warning("save_word_to_notion called without words: %s", args)
                return None
            return SaveWordCall(words=words)
        if name == SAVE_SENTENCE_TOOL_NAME:
            return SaveSentenceCall.model_validate(args)
    except PydanticValidationError as e:
        logger.warning("Invalid arguments for %s: %s", name, e)
        return None

    logger.warning("Unknown tool call from model: %s", name)
    return None
