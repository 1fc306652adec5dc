"""Function-calling tools exposed to the tutor model."""

from niko.tools.notion_tools import (
    SAVE_SENTENCE_TOOL_NAME,
    SAVE_WORD_TOOL_NAME,
    get_notion_tools,
    parse_tool_call,
)

__all__ = [
    "SAVE_SENTENCE_TOOL_NAME",
    "SAVE_WORD_TOOL_NAME",
    "get_notion_tools",
    "parse_tool_call",
]
