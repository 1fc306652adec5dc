"""
Local file store for client preferences.

Holds, per user, the two keys the web client keeps locally: the Notion
config blob and the theme string. The file maps user id to that user's keys.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from niko.core.exceptions import InfrastructureError
from niko.models.enums import Theme
from niko.models.notion import NotionConfig
from niko.models.preferences import NOTION_CONFIG_KEY, THEME_KEY, ClientPreferences

logger = logging.getLogger(__name__)


class LocalPreferencesStore:
    """JSON file of per-user entries keyed like the browser's local storage."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_raw(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_raw(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise InfrastructureError(f"Failed to write preferences: {e}")

    def _user_entry(self, data: dict[str, Any], user_id: str) -> dict[str, Any]:
        entry = data.get(user_id)
        return entry if isinstance(entry, dict) else {}

    def load(self, user_id: str) -> ClientPreferences:
        raw = self._user_entry(self._read_raw(), user_id)

        notion_config = NotionConfig()
        blob: Optional[str] = raw.get(NOTION_CONFIG_KEY)
        if blob:
            try:
                notion_config = NotionConfig.model_validate_json(blob)
            except PydanticValidationError as e:
                logger.warning(f"Ignoring invalid Notion config: {e}")

        try:
            theme = Theme(raw.get(THEME_KEY, Theme.LIGHT.value))
        except ValueError:
            theme = Theme.LIGHT

        return ClientPreferences(notion_config=notion_config, theme=theme)

    def save_notion_config(self, user_id: str, config: NotionConfig) -> ClientPreferences:
        data = self._read_raw()
        entry = self._user_entry(data, user_id)
        entry[NOTION_CONFIG_KEY] = config.model_dump_json(by_alias=True)
        data[user_id] = entry
        self._write_raw(data)
        return self.load(user_id)

    def save_theme(self, user_id: str, theme: Theme) -> ClientPreferences:
        data = self._read_raw()
        entry = self._user_entry(data, user_id)
        entry[THEME_KEY] = theme.value
        data[user_id] = entry
        self._write_raw(data)
        return self.load(user_id)
