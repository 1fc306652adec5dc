"""
Locally persisted client preferences.
"""

from pydantic import BaseModel, Field

from niko.models.enums import Theme
from niko.models.notion import NotionConfig

NOTION_CONFIG_KEY = "niko-notion-config-v1"
THEME_KEY = "niko-theme"


class ClientPreferences(BaseModel):
    notion_config: NotionConfig = Field(default_factory=NotionConfig)
    theme: Theme = Theme.LIGHT


class ThemeUpdate(BaseModel):
    theme: Theme
