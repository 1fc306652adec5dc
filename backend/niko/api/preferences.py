"""
Client preference endpoints (Notion settings and theme).
"""

from fastapi import APIRouter

from niko.api.deps import CurrentUser, PreferencesStore
from niko.models.notion import NotionConfig
from niko.models.preferences import ClientPreferences, ThemeUpdate

router = APIRouter()


@router.get("", response_model=ClientPreferences)
async def get_preferences(user: CurrentUser, store: PreferencesStore):
    return store.load(user.id)


@router.put("/notion", response_model=ClientPreferences)
async def update_notion_config(
    config: NotionConfig,
    user: CurrentUser,
    store: PreferencesStore,
):
    """Replace the caller's stored Notion settings."""
    return store.save_notion_config(user.id, config)


@router.put("/theme", response_model=ClientPreferences)
async def update_theme(update: ThemeUpdate, user: CurrentUser, store: PreferencesStore):
    return store.save_theme(user.id, update.theme)
