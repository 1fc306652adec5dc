"""
Notion API endpoints.

Explicit saves from the client and the read-back of the study word list.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from niko.api.deps import CurrentUser, NoteSink, Reconciler
from niko.core.config import Settings, get_settings
from niko.core.exceptions import ConfigurationError, NoteSinkError, ValidationError
from niko.core.logger import logger
from niko.models.enums import ReconcileStatus
from niko.models.notion import NotionSaveRequest, NotionSaveResponse, WordItem
from niko.services.tool_call_reconciler import require_target

router = APIRouter()


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=NotionSaveResponse(ok=False, error=error).model_dump(),
    )


@router.post("", response_model=NotionSaveResponse)
async def save_note(
    request: NotionSaveRequest,
    _user: CurrentUser,
    reconciler: Reconciler,
):
    """
    Save a word (or word batch) or a sentence to a Notion database.

    Returns 400 when token, databaseId or type is missing, 500 when Notion
    rejects the write.
    """
    try:
        result = await reconciler.save(request)
    except ValidationError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, e.message)
    except NoteSinkError as e:
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

    if result.status != ReconcileStatus.SAVED:
        logger.warning(
            f"Notion save incomplete: {result.saved}/{result.requested} ({result.error})"
        )
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            result.error or "Failed to save to Notion",
        )
    return NotionSaveResponse(ok=True)


@router.get("", response_model=list[WordItem])
async def list_study_words(
    _user: CurrentUser,
    note_sink: NoteSink,
    settings: Settings = Depends(get_settings),
):
    """Words currently being studied, read from the configured database."""
    if not settings.NOTION_API_KEY or not settings.NOTION_DB_ID:
        raise ConfigurationError("NOTION_API_KEY and NOTION_DB_ID must be set")

    target = require_target(settings.NOTION_API_KEY, settings.NOTION_DB_ID)
    return await note_sink.query_words(target)
