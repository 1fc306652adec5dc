"""
Chat API endpoint.

Main interface between the web client and the tutor.
"""

import json
from typing import Any, AsyncGenerator

from fastapi import APIRouter, Query, status
from fastapi.responses import StreamingResponse

from niko.api.deps import Conversations, CurrentUser, Sessions
from niko.models.chat import ChatRequest
from niko.models.chat_session import ChatSession

router = APIRouter()


def _sse(chunk: dict[str, Any]) -> str:
    return f"data: {json.dumps(chunk, ensure_ascii=False)}\n\n"


@router.post("/stream")
async def chat_stream(
    request: ChatRequest,
    user: CurrentUser,
    conversations: Conversations,
):
    """
    Chat with streaming response (Server-Sent Events).

    Validation and the one-send-per-session check run before the stream
    opens, so they surface as 400 / 409 rather than as an error event.
    """
    turn = await conversations.start_turn(
        user_id=user.id,
        text=request.text,
        image=request.image,
        session_id=request.session_id,
        notion_config=request.notion_config,
    )

    async def event_generator() -> AsyncGenerator[str, None]:
        """Generate Server-Sent Events for streaming response."""
        try:
            async for chunk in conversations.stream_turn(turn):
                yield _sse(chunk)
        except Exception as e:
            yield _sse({"chunk_type": "error", "content": str(e), "session_id": turn.session.id})

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering for nginx
        },
    )


@router.get("/sessions", response_model=list[ChatSession])
async def list_sessions(
    user: CurrentUser,
    sessions: Sessions,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """List chat sessions for the current user, most recent first."""
    return await sessions.load_sessions(user.id, limit=limit, offset=offset)


@router.post("/sessions", response_model=ChatSession, status_code=status.HTTP_201_CREATED)
async def create_session(user: CurrentUser, sessions: Sessions):
    """Create an empty session."""
    return await sessions.create_session(user.id)


@router.get("/sessions/{session_id}", response_model=ChatSession)
async def get_session(session_id: str, user: CurrentUser, sessions: Sessions):
    """Get a session with its full message history."""
    return await sessions.get_session(user.id, session_id)


@router.get("/sessions/{session_id}/state")
async def get_session_state(session_id: str, user: CurrentUser, sessions: Sessions):
    """Current send state and in-progress reply text."""
    activity = sessions.get_activity(user.id, session_id)
    return {
        "session_id": session_id,
        "state": activity.state.value,
        "partial_text": activity.partial_text,
    }


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, user: CurrentUser, sessions: Sessions):
    """Delete a session. Rejected while a reply is streaming."""
    await sessions.delete_session(user.id, session_id)
