import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from character_generator.config import SESSION_COOKIE
from character_generator.deps import get_session_store
from character_generator.schemas import SessionSnapshot
from character_generator.sessions import Session, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()

IMAGE_FIELDS = ("uploaded_image", "generated_image")


def snapshot_message(
    snapshot: SessionSnapshot, previous: Optional[SessionSnapshot]
) -> dict:
    """
    Serialize a snapshot, dropping image data URLs the browser already has.

    A missing image key means "unchanged"; an explicit null means "cleared".
    """
    message = snapshot.model_dump(mode="json")
    if previous is not None:
        for field in IMAGE_FIELDS:
            if getattr(snapshot, field) == getattr(previous, field):
                del message[field]
    return message


async def _forward_snapshots(websocket_browser: WebSocket, session: Session, queue):
    previous = session.snapshot()
    await websocket_browser.send_json(snapshot_message(previous, None))
    while True:
        snapshot = await queue.get()
        session.touch()
        await websocket_browser.send_json(snapshot_message(snapshot, previous))
        previous = snapshot


@router.websocket("/ws")
async def websocket_endpoint(
    websocket_browser: WebSocket, store: SessionStore = Depends(get_session_store)
):
    """Push a fresh session snapshot to the browser after every change."""
    session_id = websocket_browser.query_params.get(
        "sessionId", websocket_browser.cookies.get(SESSION_COOKIE)
    )
    session = store.get_or_create(session_id)
    queue = session.subscribe()
    forwarder = None
    try:
        await websocket_browser.accept()
        forwarder = asyncio.create_task(
            _forward_snapshots(websocket_browser, session, queue)
        )

        # The browser never sends anything; this only returns on disconnect.
        while True:
            await websocket_browser.receive_text()

    except WebSocketDisconnect:
        logger.debug("Browser websocket closed for session %s", session.id)
    finally:
        if forwarder is not None:
            forwarder.cancel()
        session.unsubscribe(queue)


def get_router():
    return router
