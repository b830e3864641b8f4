"""Realtime WebSocket endpoint.

Frames are JSON objects of the form {"event": <name>, "data": <payload>}.

Client -> server:
    join-note    data: "<noteId>" or {"noteId": "<noteId>"}
    note-update  data: {"noteId": ..., "heading": ..., "content": ...}

Server -> other clients in the room:
    note-updated data: {"heading": ..., "content": ...}
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..core.schemas.notes import RealtimeNoteUpdate
from ..core.services import AutoSaveCoordinator, Relay
from ..dependencies import get_coordinator, get_relay

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

JOIN_NOTE = "join-note"
NOTE_UPDATE = "note-update"
NOTE_UPDATED = "note-updated"


async def handle_event(
    connection_id: str,
    message: Any,
    coordinator: AutoSaveCoordinator,
    relay: Relay,
) -> None:
    """Dispatch one client frame. Malformed frames are logged and ignored."""
    if not isinstance(message, dict):
        logger.warning(f"Ignoring non-object frame from {connection_id}")
        return

    event = message.get("event")
    data = message.get("data")

    if event == JOIN_NOTE:
        note_id = data.get("noteId") if isinstance(data, dict) else data
        if not isinstance(note_id, str) or not note_id:
            logger.warning(f"Ignoring join-note without note id from {connection_id}")
            return
        if not relay.is_registered(connection_id):
            # dropped by a failed broadcast; the socket loop closes it
            logger.warning(f"Ignoring join-note from dropped connection {connection_id}")
            return
        relay.join(connection_id, note_id)

    elif event == NOTE_UPDATE:
        if isinstance(data, dict) and "noteId" not in data and "id" in data:
            data = {**data, "noteId": data["id"]}
        try:
            update = RealtimeNoteUpdate.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed note-update from {connection_id}: {e}")
            return

        coordinator.record_edit(update.note_id, update.heading, update.content)
        await relay.broadcast(
            update.note_id,
            connection_id,
            NOTE_UPDATED,
            {"heading": update.heading, "content": update.content},
        )

    else:
        logger.warning(f"Ignoring unknown event {event!r} from {connection_id}")


@router.websocket("/ws")
async def note_socket(
    websocket: WebSocket,
    coordinator: AutoSaveCoordinator = Depends(get_coordinator),
    relay: Relay = Depends(get_relay),
):
    await websocket.accept()
    connection_id = relay.register(websocket)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            if not relay.is_registered(connection_id):
                logger.warning(f"Closing connection {connection_id} dropped after a failed send")
                await websocket.close(code=1011)
                return
            raw = frame.get("text")
            if raw is None:
                logger.warning(f"Ignoring binary frame from {connection_id}")
                continue
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Ignoring invalid JSON from {connection_id}")
                continue
            await handle_event(connection_id, message, coordinator, relay)
    except WebSocketDisconnect:
        logger.info(f"Connection {connection_id} disconnected")
    finally:
        relay.leave(connection_id)
