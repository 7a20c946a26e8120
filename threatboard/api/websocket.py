"""
WebSocket API for Threatboard.

This module pushes dashboard state to connected clients on every change.
"""

import asyncio
import json
from typing import Any, Dict, List
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query

from threatboard.api.dashboard import serialize_state
from threatboard.api.dependencies import get_ws_session
from threatboard.core.logging import logger
from threatboard.models.state import AggregationState
from threatboard.services.aggregation_store import Subscription
from threatboard.utils.helpers import utc_now

router = APIRouter()


class ConnectionManager:
    """
    WebSocket connection manager.
    """
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket, client_id: str):
        """
        Accept a WebSocket client.

        Args:
            websocket: WebSocket connection.
            client_id: Client identifier.
        """
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Client {client_id} connected to WebSocket")

        await websocket.send_json({
            "type": "connection_established",
            "client_id": client_id,
            "timestamp": utc_now().isoformat()
        })

    def disconnect(self, websocket: WebSocket):
        """
        Forget a WebSocket client.

        Args:
            websocket: WebSocket connection.
        """
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)


# Create connection manager
manager = ConnectionManager()


def state_message(state: AggregationState) -> Dict[str, Any]:
    """Build the message pushed for a state change."""
    return {
        "type": "state",
        "data": serialize_state(state),
        "timestamp": utc_now().isoformat()
    }


async def _forward(
    websocket: WebSocket,
    outbox: "asyncio.Queue[Dict[str, Any]]",
    subscription: Subscription,
):
    """
    Send queued messages to the client; the only writer for the socket.

    Stops and releases the subscription on the first failed send.
    """
    while True:
        message = await outbox.get()
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.warning(f"Stopping WebSocket push, send failed: {e}")
            subscription.dispose()
            return


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    client_id: str = Query("anonymous"),
):
    """
    WebSocket endpoint for live dashboard state.

    Sends the current state right after connecting and again after every
    new sample. Clients may send {"type": "ping"} to get a pong.

    Args:
        websocket: WebSocket connection.
        client_id: Client identifier.
    """
    session = get_ws_session(websocket)
    if session is None:
        await websocket.close(code=1013)
        return

    await manager.connect(websocket, client_id)

    outbox: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
    subscription = session.store.subscribe(lambda state: outbox.put_nowait(state_message(state)))
    sender = asyncio.create_task(_forward(websocket, outbox, subscription))

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                outbox.put_nowait({
                    "type": "error",
                    "message": "Invalid JSON",
                    "timestamp": utc_now().isoformat()
                })
                continue

            if isinstance(message, dict) and message.get("type") == "ping":
                outbox.put_nowait({
                    "type": "pong",
                    "timestamp": utc_now().isoformat()
                })
            else:
                outbox.put_nowait({
                    "type": "error",
                    "message": "Unknown message type",
                    "timestamp": utc_now().isoformat()
                })
    except WebSocketDisconnect:
        logger.info(f"Client {client_id} disconnected from WebSocket")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        subscription.dispose()
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
        manager.disconnect(websocket)
