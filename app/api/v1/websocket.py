"""WebSocket endpoint for the dashboard flow monitor"""

import json
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import structlog

from app.core.monitoring import MetricsCollector
from app.services.flow_broadcaster import flow_broadcaster

logger = structlog.get_logger()

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time flow updates.

    Message Format:
    - Client -> Server:
      {"type": "subscribe", "channel": "..."} | {"type": "ping"}

    - Server -> Client:
      {"type": "status", "data": {"connected": true, "timestamp": "ISO8601"}}
      {"type": "subscribed", "channel": "..."}
      {"type": "atxp-flow", "data": <flow trace>}
      {"type": "pong" | "error", ...}
    """
    connection_id = str(uuid.uuid4())

    try:
        await flow_broadcaster.connect(websocket, connection_id)

        while True:
            raw = await websocket.receive_text()
            MetricsCollector.record_websocket_message("received")

            try:
                data = json.loads(raw)
            except ValueError:
                await flow_broadcaster.send_personal_message(
                    {"type": "error", "message": "Invalid JSON"},
                    connection_id
                )
                continue

            message_type = data.get("type") if isinstance(data, dict) else None

            if message_type == "subscribe":
                await flow_broadcaster.subscribe(connection_id, str(data.get("channel", "")))

            elif message_type == "ping":
                await flow_broadcaster.send_personal_message(
                    {
                        "type": "pong",
                        "timestamp": datetime.now(timezone.utc).isoformat()
                    },
                    connection_id
                )

            else:
                await flow_broadcaster.send_personal_message(
                    {"type": "error", "message": f"Unknown message type: {message_type}"},
                    connection_id
                )

    except WebSocketDisconnect:
        logger.info("websocket_client_disconnected", connection_id=connection_id)

    except Exception as e:
        logger.error(
            "websocket_error",
            connection_id=connection_id,
            error=str(e)
        )

    finally:
        await flow_broadcaster.disconnect(connection_id)
