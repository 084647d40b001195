"""
Flow Broadcaster - pushes ATXP flow traces to connected dashboard clients.

Every invocation's trace goes to every open connection. Channel subscriptions
are acknowledged and tracked per connection but do not filter flow messages.
"""

from typing import Dict, Set, Any
from datetime import datetime, timezone
from fastapi import WebSocket
import structlog

from app.core.monitoring import MetricsCollector
from app.schemas.atxp_flow import FlowTrace

logger = structlog.get_logger()


class FlowBroadcaster:
    """
    Manages WebSocket connections for the flow monitor.

    Provides:
    - Connection lifecycle management
    - Channel subscription bookkeeping
    - Broadcast of flow traces to all connected clients
    """

    def __init__(self):
        # Active WebSocket connections: {connection_id: websocket}
        self.active_connections: Dict[str, WebSocket] = {}

        # Channel subscriptions: {connection_id: {channel}}
        self.subscriptions: Dict[str, Set[str]] = {}

    @property
    def connection_count(self) -> int:
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket, connection_id: str) -> None:
        """
        Accept and register a new WebSocket connection, then greet it
        with the connection status message.
        """
        await websocket.accept()

        self.active_connections[connection_id] = websocket
        self.subscriptions[connection_id] = set()
        MetricsCollector.update_websocket_connections(self.connection_count)

        logger.info("websocket_connected", connection_id=connection_id)

        await self.send_personal_message(
            {
                "type": "status",
                "data": {
                    "connected": True,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            },
            connection_id,
        )

    async def disconnect(self, connection_id: str) -> None:
        """Remove and cleanup a WebSocket connection"""
        websocket = self.active_connections.pop(connection_id, None)

        if websocket is None:
            return

        channels = self.subscriptions.pop(connection_id, set())
        MetricsCollector.update_websocket_connections(self.connection_count)

        logger.info(
            "websocket_disconnected",
            connection_id=connection_id,
            subscription_count=len(channels),
        )

    async def subscribe(self, connection_id: str, channel: str) -> None:
        """Record a channel subscription and acknowledge it"""
        if connection_id not in self.active_connections:
            return

        self.subscriptions[connection_id].add(channel)

        logger.info(
            "channel_subscription_added",
            connection_id=connection_id,
            channel=channel,
        )

        await self.send_personal_message(
            {"type": "subscribed", "channel": channel},
            connection_id,
        )

    async def send_personal_message(
        self,
        message: Dict[str, Any],
        connection_id: str
    ) -> bool:
        """
        Send message to a specific connection.

        Returns:
            True if message sent successfully, False otherwise
        """
        websocket = self.active_connections.get(connection_id)

        if websocket is None:
            return False

        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.error(
                "failed_to_send_message",
                connection_id=connection_id,
                error=str(e),
            )
            # Connection is broken, disconnect it
            await self.disconnect(connection_id)
            return False

        MetricsCollector.record_websocket_message("sent")
        return True

    async def broadcast(self, message: Dict[str, Any]) -> int:
        """
        Broadcast message to all connected clients.

        Returns:
            Number of clients that received the message
        """
        disconnected = []
        sent_count = 0

        for connection_id, websocket in list(self.active_connections.items()):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.error(
                    "failed_to_broadcast",
                    connection_id=connection_id,
                    error=str(e),
                )
                disconnected.append(connection_id)

        # Clean up disconnected connections
        for connection_id in disconnected:
            await self.disconnect(connection_id)

        if sent_count:
            MetricsCollector.record_websocket_message("sent", sent_count)

        logger.debug(
            "message_broadcasted",
            message_type=message.get("type"),
            recipient_count=sent_count,
            failed_count=len(disconnected),
        )
        return sent_count

    async def publish_flow(self, trace: FlowTrace) -> int:
        """Broadcast a flow trace as an ``atxp-flow`` message"""
        return await self.broadcast({"type": "atxp-flow", "data": trace.to_message()})


# Global flow broadcaster instance
flow_broadcaster = FlowBroadcaster()
