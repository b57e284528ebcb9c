"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Manage active websocket connections grouped by channel name."""

    def __init__(self) -> None:
        self._channels: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._subscriptions: dict[WebSocket, frozenset[str]] = {}

    async def connect(self, websocket: WebSocket, channels: Iterable[str]) -> None:
        """Accept ``websocket`` and subscribe it to ``channels``."""

        await websocket.accept()
        self.subscribe(websocket, channels)

    def subscribe(self, websocket: WebSocket, channels: Iterable[str]) -> None:
        names = frozenset(channels)
        self._subscriptions[websocket] = self._subscriptions.get(websocket, frozenset()) | names
        for name in names:
            self._channels[name].add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove ``websocket`` from every channel it joined."""

        for name in self._subscriptions.pop(websocket, frozenset()):
            connections = self._channels.get(name)
            if connections is None:
                continue
            connections.discard(websocket)
            if not connections:
                self._channels.pop(name, None)

    def subscribers(self, channels: Iterable[str]) -> set[WebSocket]:
        """Return the distinct sockets listening on any of ``channels``."""

        sockets: set[WebSocket] = set()
        for name in channels:
            sockets.update(self._channels.get(name, ()))
        return sockets

    async def send_to_channels(self, channels: Iterable[str], message: dict[str, Any]) -> int:
        """Send ``message`` once to every socket subscribed to ``channels``.

        Returns the number of sockets that accepted the message.
        """

        delivered = 0
        for connection in list(self.subscribers(channels)):
            try:
                await connection.send_json(message)
            except Exception as exc:  # pragma: no cover - socket already gone
                logger.info("Dropping notification websocket after send failure: %s", exc)
                self.disconnect(connection)
            else:
                delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
