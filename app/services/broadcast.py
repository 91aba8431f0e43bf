"""Broadcast channel: fan-out of realtime results to websocket clients."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ClientSubscription:
    """A connected consumer. `socket` only needs async `send_json` and `close`."""
    socket: Any
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class BroadcastChannel:
    """Set of subscribers; no buffering, no retry, no replay."""

    def __init__(self):
        self._subscribers: Dict[str, ClientSubscription] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, socket: Any) -> ClientSubscription:
        sub = ClientSubscription(socket)
        self._subscribers[sub.id] = sub
        logger.info("Client %s subscribed (%d connected)", sub.id, len(self._subscribers))
        return sub

    def unsubscribe(self, sub: ClientSubscription) -> bool:
        removed = self._subscribers.pop(sub.id, None) is not None
        if removed:
            logger.info("Client %s unsubscribed (%d connected)", sub.id, len(self._subscribers))
        return removed

    def subscribers(self) -> List[ClientSubscription]:
        return list(self._subscribers.values())

    async def broadcast(self, message: Dict[str, Any]) -> int:
        """Send `message` to every subscriber. Returns how many got it.

        A subscriber whose send fails is dropped.
        """
        subs = self.subscribers()
        if not subs:
            return 0
        results = await asyncio.gather(
            *(sub.socket.send_json(message) for sub in subs),
            return_exceptions=True,
        )
        delivered = 0
        for sub, result in zip(subs, results):
            if isinstance(result, BaseException):
                logger.warning("Dropping client %s after failed send: %s", sub.id, result)
                self.unsubscribe(sub)
            else:
                delivered += 1
        return delivered

    async def close_all(self) -> None:
        subs = self.subscribers()
        self._subscribers.clear()
        for sub in subs:
            try:
                await sub.socket.close()
            except Exception as e:
                logger.debug("Closing client %s failed: %s", sub.id, e)
