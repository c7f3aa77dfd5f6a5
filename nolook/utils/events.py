"""Server-Sent Events feed of note document changes."""

import asyncio
import json
import logging
from typing import Any, Dict, Set

logger = logging.getLogger(__name__)


class NoteChangeFeed:
    """Fans note ledger changes out to a user's connected clients."""

    def __init__(self):
        # Maps owner id to a set of queues (one per connection)
        self.owner_queues: Dict[str, Set[asyncio.Queue]] = {}

    async def subscribe(self, owner_id: str):
        """Subscribe to note changes for a specific owner."""
        queue: asyncio.Queue[str] = asyncio.Queue()
        self.owner_queues.setdefault(owner_id, set()).add(queue)

        logger.info(
            f"[SSE] Owner {owner_id} subscribed. Active connections: {len(self.owner_queues[owner_id])}"
        )

        try:
            # Initial ping confirms the connection
            yield ": ping\n\n"

            while True:
                data = await queue.get()
                yield data
        finally:
            if owner_id in self.owner_queues:
                self.owner_queues[owner_id].discard(queue)
                if not self.owner_queues[owner_id]:
                    del self.owner_queues[owner_id]
            logger.info(f"[SSE] Owner {owner_id} unsubscribed.")

    def connection_count(self, owner_id: str) -> int:
        return len(self.owner_queues.get(owner_id, ()))

    async def publish(self, owner_id: str, event_name: str, data: dict[str, Any]):
        """Send an event to every connection of an owner."""
        queues = self.owner_queues.get(owner_id)
        if not queues:
            logger.debug(
                f"[SSE] No active connections for owner {owner_id} to publish '{event_name}'"
            )
            return

        message = f"event: {event_name}\ndata: {json.dumps(data, default=str)}\n\n"
        for queue in list(queues):
            await queue.put(message)
