"""
Inbound event fabric.

Multi-producer, single-consumer intake for device events. Adapters call
receive() from their own threads; only the Router calls next().
"""

import logging
import queue
from typing import List, Optional

from home_hub.core.events import InboundEvent

logger = logging.getLogger(__name__)


class InboundFabric:
    """
    Unbounded FIFO between adapters and the Router.

    Events are delivered in the order their receive() calls completed.
    Nothing is ever dropped.
    """

    def __init__(self) -> None:
        """Initialize an empty fabric."""
        self._queue: "queue.Queue[Optional[InboundEvent]]" = queue.Queue()

    def receive(self, event: InboundEvent) -> None:
        """
        Enqueue an event. Safe to call from any thread.

        Args:
            event: The inbound event
        """
        logger.debug(f"Received {type(event).__name__}")
        self._queue.put(event)

    def next(self, timeout: Optional[float] = None) -> Optional[InboundEvent]:
        """
        Take the next event, blocking until one is available.

        Args:
            timeout: Maximum seconds to wait (None = wait forever)

        Returns:
            The next event, or None on timeout or after wakeup()
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def wakeup(self) -> None:
        """Unblock a consumer waiting in next()."""
        self._queue.put(None)

    def pending(self) -> int:
        """Approximate number of queued events."""
        return self._queue.qsize()

    def drain(self) -> List[InboundEvent]:
        """Remove and return every queued event without blocking."""
        events: List[InboundEvent] = []
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return events
            if event is not None:
                events.append(event)
