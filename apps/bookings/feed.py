"""Live booking feed for the admin dashboard.

Subscribers receive a full snapshot of the bookings collection (newest
submission first) after every committed booking change. Each snapshot
replaces the previous one; consumers never diff.

The hub lives in process memory: it sees the changes committed by the
process it runs in. ``stream_snapshots`` serves WSGI workers and
``astream_snapshots`` serves ASGI ones.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from typing import AsyncIterator, Callable, Iterator, List, Optional

from asgiref.sync import sync_to_async  # type: ignore
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)

Snapshot = List[dict]
Subscriber = Callable[[Snapshot], None]


class BookingFeed:
    """Fan-out of booking snapshots to subscribers."""

    def __init__(self, snapshot: Optional[Callable[[], Snapshot]] = None):
        self._snapshot = snapshot
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def take_snapshot(self) -> Snapshot:
        if self._snapshot is not None:
            return self._snapshot()
        from .application.queries import booking_snapshot

        return booking_snapshot()

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Attach a subscriber; returns the callable that detaches it."""
        with self._lock:
            self._subscribers.append(subscriber)
            logger.debug(f"Feed subscriber attached ({len(self._subscribers)} active)")

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)
                    logger.debug(f"Feed subscriber detached ({len(self._subscribers)} active)")

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self) -> int:
        """Push a fresh snapshot to every subscriber; returns how many got it."""
        with self._lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return 0

        snapshot = self.take_snapshot()
        delivered = 0
        for subscriber in subscribers:
            try:
                subscriber(snapshot)
                delivered += 1
            except Exception:
                logger.error("Feed subscriber failed", exc_info=True)
        return delivered


class SnapshotQueue:
    """Bounded mailbox for one stream consumer.

    When the consumer falls behind the oldest snapshot is dropped: only the
    latest one matters.
    """

    def __init__(self, maxsize: Optional[int] = None):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize or settings.GUESTHOUSE_FEED_QUEUE_SIZE)

    def __call__(self, snapshot: Snapshot) -> None:
        while True:
            try:
                self._queue.put_nowait(snapshot)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass

    def get(self, timeout: Optional[float] = None) -> Optional[Snapshot]:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


def format_sse(snapshot: Snapshot, event: str = "snapshot") -> str:
    return f"event: {event}\ndata: {json.dumps(snapshot, default=str)}\n\n"


def stream_snapshots(feed: BookingFeed, keepalive: Optional[float] = None) -> Iterator[str]:
    """Server-Sent Events body: initial snapshot, then one per change.

    The subscription is detached when the generator is closed (client
    disconnect) or garbage collected.
    """
    keepalive = keepalive or settings.GUESTHOUSE_FEED_KEEPALIVE
    mailbox = SnapshotQueue()
    unsubscribe = feed.subscribe(mailbox)
    try:
        yield format_sse(feed.take_snapshot())
        while True:
            snapshot = mailbox.get(timeout=keepalive)
            if snapshot is None:
                yield ": keepalive\n\n"
                continue
            yield format_sse(snapshot)
    finally:
        unsubscribe()


async def astream_snapshots(feed: BookingFeed, keepalive: Optional[float] = None) -> AsyncIterator[str]:
    """Async variant of ``stream_snapshots`` for ASGI servers.

    Waiting for the next snapshot happens in a worker thread so the event
    loop stays free. Cancellation (client disconnect) detaches the
    subscription.
    """
    keepalive = keepalive or settings.GUESTHOUSE_FEED_KEEPALIVE
    mailbox = SnapshotQueue()
    unsubscribe = feed.subscribe(mailbox)
    wait_for_snapshot = sync_to_async(mailbox.get, thread_sensitive=False)
    try:
        yield format_sse(await sync_to_async(feed.take_snapshot)())
        while True:
            snapshot = await wait_for_snapshot(keepalive)
            if snapshot is None:
                yield ": keepalive\n\n"
                continue
            yield format_sse(snapshot)
    finally:
        unsubscribe()


booking_feed = BookingFeed()
