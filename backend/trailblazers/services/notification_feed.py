# backend/trailblazers/services/notification_feed.py
"""
Per-user notification stream over the shared Broadcaster.

``NotificationFeed`` is an async context manager: entering subscribes to
the user's channel, leaving cancels the subscription. Iterating it yields
``NotificationEvent`` objects carrying the current unread count, which is
all a notification badge needs.
"""

import asyncio
from dataclasses import asdict, dataclass
import json
import logging
from typing import Any, AsyncIterator, Dict, Iterable, Optional

from broadcaster import Broadcast

from ..core.broadcast import get_broadcast, get_broadcast_loop
from ..core.config import settings
from ..core.constants import NOTIFICATION_CHANNEL_PREFIX

logger = logging.getLogger(__name__)

EVENT_CREATED = "created"
EVENT_READ = "read"
EVENT_READ_ALL = "read_all"

BLOCKING_PUBLISH_TIMEOUT_SECONDS = 5


def channel_for(user_id: str) -> str:
    return f"{NOTIFICATION_CHANNEL_PREFIX}{user_id}"


@dataclass(frozen=True)
class NotificationEvent:
    kind: str
    user_id: str
    unread_count: int
    notification_id: Optional[str] = None
    title: Optional[str] = None
    hike_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "NotificationEvent":
        data = json.loads(raw)
        return cls(
            kind=data["kind"],
            user_id=data["user_id"],
            unread_count=int(data["unread_count"]),
            notification_id=data.get("notification_id"),
            title=data.get("title"),
            hike_id=data.get("hike_id"),
        )


async def publish_event(event: NotificationEvent, broadcast: Optional[Broadcast] = None) -> None:
    """Publish to the user's channel; a missing broadcaster is logged, not raised."""
    try:
        target = broadcast or get_broadcast()
    except RuntimeError as e:
        logger.warning(f"[NOTIFY-PUBLISH] Broadcast not initialized, cannot publish: {e}")
        return
    await target.publish(channel=channel_for(event.user_id), message=event.to_json())
    logger.debug("[NOTIFY-PUBLISH] %s event for user %s", event.kind, event.user_id)


async def publish_events(
    events: Iterable[NotificationEvent], broadcast: Optional[Broadcast] = None
) -> None:
    for event in events:
        await publish_event(event, broadcast)


def publish_events_blocking(events: Iterable[NotificationEvent]) -> None:
    """
    Publish from synchronous code.

    When this process holds the connected shared broadcaster (the API, with
    eager tasks or threadpool routes), events go through it on its own
    loop so in-process feeds receive them. Otherwise (a Celery worker) a
    short-lived connection to ``settings.broadcast_url`` is opened; that
    needs a cross-process backend, so ``memory://`` is refused there.
    """
    pending = list(events)
    if not pending:
        return

    shared_loop = get_broadcast_loop()
    if shared_loop is not None and shared_loop.is_running():
        coroutine = publish_events(pending, get_broadcast())
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is shared_loop:
            # Called from sync code on the loop itself; blocking would deadlock
            shared_loop.create_task(coroutine)
            return
        asyncio.run_coroutine_threadsafe(coroutine, shared_loop).result(
            timeout=BLOCKING_PUBLISH_TIMEOUT_SECONDS
        )
        return

    if settings.broadcast_url.startswith("memory://"):
        logger.warning(
            "[NOTIFY-PUBLISH] Dropping %d event(s): memory:// cannot reach other processes; "
            "set BROADCAST_URL to a redis:// URL for worker publishing",
            len(pending),
        )
        return

    async def _run() -> None:
        broadcast = Broadcast(settings.broadcast_url)
        await broadcast.connect()
        try:
            await publish_events(pending, broadcast)
        finally:
            await broadcast.disconnect()

    asyncio.run(_run())


class NotificationFeed:
    def __init__(self, user_id: str, broadcast: Optional[Broadcast] = None):
        self.user_id = user_id
        self.channel = channel_for(user_id)
        self._broadcast = broadcast
        self._subscription: Any = None
        self._subscriber: Any = None

    @property
    def is_open(self) -> bool:
        return self._subscriber is not None

    async def __aenter__(self) -> "NotificationFeed":
        broadcast = self._broadcast or get_broadcast()
        self._subscription = broadcast.subscribe(channel=self.channel)
        self._subscriber = await self._subscription.__aenter__()
        logger.info("[NOTIFY-FEED] Subscribed to %s", self.channel)
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        subscription = self._subscription
        self._subscription = None
        self._subscriber = None
        if subscription is not None:
            await subscription.__aexit__(exc_type, exc, tb)
            logger.info("[NOTIFY-FEED] Unsubscribed from %s", self.channel)

    def __aiter__(self) -> AsyncIterator[NotificationEvent]:
        return self.events()

    async def events(self) -> AsyncIterator[NotificationEvent]:
        if self._subscriber is None:
            raise RuntimeError("NotificationFeed is not open; use 'async with'")
        async for message in self._subscriber:
            try:
                yield NotificationEvent.from_json(message.message)
            except (ValueError, KeyError) as e:
                logger.warning(f"[NOTIFY-FEED] Dropping malformed event on {self.channel}: {e}")
