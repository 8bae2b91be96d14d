# backend/trailblazers/core/broadcast.py
"""
Shared broadcast manager for notification fan-out.

One Broadcaster instance per process; every notification feed subscribes
through it. ``memory://`` works in-process (development, tests); a
``redis://`` URL fans out across API workers and Celery.
"""

import asyncio
import logging
from typing import Optional

from broadcaster import Broadcast

from .config import settings

logger = logging.getLogger(__name__)

_broadcast: Optional[Broadcast] = None
_loop: Optional[asyncio.AbstractEventLoop] = None


def get_broadcast() -> Broadcast:
    """
    Get the shared broadcast instance.

    Raises:
        RuntimeError: If broadcast is not initialized (call connect_broadcast first)
    """
    if _broadcast is None:
        raise RuntimeError("Broadcast not initialized. Call connect_broadcast() during startup.")
    return _broadcast


def is_broadcast_initialized() -> bool:
    return _broadcast is not None


def get_broadcast_loop() -> Optional[asyncio.AbstractEventLoop]:
    """The event loop the shared instance was connected on, if any."""
    return _loop if _broadcast is not None else None


async def connect_broadcast(url: Optional[str] = None) -> Broadcast:
    """Connect the shared instance; call during application startup."""
    global _broadcast, _loop

    broadcast_url = url or settings.broadcast_url
    _broadcast = Broadcast(broadcast_url)
    await _broadcast.connect()
    _loop = asyncio.get_running_loop()
    logger.info("[BROADCAST] Connected notification fan-out: %s", broadcast_url)
    return _broadcast


async def disconnect_broadcast() -> None:
    global _broadcast, _loop

    if _broadcast is not None:
        await _broadcast.disconnect()
        _broadcast = None
        _loop = None
        logger.info("[BROADCAST] Disconnected")
