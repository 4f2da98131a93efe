"""
Group-scoped broadcast over the channel layer.

Each group receives one ``clinic.event`` message; consumers relay it to
the browser as ``{"event": ..., "data": ...}``.  Delivery is best effort:
nothing is persisted or replayed.
"""
from __future__ import annotations

import logging
from typing import Iterable

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

EVENT_TYPE = 'clinic.event'


def _message(event: str, data) -> dict:
    return {'type': EVENT_TYPE, 'event': event, 'data': data}


async def to_group(group: str, event: str, data) -> None:
    layer = get_channel_layer()
    if layer is None:
        logger.warning('no channel layer configured; %s to %s dropped', event, group)
        return
    await layer.group_send(group, _message(event, data))


async def fan_out(groups: Iterable[str], event: str, data) -> None:
    for g in groups:
        await to_group(g, event, data)


def broadcast_sync(groups: Iterable[str], event: str, data) -> None:
    """For HTTP views and management commands."""
    async_to_sync(fan_out)(list(groups), event, data)
