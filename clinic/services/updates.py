"""
Slot list cache and change fan-out.

Computed slot lists are cached per (doctor, date) under a per-doctor
version number.  Any write that can change availability bumps the
version, which invalidates every cached date of that doctor at once, and
then tells open booking screens over the channel layer to refetch.
Booking commits never read from this cache.
"""
from __future__ import annotations

from datetime import date
from typing import Callable, Optional

import structlog
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

logger = structlog.get_logger(__name__)


def _version_key(doctor_id: int) -> str:
    return f"slots:v:d={doctor_id}"


def _slot_key(doctor_id: int, day: date) -> str:
    version = cache.get(_version_key(doctor_id)) or 0
    return f"slots:d={doctor_id}:date={day.isoformat()}:v={version}"


def slot_group(doctor_id: int, day: Optional[date] = None) -> str:
    if day is None:
        return f"slots.{doctor_id}"
    return f"slots.{doctor_id}.{day.isoformat()}"


def cached_slot_payload(doctor_id: int, day: date, compute: Callable[[], dict]) -> dict:
    key = _slot_key(doctor_id, day)
    payload = cache.get(key)
    if payload is None:
        payload = compute()
        cache.set(key, payload, settings.SLOT_CACHE_TTL)
    return payload


def invalidate_doctor_slots(doctor_id: int) -> None:
    key = _version_key(doctor_id)
    cache.add(key, 0, None)
    try:
        cache.incr(key)
    except ValueError:
        # evicted between add and incr
        cache.set(key, 1, None)


def broadcast_slots_changed(doctor_id: int, day: Optional[date] = None, *, cause: str) -> None:
    """Invalidate cached slots and notify subscribers of (doctor, date).

    ``day=None`` means every date of the doctor may have changed (weekly
    schedule edits); the event then goes to the doctor-wide group.
    """
    invalidate_doctor_slots(doctor_id)
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {
        "type": "slots.changed",
        "doctorId": doctor_id,
        "date": day.isoformat() if day else None,
        "cause": cause,
        "ts": timezone.now().isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)(slot_group(doctor_id, day), event)
        if day is not None:
            async_to_sync(channel_layer.group_send)(slot_group(doctor_id), event)
    except Exception as exc:
        # The write already happened; a missed push only delays a refresh.
        logger.warning('slot_broadcast_failed', doctor_id=doctor_id, cause=cause, error=str(exc))
