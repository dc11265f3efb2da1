"""
Listing visibility rules.

A pool is public while ``is_visible`` is set and ``visible_until`` is either
unset or not yet in the past. The rule is evaluated on every read; nothing
derived from it is stored.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from pymongo import DESCENDING

from poolrent.models.base import is_object_id
from poolrent.models.pool import PoolDocument

# Listing order for every pool query
LISTING_SORT = [("created_at", DESCENDING)]


def _as_utc(value: datetime) -> datetime:
    # Mongo returns naive UTC; request payloads may carry an offset.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_publicly_visible(pool: PoolDocument, now: datetime) -> bool:
    if not pool.is_visible:
        return False
    if pool.visible_until is None:
        return True
    return _as_utc(pool.visible_until) >= _as_utc(now)


def can_view(pool: PoolDocument, caller_id: Optional[str], now: datetime) -> bool:
    """Public pools are viewable by anyone, hidden ones only by their owner."""
    if is_publicly_visible(pool, now):
        return True
    return caller_id is not None and caller_id == pool.user_id


def public_filter(now: datetime) -> dict[str, Any]:
    """Mongo form of ``is_publicly_visible``."""
    now = _as_utc(now).replace(tzinfo=None)
    return {
        "is_visible": True,
        "$or": [
            {"visible_until": None},
            {"visible_until": {"$gte": now}},
        ],
    }


def listing_filter_for(requested_owner_id: Optional[str], now: datetime) -> dict[str, Any]:
    """
    Build the store-level filter for the pool listing.

    A valid owner id selects every pool of that owner, hidden or expired ones
    included (the owner's dashboard). Anything else, including a malformed id,
    falls back to the public filter rather than failing the request.
    """
    if requested_owner_id is not None:
        requested_owner_id = requested_owner_id.strip()
    if is_object_id(requested_owner_id):
        return {"user_id": ObjectId(requested_owner_id)}
    return public_filter(now)
