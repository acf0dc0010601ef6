"""Helpers for reading fields off Stripe API objects."""

from datetime import datetime, timezone
from typing import Any

import stripe


def ts_to_iso(ts: int | None) -> str | None:
    """Convert a Stripe Unix timestamp to an ISO-8601 UTC string."""
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def get_first_item(stripe_sub: stripe.Subscription):
    """Get the first subscription item, using bracket notation to avoid
    collision with Python dict .items() in newer Stripe API versions.
    """
    try:
        sub_items = stripe_sub["items"]
    except (KeyError, AttributeError, TypeError):
        return None
    if sub_items and sub_items.data:
        return sub_items.data[0]
    return None


def get_price_id(stripe_sub: stripe.Subscription) -> str | None:
    item = get_first_item(stripe_sub)
    return item.price.id if item else None


def get_period(stripe_sub: stripe.Subscription) -> tuple[int | None, int | None]:
    """Current period (start, end) as Unix timestamps.

    In Stripe API 2025-08-27 (basil), current_period_start/end moved
    from the subscription object to the subscription item; both are read.
    """
    start = getattr(stripe_sub, "current_period_start", None)
    end = getattr(stripe_sub, "current_period_end", None)
    item = get_first_item(stripe_sub)
    if item is not None:
        start = start or getattr(item, "current_period_start", None)
        end = end or getattr(item, "current_period_end", None)
    return start, end


def get_metadata(obj: Any) -> dict:
    metadata = getattr(obj, "metadata", None)
    return dict(metadata) if metadata else {}


def get_id(value: Any) -> str | None:
    """Return the id of an expandable field (either an id string or an object)."""
    if value is None or isinstance(value, str):
        return value
    return getattr(value, "id", None)
