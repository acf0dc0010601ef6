"""Billing sub-record — the ``billing`` map embedded in each user document."""

from datetime import datetime, timezone
from enum import Enum

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class SubscriptionStatus(str, Enum):
    """Locally mirrored subscription label (not Stripe's literal status)."""

    TRIAL = "trial"
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"
    PAST_DUE = "past_due"
    NONE = "none"


ACCESS_STATUSES = {SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL}


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the format stored in Firestore)."""
    return datetime.now(timezone.utc).isoformat()


class BillingRecord(BaseModel):
    """Typed view of ``swift_users/{uid}.billing``.

    Field names are snake_case in Python and camelCase in Firestore.
    Unknown keys are kept so a round-trip never drops data written by
    other clients (the iOS app writes into the same document).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    stripe_price_id: str | None = None
    subscription_status: SubscriptionStatus = SubscriptionStatus.NONE
    plan_type: str | None = None
    cancel_at_period_end: bool = False
    cancellation_reason: str | None = None
    cancellation_feedback: str | None = None
    cancellation_initiated_at: str | None = None
    current_period_start: str | None = None
    current_period_end: str | None = None
    trial_start_date: str | None = None
    trial_end_date: str | None = None
    last_payment_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    # The iOS app and older web builds write into the same map; values this
    # model does not recognize read as defaults.
    @field_validator("subscription_status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> SubscriptionStatus:
        try:
            return SubscriptionStatus(value)
        except ValueError:
            return SubscriptionStatus.NONE

    @field_validator("cancel_at_period_end", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return value is True

    @field_validator(
        "cancellation_initiated_at",
        "current_period_start",
        "current_period_end",
        "trial_start_date",
        "trial_end_date",
        "last_payment_date",
        "created_at",
        "updated_at",
        mode="before",
    )
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> str | None:
        # Firestore returns Timestamp fields as DatetimeWithNanoseconds
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.isoformat()
        return value if isinstance(value, str) else None

    @property
    def has_access(self) -> bool:
        return self.subscription_status in ACCESS_STATUSES

    @property
    def is_trialing(self) -> bool:
        return self.subscription_status == SubscriptionStatus.TRIAL

    def trial_days_left(self, now: datetime | None = None) -> int:
        """Whole days (rounded up) until the trial ends; 0 when unknown or past."""
        if not self.trial_end_date:
            return 0
        try:
            end = datetime.fromisoformat(self.trial_end_date.replace("Z", "+00:00"))
        except ValueError:
            return 0
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        remaining = (end - now).total_seconds()
        if remaining <= 0:
            return 0
        return int(-(-remaining // 86400))
