"""Pydantic v2 request/response schemas for billing endpoints.

The web client speaks camelCase JSON; field aliases are generated from the
snake_case attribute names.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Request schemas ---


class CheckoutRequest(_CamelModel):
    """Request to create a Stripe Checkout session."""

    price_id: str | None = None
    plan_type: str | None = None  # "monthly" (default) or "yearly"


class CancelRequest(_CamelModel):
    """Optional exit survey sent with a cancellation."""

    reason: str | None = None
    feedback: str | None = None


# --- Response schemas ---


class CheckoutResponse(_CamelModel):
    """Stripe Checkout session returned to the frontend."""

    session_id: str
    url: str | None


class PortalResponse(_CamelModel):
    url: str


class CancelResponse(_CamelModel):
    success: bool = True
    cancel_at: str  # ISO-8601


class ReactivateResponse(_CamelModel):
    success: bool = True
    status: str | None


class SubscriptionResponse(_CamelModel):
    """Billing record plus access flags derived from it."""

    subscription_status: str
    plan_type: str | None = None
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    current_period_end: str | None = None
    trial_end_date: str | None = None
    cancel_at_period_end: bool
    has_access: bool
    is_trialing: bool
    trial_days_left: int
    is_canceled: bool


class PlanResponse(_CamelModel):
    """Plan details for display."""

    plan_type: str
    label: str
    interval: str
    amount: float
    price_id: str | None
    monthly_equivalent: float | None = None
    savings: str | None = None


class PlansListResponse(_CamelModel):
    """All available plans."""

    plans: list[PlanResponse]
    trial_days: int
    free_sessions_limit: int
