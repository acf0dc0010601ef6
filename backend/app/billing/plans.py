"""Plan definitions — pricing for the monthly and yearly subscriptions."""

from dataclasses import dataclass

from app.config import settings


@dataclass(frozen=True)
class Plan:
    """A purchasable subscription plan."""

    plan_type: str
    label: str
    interval: str  # "month" or "year"
    amount: float  # USD
    stripe_price_id: str | None
    monthly_equivalent: float | None = None
    savings: str | None = None


PLANS: dict[str, Plan] = {
    "monthly": Plan(
        plan_type="monthly",
        label="Monthly",
        interval="month",
        amount=12.99,
        stripe_price_id=settings.stripe_monthly_price_id or None,
    ),
    "yearly": Plan(
        plan_type="yearly",
        label="Yearly",
        interval="year",
        amount=69.99,
        stripe_price_id=settings.stripe_yearly_price_id or None,
        monthly_equivalent=5.83,
        savings="55%",
    ),
}

DEFAULT_PLAN_TYPE = "monthly"


def get_plan_type_by_price_id(price_id: str) -> str | None:
    """Reverse lookup: Stripe price ID -> plan type. Returns None if not found."""
    for plan in PLANS.values():
        if plan.stripe_price_id and plan.stripe_price_id == price_id:
            return plan.plan_type
    return None
