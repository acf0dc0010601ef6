"""Subscription lifecycle — checkout, portal, cancel and reactivate.

Each operation reads the caller's billing sub-record, performs its Stripe
call(s), and only then merge-writes the normalized status back to the user
document. A failed Stripe call leaves the record untouched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import stripe
from stripe import StripeClient

from app.auth.firebase import VerifiedUser
from app.billing.errors import (
    NoBillingAccountError,
    NoSubscriptionError,
    NotScheduledForCancellationError,
)
from app.billing.objects import get_period, ts_to_iso
from app.billing.plans import DEFAULT_PLAN_TYPE
from app.billing.stripe_client import (
    create_checkout_session,
    create_customer,
    create_portal_session,
    get_subscription,
    set_cancel_at_period_end,
)
from app.config import settings
from app.models.billing import BillingRecord, SubscriptionStatus, utc_now_iso
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    session_id: str
    url: str | None


async def ensure_stripe_customer(
    store: UserStore,
    client: StripeClient,
    user: VerifiedUser,
    billing: BillingRecord,
) -> str:
    """Ensure the user has a Stripe customer ID. Create and persist one if missing."""
    if billing.stripe_customer_id:
        return billing.stripe_customer_id

    customer = await create_customer(client, email=user.email, user_id=user.uid)
    await store.merge_billing(
        user.uid,
        {"stripeCustomerId": customer.id, "createdAt": utc_now_iso()},
    )
    logger.info("Linked Stripe customer %s to user %s", customer.id, user.uid)
    return customer.id


async def create_checkout(
    store: UserStore,
    client: StripeClient,
    user: VerifiedUser,
    price_id: str,
    plan_type: str | None = None,
) -> CheckoutResult:
    """Create a hosted checkout session for ``price_id``."""
    billing = await store.get_billing(user.uid)
    customer_id = await ensure_stripe_customer(store, client, user, billing)

    session = await create_checkout_session(
        client,
        customer_id=customer_id,
        price_id=price_id,
        user_id=user.uid,
        plan_type=plan_type or DEFAULT_PLAN_TYPE,
        trial_period_days=settings.trial_period_days,
        success_url=settings.checkout_success_url,
        cancel_url=settings.checkout_cancel_url,
    )
    return CheckoutResult(session_id=session.id, url=session.url)


async def open_portal(store: UserStore, client: StripeClient, user: VerifiedUser) -> str:
    """Return a single-use Customer Portal URL. Never creates a customer."""
    billing = await store.get_billing(user.uid)
    if not billing.stripe_customer_id:
        raise NoBillingAccountError()

    session = await create_portal_session(
        client,
        customer_id=billing.stripe_customer_id,
        return_url=settings.portal_return_url,
    )
    return session.url


def resolve_cancel_at(subscription: stripe.Subscription, now: datetime | None = None) -> str:
    """Effective cancellation time: ``cancel_at``, else period end, else now."""
    cancel_at = getattr(subscription, "cancel_at", None)
    if cancel_at:
        return ts_to_iso(cancel_at)
    _, period_end = get_period(subscription)
    if period_end:
        return ts_to_iso(period_end)
    return (now or datetime.now(timezone.utc)).isoformat()


async def cancel_subscription(
    store: UserStore,
    client: StripeClient,
    user: VerifiedUser,
    reason: str | None = None,
    feedback: str | None = None,
) -> str:
    """Cancel at period end and return the effective cancellation timestamp."""
    billing = await store.get_billing(user.uid)
    if not billing.stripe_subscription_id:
        raise NoSubscriptionError()

    subscription = await set_cancel_at_period_end(client, billing.stripe_subscription_id, True)

    now = utc_now_iso()
    await store.merge_billing(
        user.uid,
        {
            "cancelAtPeriodEnd": True,
            "subscriptionStatus": SubscriptionStatus.CANCELED.value,
            "cancellationReason": reason or None,
            "cancellationFeedback": feedback or None,
            "cancellationInitiatedAt": now,
            "updatedAt": now,
        },
    )
    logger.info("Subscription %s for user %s set to cancel at period end", billing.stripe_subscription_id, user.uid)
    return resolve_cancel_at(subscription)


async def reactivate_subscription(
    store: UserStore,
    client: StripeClient,
    user: VerifiedUser,
) -> str:
    """Undo a scheduled cancellation and return Stripe's new status."""
    billing = await store.get_billing(user.uid)
    if not billing.stripe_subscription_id:
        raise NoSubscriptionError("No subscription found to reactivate")

    current = await get_subscription(client, billing.stripe_subscription_id)
    if not getattr(current, "cancel_at_period_end", False):
        raise NotScheduledForCancellationError()

    updated = await set_cancel_at_period_end(client, billing.stripe_subscription_id, False)
    status = getattr(updated, "status", None)
    local_status = SubscriptionStatus.TRIAL if status == "trialing" else SubscriptionStatus.ACTIVE

    await store.merge_billing(
        user.uid,
        {
            "cancelAtPeriodEnd": False,
            "subscriptionStatus": local_status.value,
            "cancellationReason": None,
            "cancellationFeedback": None,
            "cancellationInitiatedAt": None,
            "updatedAt": utc_now_iso(),
        },
    )
    logger.info("Subscription %s for user %s reactivated (%s)", billing.stripe_subscription_id, user.uid, status)
    return status
