"""Stripe webhook event handlers — mirror subscription state into Firestore.

Writes both the web app's ``billing`` map and the cross-platform
``subscription`` map that the iOS app reads.
"""

import logging
from datetime import datetime, timezone

import stripe
from stripe import StripeClient

from app.billing.objects import get_id, get_metadata, get_period, get_price_id, ts_to_iso
from app.billing.plans import DEFAULT_PLAN_TYPE, get_plan_type_by_price_id
from app.billing.stripe_client import get_subscription
from app.models.billing import SubscriptionStatus, utc_now_iso
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

# Older checkouts were tagged by the previous auth backend.
USER_ID_METADATA_KEYS = ("firebaseUserId", "supabase_user_id")

_STATUS_MAP: dict[str, SubscriptionStatus] = {
    "active": SubscriptionStatus.ACTIVE,
    "trialing": SubscriptionStatus.TRIAL,
    "canceled": SubscriptionStatus.CANCELED,
    "past_due": SubscriptionStatus.PAST_DUE,
    "unpaid": SubscriptionStatus.PAST_DUE,
    "incomplete": SubscriptionStatus.EXPIRED,
    "incomplete_expired": SubscriptionStatus.EXPIRED,
}


def map_stripe_status(
    stripe_status: str | None,
    trial_end: int | None,
    now: datetime | None = None,
) -> SubscriptionStatus:
    """Map a Stripe subscription status to the local label.

    A subscription still inside its trial window is ``trial`` regardless
    of the provider status.
    """
    now = now or datetime.now(timezone.utc)
    if trial_end and now.timestamp() < trial_end:
        return SubscriptionStatus.TRIAL
    return _STATUS_MAP.get(stripe_status or "", SubscriptionStatus.NONE)


def _get_user_id(obj) -> str | None:
    metadata = get_metadata(obj)
    for key in USER_ID_METADATA_KEYS:
        if metadata.get(key):
            return metadata[key]
    return None


def _get_invoice_subscription_id(invoice) -> str | None:
    """Subscription id of an invoice (moved under ``parent`` in newer API versions)."""
    subscription_id = get_id(getattr(invoice, "subscription", None))
    if subscription_id:
        return subscription_id
    parent = getattr(invoice, "parent", None)
    details = getattr(parent, "subscription_details", None) if parent else None
    return get_id(getattr(details, "subscription", None)) if details else None


async def handle_checkout_session_completed(
    store: UserStore, client: StripeClient, event: stripe.Event
) -> None:
    """Handle checkout.session.completed — link the Stripe customer.

    The subscription itself is recorded by customer.subscription.created.
    """
    session = event.data.object
    user_id = _get_user_id(session)
    if not user_id:
        logger.warning("No user id in checkout session %s metadata", session.id)
        return

    logger.info("Checkout completed for user %s", user_id)
    await store.merge_billing(
        user_id,
        {
            "stripeCustomerId": get_id(session.customer),
            "updatedAt": utc_now_iso(),
        },
    )


async def handle_subscription_updated(
    store: UserStore, client: StripeClient, event: stripe.Event
) -> None:
    """Handle customer.subscription.created/updated — sync status, plan and period."""
    stripe_sub = event.data.object
    user_id = _get_user_id(stripe_sub)
    if not user_id:
        logger.warning("No user id in subscription %s metadata", stripe_sub.id)
        return

    trial_start = getattr(stripe_sub, "trial_start", None)
    trial_end = getattr(stripe_sub, "trial_end", None)
    status = map_stripe_status(stripe_sub.status, trial_end)
    price_id = get_price_id(stripe_sub)
    plan_type = (
        get_metadata(stripe_sub).get("planType")
        or (get_plan_type_by_price_id(price_id) if price_id else None)
        or DEFAULT_PLAN_TYPE
    )
    customer_id = get_id(stripe_sub.customer)
    now = utc_now_iso()

    billing = {
        "stripeCustomerId": customer_id,
        "stripeSubscriptionId": stripe_sub.id,
        "stripePriceId": price_id,
        "subscriptionStatus": status.value,
        "planType": plan_type,
        "cancelAtPeriodEnd": bool(getattr(stripe_sub, "cancel_at_period_end", False)),
        "updatedAt": now,
    }
    subscription = {
        "status": status.value,
        "plan": plan_type,
        "platform": "stripe",
        "stripeCustomerId": customer_id,
        "stripeSubscriptionId": stripe_sub.id,
        "lastVerifiedAt": now,
    }

    period_start, period_end = get_period(stripe_sub)
    optional_dates = {
        "currentPeriodStart": period_start,
        "currentPeriodEnd": period_end,
        "trialStartDate": trial_start,
        "trialEndDate": trial_end,
    }
    for key, ts in optional_dates.items():
        if ts:
            billing[key] = ts_to_iso(ts)
            subscription[key] = datetime.fromtimestamp(ts, tz=timezone.utc)

    await store.merge_billing(user_id, billing, subscription=subscription)
    logger.info(
        "Subscription %s for user %s → %s (stripe status %s)",
        stripe_sub.id,
        user_id,
        status.value,
        stripe_sub.status,
    )


async def handle_subscription_deleted(
    store: UserStore, client: StripeClient, event: stripe.Event
) -> None:
    """Handle customer.subscription.deleted — mark expired and unlink."""
    stripe_sub = event.data.object
    user_id = _get_user_id(stripe_sub)
    if not user_id:
        logger.warning("No user id in subscription %s metadata (delete event)", stripe_sub.id)
        return

    now = utc_now_iso()
    await store.merge_billing(
        user_id,
        {
            "subscriptionStatus": SubscriptionStatus.EXPIRED.value,
            "stripeSubscriptionId": None,
            "cancelAtPeriodEnd": False,
            "updatedAt": now,
        },
        subscription={"status": SubscriptionStatus.EXPIRED.value, "lastVerifiedAt": now},
    )
    logger.info("Subscription deleted: %s expired for user %s", stripe_sub.id, user_id)


async def _user_id_for_invoice(client: StripeClient, invoice) -> str | None:
    subscription_id = _get_invoice_subscription_id(invoice)
    if not subscription_id:
        logger.info("Invoice %s has no subscription (one-time), skipping", invoice.id)
        return None

    stripe_sub = await get_subscription(client, subscription_id)
    user_id = _get_user_id(stripe_sub)
    if not user_id:
        logger.warning("No user id in subscription %s metadata (invoice %s)", subscription_id, invoice.id)
    return user_id


async def handle_invoice_payment_succeeded(
    store: UserStore, client: StripeClient, event: stripe.Event
) -> None:
    """Handle invoice.payment_succeeded — confirm active status."""
    invoice = event.data.object
    user_id = await _user_id_for_invoice(client, invoice)
    if not user_id:
        return

    now = utc_now_iso()
    await store.merge_billing(
        user_id,
        {
            "subscriptionStatus": SubscriptionStatus.ACTIVE.value,
            "lastPaymentDate": now,
            "updatedAt": now,
        },
        subscription={"status": SubscriptionStatus.ACTIVE.value, "lastVerifiedAt": now},
    )
    logger.info("Payment succeeded for user %s", user_id)


async def handle_invoice_payment_failed(
    store: UserStore, client: StripeClient, event: stripe.Event
) -> None:
    """Handle invoice.payment_failed — mark subscription as past_due."""
    invoice = event.data.object
    user_id = await _user_id_for_invoice(client, invoice)
    if not user_id:
        return

    now = utc_now_iso()
    await store.merge_billing(
        user_id,
        {"subscriptionStatus": SubscriptionStatus.PAST_DUE.value, "updatedAt": now},
        subscription={"status": SubscriptionStatus.PAST_DUE.value, "lastVerifiedAt": now},
    )
    logger.info("Payment failed for user %s, marked past_due", user_id)


# Map event types to handler functions
EVENT_HANDLERS = {
    "checkout.session.completed": handle_checkout_session_completed,
    "customer.subscription.created": handle_subscription_updated,
    "customer.subscription.updated": handle_subscription_updated,
    "customer.subscription.deleted": handle_subscription_deleted,
    "invoice.payment_succeeded": handle_invoice_payment_succeeded,
    "invoice.payment_failed": handle_invoice_payment_failed,
}
