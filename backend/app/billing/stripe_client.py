"""Async Stripe API wrapper.

Every call takes the ``StripeClient`` explicitly; the app builds one in its
lifespan and hands it to routes through ``app.api.deps.get_stripe``.
"""

import logging

import stripe
from stripe import StripeClient

from app.config import settings

logger = logging.getLogger(__name__)


def get_stripe_client() -> StripeClient:
    """Create a StripeClient instance with async HTTP support."""
    return StripeClient(
        settings.stripe_secret_key,
        http_client=stripe.HTTPXClient(),
    )


async def create_customer(client: StripeClient, email: str | None, user_id: str) -> stripe.Customer:
    """Create a Stripe customer tagged with the Firebase uid."""
    logger.info("Creating Stripe customer for user %s (%s)", user_id, email)
    params: dict = {"metadata": {"firebaseUserId": user_id}}
    if email:
        params["email"] = email
    customer = await client.v1.customers.create_async(params=params)
    logger.info("Created Stripe customer %s for user %s", customer.id, user_id)
    return customer


async def create_checkout_session(
    client: StripeClient,
    customer_id: str,
    price_id: str,
    user_id: str,
    plan_type: str,
    trial_period_days: int,
    success_url: str,
    cancel_url: str,
) -> stripe.checkout.Session:
    """Create a subscription-mode Checkout Session with a free trial."""
    logger.info(
        "Creating checkout session for customer %s, price %s (%s)",
        customer_id,
        price_id,
        plan_type,
    )
    metadata = {"firebaseUserId": user_id, "planType": plan_type}
    return await client.v1.checkout.sessions.create_async(
        params={
            "customer": customer_id,
            "payment_method_types": ["card"],
            "line_items": [{"price": price_id, "quantity": 1}],
            "mode": "subscription",
            "subscription_data": {
                "trial_period_days": trial_period_days,
                "metadata": metadata,
            },
            "success_url": success_url,
            "cancel_url": cancel_url,
            "allow_promotion_codes": True,
            "billing_address_collection": "auto",
            "metadata": metadata,
        }
    )


async def create_portal_session(
    client: StripeClient, customer_id: str, return_url: str
) -> stripe.billing_portal.Session:
    """Create a Stripe Customer Portal session for subscription management."""
    logger.info("Creating portal session for customer %s", customer_id)
    return await client.v1.billing_portal.sessions.create_async(
        params={
            "customer": customer_id,
            "return_url": return_url,
        }
    )


async def get_subscription(client: StripeClient, subscription_id: str) -> stripe.Subscription:
    """Retrieve a Stripe subscription by ID."""
    return await client.v1.subscriptions.retrieve_async(subscription_id)


async def set_cancel_at_period_end(
    client: StripeClient, subscription_id: str, cancel: bool
) -> stripe.Subscription:
    """Schedule (or unschedule) cancellation at the end of the current period."""
    logger.info("Setting cancel_at_period_end=%s on subscription %s", cancel, subscription_id)
    return await client.v1.subscriptions.update_async(
        subscription_id,
        params={"cancel_at_period_end": cancel},
    )


def construct_webhook_event(client: StripeClient, payload: bytes, sig_header: str) -> stripe.Event:
    """Verify and construct a Stripe webhook event (synchronous)."""
    return client.construct_event(payload, sig_header, settings.stripe_webhook_secret)
