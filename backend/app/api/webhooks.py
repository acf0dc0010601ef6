"""Stripe webhook endpoint — receives and processes Stripe events."""

import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request, status
from stripe import StripeClient

from app.api.deps import get_stripe, get_user_store
from app.billing.stripe_client import construct_webhook_event
from app.billing.webhooks import EVENT_HANDLERS
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stripe", tags=["webhooks"])


@router.post("/webhooks")
async def stripe_webhook(
    request: Request,
    store: UserStore = Depends(get_user_store),
    client: StripeClient = Depends(get_stripe),
) -> dict[str, bool]:
    """Receive and process Stripe webhook events."""
    # 1. Read raw body (MUST be raw bytes for signature verification)
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    if not sig_header:
        logger.warning("Webhook received without signature")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No signature",
        )

    # 2. Verify signature
    try:
        event = construct_webhook_event(client, payload, sig_header)
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        ) from e

    # 3. Dispatch to handler
    handler = EVENT_HANDLERS.get(event.type)
    if handler is None:
        logger.debug("Unhandled webhook event type: %s", event.type)
        return {"received": True}

    logger.info("Processing webhook event: %s (id=%s)", event.type, event.id)

    try:
        await handler(store, client, event)
    except Exception as e:
        logger.exception("Error processing webhook event %s", event.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook handler failed",
        ) from e

    return {"received": True}
