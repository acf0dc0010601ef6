"""Billing API endpoints — Stripe Checkout, Customer Portal, cancel and reactivate."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError
from stripe import StripeClient

from app.api.deps import get_current_user, get_stripe, get_user_store
from app.auth.dependencies import SERVICE_AUTH_ERROR
from app.auth.firebase import VerifiedUser
from app.billing.errors import BillingPreconditionError, is_provider_auth_error
from app.billing.plans import PLANS
from app.config import settings
from app.schemas.billing import (
    CancelRequest,
    CancelResponse,
    CheckoutRequest,
    CheckoutResponse,
    PlanResponse,
    PlansListResponse,
    PortalResponse,
    ReactivateResponse,
    SubscriptionResponse,
)
from app.services.subscription_service import (
    cancel_subscription,
    create_checkout,
    open_portal,
    reactivate_subscription,
)
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stripe", tags=["billing"])


def _failure(exc: Exception, action: str, detail: str) -> HTTPException:
    """Translate an unexpected provider/store exception into a 503 or 500.

    Must be called from inside the ``except`` block so the traceback is logged.
    """
    if is_provider_auth_error(exc):
        logger.error("[%s] provider authentication error: %s", action, exc)
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_AUTH_ERROR,
        )
    logger.exception("[%s] error", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )


def _precondition_failed(exc: BillingPreconditionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/plans", response_model=PlansListResponse)
async def list_plans() -> PlansListResponse:
    """List available plans (public — no auth required)."""
    return PlansListResponse(
        plans=[
            PlanResponse(
                plan_type=p.plan_type,
                label=p.label,
                interval=p.interval,
                amount=p.amount,
                price_id=p.stripe_price_id,
                monthly_equivalent=p.monthly_equivalent,
                savings=p.savings,
            )
            for p in PLANS.values()
        ],
        trial_days=settings.trial_period_days,
        free_sessions_limit=settings.free_sessions_limit,
    )


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(
    current_user: VerifiedUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
) -> SubscriptionResponse:
    """Get the caller's mirrored subscription state and access flags."""
    try:
        billing = await store.get_billing(current_user.uid)
    except Exception as e:
        raise _failure(e, "Subscription", "Failed to load subscription") from e

    return SubscriptionResponse(
        subscription_status=billing.subscription_status.value,
        plan_type=billing.plan_type,
        stripe_customer_id=billing.stripe_customer_id,
        stripe_subscription_id=billing.stripe_subscription_id,
        current_period_end=billing.current_period_end,
        trial_end_date=billing.trial_end_date,
        cancel_at_period_end=billing.cancel_at_period_end,
        has_access=billing.has_access,
        is_trialing=billing.is_trialing,
        trial_days_left=billing.trial_days_left(),
        is_canceled=billing.cancel_at_period_end,
    )


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    body: CheckoutRequest | None = None,
    current_user: VerifiedUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
    client: StripeClient = Depends(get_stripe),
) -> CheckoutResponse:
    """Create a Stripe Checkout session (with trial) for the chosen price."""
    if body is None or not body.price_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Price ID is required",
        )

    try:
        result = await create_checkout(
            store, client, current_user, price_id=body.price_id, plan_type=body.plan_type
        )
    except Exception as e:
        raise _failure(e, "Stripe Checkout", "Failed to create checkout session") from e

    return CheckoutResponse(session_id=result.session_id, url=result.url)


@router.post("/portal", response_model=PortalResponse)
async def portal(
    current_user: VerifiedUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
    client: StripeClient = Depends(get_stripe),
) -> PortalResponse:
    """Create a Stripe Customer Portal session for subscription management."""
    try:
        url = await open_portal(store, client, current_user)
    except BillingPreconditionError as e:
        raise _precondition_failed(e) from e
    except Exception as e:
        raise _failure(e, "Stripe Portal", "Failed to create portal session") from e

    return PortalResponse(url=url)


@router.post("/cancel", response_model=CancelResponse)
async def cancel(
    request: Request,
    current_user: VerifiedUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
    client: StripeClient = Depends(get_stripe),
) -> CancelResponse:
    """Cancel the subscription at the end of the current billing period."""
    # The exit survey is optional; an empty or unparsable body means no survey.
    try:
        data = await request.json()
    except ValueError:
        data = {}
    try:
        body = CancelRequest.model_validate(data if isinstance(data, dict) else {})
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request body",
        ) from e

    try:
        cancel_at = await cancel_subscription(
            store, client, current_user, reason=body.reason, feedback=body.feedback
        )
    except BillingPreconditionError as e:
        raise _precondition_failed(e) from e
    except Exception as e:
        raise _failure(e, "Stripe Cancel", "Failed to cancel subscription") from e

    return CancelResponse(success=True, cancel_at=cancel_at)


@router.post("/reactivate", response_model=ReactivateResponse)
async def reactivate(
    current_user: VerifiedUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
    client: StripeClient = Depends(get_stripe),
) -> ReactivateResponse:
    """Undo a scheduled cancellation."""
    try:
        new_status = await reactivate_subscription(store, client, current_user)
    except BillingPreconditionError as e:
        raise _precondition_failed(e) from e
    except Exception as e:
        raise _failure(e, "Stripe Reactivate", "Failed to reactivate subscription") from e

    return ReactivateResponse(success=True, status=new_status)
