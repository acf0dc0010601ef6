"""Billing error types and provider failure classification."""

import stripe
from firebase_admin import auth as firebase_auth
from google.auth import exceptions as google_auth_exceptions

# Structured provider errors meaning "our server credentials need re-auth".
PROVIDER_AUTH_ERRORS: tuple[type[BaseException], ...] = (
    google_auth_exceptions.RefreshError,
    firebase_auth.CertificateFetchError,
    stripe.AuthenticationError,
)

# Fallback for wrapped errors that only carry the OAuth error text.
PROVIDER_AUTH_MARKERS = ("invalid_grant", "reauth")


class BillingPreconditionError(Exception):
    """A linked billing object is missing or in the wrong state (HTTP 400)."""

    message = "Billing precondition failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class NoBillingAccountError(BillingPreconditionError):
    message = "No billing account found"


class NoSubscriptionError(BillingPreconditionError):
    message = "No active subscription found"


class NotScheduledForCancellationError(BillingPreconditionError):
    message = "Subscription is not scheduled for cancellation"


def is_provider_auth_error(exc: BaseException) -> bool:
    """True if ``exc`` is a provider re-authentication failure.

    Matches the SDKs' structured error types first, then falls back to
    substring matching on the message (``invalid_grant`` / ``reauth``).
    """
    if isinstance(exc, PROVIDER_AUTH_ERRORS):
        return True
    message = str(exc)
    return any(marker in message for marker in PROVIDER_AUTH_MARKERS)
