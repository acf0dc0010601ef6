"""FastAPI authentication dependencies for route protection."""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.firebase import FirebaseIdentityVerifier, InvalidCredentialError, VerifiedUser
from app.billing.errors import is_provider_auth_error
from app.clients import get_identity_verifier

logger = logging.getLogger(__name__)

# Lenient bearer: returns None so we can answer with our own 401 body
_bearer_scheme = HTTPBearer(auto_error=False)

SERVICE_AUTH_ERROR = "Server authentication error. Please try again later."


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """Return the raw token from ``Authorization: Bearer <token>``.

    Format check only; the token is not verified here. Used by the proxy
    routes, which leave verification to the downstream service.

    Raises:
        HTTPException 401: Header missing, empty, or not a Bearer credential.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    verifier: FirebaseIdentityVerifier = Depends(get_identity_verifier),
) -> VerifiedUser:
    """Verify the bearer token with Firebase and return the caller.

    Raises:
        HTTPException 401: If the token is rejected by Firebase.
        HTTPException 503: If Firebase itself could not be reached/authenticated.
    """
    try:
        return await verifier.verify(token)
    except InvalidCredentialError as e:
        logger.warning("Rejected Firebase ID token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except Exception as e:
        if not is_provider_auth_error(e):
            raise
        logger.error("Identity provider authentication error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_AUTH_ERROR,
        ) from e


async def require_admin(user: VerifiedUser = Depends(get_current_user)) -> VerifiedUser:
    """Allow only callers whose token carries the ``admin`` custom claim.

    Raises:
        HTTPException 403: If the claim is absent or false.
    """
    if not user.is_admin:
        logger.warning("Non-admin user %s denied admin access", user.uid)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
