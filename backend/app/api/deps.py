"""Shared API dependencies — single import point for all routers.

Re-exports client providers and authentication dependencies so that router
modules can import everything they need from one place::

    from app.api.deps import get_current_user, get_stripe, get_user_store
"""

from app.auth.dependencies import (
    get_bearer_token,
    get_current_user,
    require_admin,
)
from app.clients import (
    get_content_store,
    get_http_client,
    get_identity_verifier,
    get_personalization_model,
    get_stripe,
    get_user_store,
)

__all__ = [
    "get_bearer_token",
    "get_current_user",
    "require_admin",
    "get_content_store",
    "get_http_client",
    "get_identity_verifier",
    "get_personalization_model",
    "get_stripe",
    "get_user_store",
]
