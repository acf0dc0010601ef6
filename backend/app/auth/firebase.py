"""Firebase ID token verification."""

import logging
from dataclasses import dataclass, field
from typing import Any

import firebase_admin
from fastapi.concurrency import run_in_threadpool
from firebase_admin import auth

logger = logging.getLogger(__name__)


class InvalidCredentialError(Exception):
    """The bearer credential was rejected by the identity provider."""


@dataclass(frozen=True)
class VerifiedUser:
    """Subject extracted from a verified Firebase ID token."""

    uid: str
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.claims.get("admin") is True


class FirebaseIdentityVerifier:
    """Verifies Firebase ID tokens against a Firebase Admin app."""

    def __init__(self, app: firebase_admin.App, check_revoked: bool = False):
        self._app = app
        self._check_revoked = check_revoked

    async def verify(self, token: str) -> VerifiedUser:
        """Verify ``token`` and return the subject.

        Raises:
            InvalidCredentialError: Token malformed, expired, revoked or the
                user is disabled.
            firebase_admin.auth.CertificateFetchError: Google signing certs
                could not be fetched (transient provider trouble).
        """
        try:
            # verify_id_token does blocking I/O when refreshing Google certs
            decoded = await run_in_threadpool(
                auth.verify_id_token,
                token,
                app=self._app,
                check_revoked=self._check_revoked,
            )
        except auth.CertificateFetchError:
            raise
        except (auth.InvalidIdTokenError, auth.UserDisabledError, ValueError) as e:
            raise InvalidCredentialError(str(e)) from e

        return VerifiedUser(
            uid=decoded["uid"],
            email=decoded.get("email"),
            claims=decoded,
        )
