"""Provider clients shared by all requests.

Built once in the app lifespan, stored on ``app.state.clients`` and handed to
routes through the ``get_*`` dependencies below, so tests can swap any of them
with ``app.dependency_overrides``.
"""

import logging
from dataclasses import dataclass

import httpx
from fastapi import Request
from langchain_core.language_models import BaseChatModel
from stripe import StripeClient

from app.auth.firebase import FirebaseIdentityVerifier
from app.billing.stripe_client import get_stripe_client
from app.config import settings
from app.database import create_firestore_client, get_firebase_app
from app.services.content_store import ContentStore
from app.services.personalization import create_personalization_model
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class Clients:
    identity: FirebaseIdentityVerifier
    users: UserStore
    content: ContentStore
    stripe: StripeClient
    http: httpx.AsyncClient
    llm: BaseChatModel


def create_clients() -> Clients:
    firebase_app = get_firebase_app()
    firestore_client = create_firestore_client()
    return Clients(
        identity=FirebaseIdentityVerifier(firebase_app),
        users=UserStore(firestore_client),
        content=ContentStore(firestore_client),
        stripe=get_stripe_client(),
        http=httpx.AsyncClient(timeout=settings.proxy_timeout_seconds),
        llm=create_personalization_model(),
    )


async def close_clients(clients: Clients) -> None:
    await clients.http.aclose()
    logger.info("Provider clients closed")


def _clients(request: Request) -> Clients:
    return request.app.state.clients


def get_identity_verifier(request: Request) -> FirebaseIdentityVerifier:
    return _clients(request).identity


def get_user_store(request: Request) -> UserStore:
    return _clients(request).users


def get_content_store(request: Request) -> ContentStore:
    return _clients(request).content


def get_stripe(request: Request) -> StripeClient:
    return _clients(request).stripe


def get_http_client(request: Request) -> httpx.AsyncClient:
    return _clients(request).http


def get_personalization_model(request: Request) -> BaseChatModel:
    return _clients(request).llm
