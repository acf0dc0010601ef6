"""Shared test configuration and fixtures.

No provider is contacted: every client the routes depend on is swapped in
through ``app.dependency_overrides``:
- Firestore is an in-memory fake with ``set(merge=True)`` semantics, so the
  real ``UserStore`` / ``ContentStore`` run against it.
- Firebase token verification is a fake that knows a few fixed tokens.
- The Stripe client is a MagicMock whose ``v1`` async methods are AsyncMocks.
- Upstream HTTP services are served by an ``httpx.MockTransport``.
"""

import copy
import json
import uuid
from collections import defaultdict
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from langchain_core.messages import AIMessage

from app.auth.firebase import InvalidCredentialError, VerifiedUser
from app.clients import (
    get_content_store,
    get_http_client,
    get_identity_verifier,
    get_personalization_model,
    get_stripe,
    get_user_store,
)
from app.main import app
from app.services.content_store import ContentStore
from app.services.user_store import UserStore

USER_TOKEN = "valid-token"
ADMIN_TOKEN = "admin-token"
TEST_UID = "user_123"
ADMIN_UID = "admin_1"


# ---------------------------------------------------------------------------
# In-memory Firestore
# ---------------------------------------------------------------------------


def _deep_merge(target: dict, source: dict) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class FakeSnapshot:
    def __init__(self, doc_id: str, data: dict | None):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict | None:
        return copy.deepcopy(self._data)


class FakeDocumentRef:
    def __init__(self, collection: "FakeCollection", doc_id: str):
        self._collection = collection
        self.id = doc_id

    async def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._collection.docs.get(self.id))

    async def set(self, data: dict, merge: bool = False) -> None:
        self._collection.writes.append((self.id, copy.deepcopy(data), merge))
        if merge and self.id in self._collection.docs:
            _deep_merge(self._collection.docs[self.id], data)
        else:
            self._collection.docs[self.id] = copy.deepcopy(data)

    async def update(self, data: dict) -> None:
        self._collection.docs[self.id].update(copy.deepcopy(data))

    async def delete(self) -> None:
        self._collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection: "FakeCollection", field: str | None = None, descending: bool = False):
        self._collection = collection
        self._field = field
        self._descending = descending

    async def stream(self):
        items = list(self._collection.docs.items())
        if self._field:
            items.sort(key=lambda kv: kv[1].get(self._field), reverse=self._descending)
        for doc_id, data in items:
            yield FakeSnapshot(doc_id, copy.deepcopy(data))


class FakeCollection:
    def __init__(self):
        self.docs: dict[str, dict] = {}
        self.writes: list[tuple[str, dict, bool]] = []

    def document(self, doc_id: str) -> FakeDocumentRef:
        return FakeDocumentRef(self, doc_id)

    def order_by(self, field: str, direction: str | None = None) -> FakeQuery:
        return FakeQuery(self, field, descending=direction == "DESCENDING")

    def stream(self):
        return FakeQuery(self).stream()

    async def add(self, data: dict):
        doc_id = uuid.uuid4().hex[:20]
        self.docs[doc_id] = copy.deepcopy(data)
        return None, FakeDocumentRef(self, doc_id)


class FakeFirestore:
    def __init__(self):
        self.collections: defaultdict[str, FakeCollection] = defaultdict(FakeCollection)

    def collection(self, name: str) -> FakeCollection:
        return self.collections[name]


# ---------------------------------------------------------------------------
# Fake identity provider
# ---------------------------------------------------------------------------


class FakeVerifier:
    """Accepts ``USER_TOKEN`` and ``ADMIN_TOKEN``; rejects anything else."""

    def __init__(self):
        self.users = {
            USER_TOKEN: VerifiedUser(uid=TEST_UID, email="athlete@test.com"),
            ADMIN_TOKEN: VerifiedUser(uid=ADMIN_UID, email="coach@test.com", claims={"admin": True}),
        }
        self.calls: list[str] = []
        self.error: Exception | None = None

    async def verify(self, token: str) -> VerifiedUser:
        self.calls.append(token)
        if self.error is not None:
            raise self.error
        if token not in self.users:
            raise InvalidCredentialError("Token rejected")
        return self.users[token]


# ---------------------------------------------------------------------------
# Fake upstream HTTP services
# ---------------------------------------------------------------------------


class Upstream:
    """Handler for ``httpx.MockTransport`` that records requests.

    Tests set ``status``/``payload`` (or ``error``) before calling the route.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status = 200
        self.payload: Any = {}
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, str):
            return httpx.Response(self.status, text=self.payload)
        return httpx.Response(self.status, json=self.payload)

    @property
    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def firestore_db() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def user_store(firestore_db: FakeFirestore) -> UserStore:
    return UserStore(firestore_db, collection="swift_users")


@pytest.fixture
def content_store(firestore_db: FakeFirestore) -> ContentStore:
    return ContentStore(firestore_db)


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def stripe_mock() -> MagicMock:
    """StripeClient stand-in with the async v1 methods the app calls."""
    client = MagicMock()
    client.v1.customers.create_async = AsyncMock(return_value=MagicMock(id="cus_new_123"))
    client.v1.checkout.sessions.create_async = AsyncMock(
        return_value=MagicMock(id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123")
    )
    client.v1.billing_portal.sessions.create_async = AsyncMock(
        return_value=MagicMock(url="https://billing.stripe.com/p/session/test_123")
    )
    client.v1.subscriptions.retrieve_async = AsyncMock()
    client.v1.subscriptions.update_async = AsyncMock()
    return client


@pytest.fixture
def stripe_call_count(stripe_mock: MagicMock):
    """Return a callable giving the number of awaited Stripe API calls."""
    v1 = stripe_mock.v1
    methods = (
        v1.customers.create_async,
        v1.checkout.sessions.create_async,
        v1.billing_portal.sessions.create_async,
        v1.subscriptions.retrieve_async,
        v1.subscriptions.update_async,
    )
    return lambda: sum(method.await_count for method in methods)


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def llm() -> MagicMock:
    """Chat model stand-in; tests set ``llm.ainvoke.return_value``."""
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="{}"))
    return model


@pytest_asyncio.fixture
async def client(
    user_store: UserStore,
    content_store: ContentStore,
    verifier: FakeVerifier,
    stripe_mock: MagicMock,
    upstream: Upstream,
    llm: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the fake provider clients."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(upstream))

    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_content_store] = lambda: content_store
    app.dependency_overrides[get_stripe] = lambda: stripe_mock
    app.dependency_overrides[get_http_client] = lambda: http
    app.dependency_overrides[get_personalization_model] = lambda: llm

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
    await http.aclose()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {USER_TOKEN}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
