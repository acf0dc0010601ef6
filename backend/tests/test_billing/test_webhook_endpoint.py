"""Tests for POST /api/stripe/webhooks (signature check and dispatch)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import stripe
from httpx import AsyncClient

WEBHOOK_URL = "/api/stripe/webhooks"
SIG_HEADERS = {"stripe-signature": "t=1,v1=abc"}


def _event(event_type: str, data_object) -> SimpleNamespace:
    return SimpleNamespace(type=event_type, id="evt_test_1", data=SimpleNamespace(object=data_object))


class TestWebhookEndpoint:
    @pytest.mark.asyncio
    async def test_missing_signature_returns_400(self, client: AsyncClient):
        response = await client.post(WEBHOOK_URL, content=b"{}")
        assert response.status_code == 400
        assert response.json() == {"error": "No signature"}

    @pytest.mark.asyncio
    async def test_invalid_signature_returns_400(self, client: AsyncClient):
        with patch(
            "app.api.webhooks.construct_webhook_event",
            side_effect=stripe.SignatureVerificationError("No signatures found", "t=1,v1=abc"),
        ):
            response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIG_HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid signature"}

    @pytest.mark.asyncio
    async def test_raw_body_passed_to_verification(self, client: AsyncClient, stripe_mock):
        payload = b'{"id": "evt_test_1", "type": "ping"}'
        with patch(
            "app.api.webhooks.construct_webhook_event",
            return_value=_event("ping", SimpleNamespace()),
        ) as mock_construct:
            response = await client.post(WEBHOOK_URL, content=payload, headers=SIG_HEADERS)

        assert response.status_code == 200
        mock_construct.assert_called_once_with(stripe_mock, payload, "t=1,v1=abc")

    @pytest.mark.asyncio
    async def test_unhandled_event_acknowledged(self, client: AsyncClient):
        with patch(
            "app.api.webhooks.construct_webhook_event",
            return_value=_event("customer.created", SimpleNamespace(id="cus_1")),
        ):
            response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIG_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"received": True}

    @pytest.mark.asyncio
    async def test_checkout_completed_updates_user(self, client: AsyncClient, user_store):
        session = SimpleNamespace(id="cs_1", customer="cus_hook", metadata={"firebaseUserId": "user_123"})
        with patch(
            "app.api.webhooks.construct_webhook_event",
            return_value=_event("checkout.session.completed", session),
        ):
            response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIG_HEADERS)

        assert response.status_code == 200
        assert (await user_store.get_billing("user_123")).stripe_customer_id == "cus_hook"

    @pytest.mark.asyncio
    async def test_handler_failure_returns_500(self, client: AsyncClient):
        failing = AsyncMock(side_effect=RuntimeError("firestore down"))
        with (
            patch(
                "app.api.webhooks.construct_webhook_event",
                return_value=_event("invoice.payment_failed", SimpleNamespace(id="in_1")),
            ),
            patch.dict("app.api.webhooks.EVENT_HANDLERS", {"invoice.payment_failed": failing}),
        ):
            response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIG_HEADERS)

        assert response.status_code == 500
        assert response.json() == {"error": "Webhook handler failed"}
        failing.assert_awaited_once()
