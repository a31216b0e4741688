import json

import pytest
from httpx import ASGITransport, AsyncClient

from giftcard_webhook.config.settings import Settings
from giftcard_webhook.server import routes
from giftcard_webhook.server.app import create_app

from tests.conftest import (
    WEBHOOK_SECRET,
    FakeGateway,
    InMemoryDirectory,
    checkout_event,
    custom_field,
    line_item,
    sign_payload,
)

GIFT_SESSION = {
    "id": "cs_test_1",
    "amount_total": 2500,
    "currency": "eur",
    "customer_details": {"email": "buyer@example.com", "name": "Bea"},
    "metadata": {},
    "custom_fields": [custom_field("email", "Email del cumpleañero", "ana@example.com")],
}


def make_settings(**overrides) -> Settings:
    values = {"stripe_secret_key": "sk_test_123", "stripe_webhook_secret": WEBHOOK_SECRET}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def directory():
    return InMemoryDirectory()


@pytest.fixture
def gateway():
    return FakeGateway([line_item(product={"id": "prod_1", "name": "Camiseta"})])


@pytest.fixture
def app(gateway, directory):
    app = create_app()
    app.dependency_overrides[routes.get_settings] = lambda: make_settings()
    app.dependency_overrides[routes.get_stripe_gateway] = lambda: gateway
    app.dependency_overrides[routes.get_contact_directory] = lambda: directory
    yield app
    app.dependency_overrides.clear()


async def post_event(app, body: str, signature=None):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["Stripe-Signature"] = signature
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        return await ac.post("/webhook/stripe", content=body.encode("utf-8"), headers=headers)


@pytest.mark.asyncio
async def test_root_lists_endpoints(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["webhook"] == "POST /webhook/stripe"


@pytest.mark.asyncio
async def test_health_reports_configuration_without_secrets(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/health")

    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"]["mailchimp"] == "disabled"
    assert WEBHOOK_SECRET not in response.text


@pytest.mark.asyncio
async def test_valid_gift_card_event(app, directory):
    body = json.dumps(checkout_event(GIFT_SESSION))

    response = await post_event(app, body, sign_payload(body))

    assert response.status_code == 200
    data = response.json()
    assert data["received"] is True
    assert data["outcome"] == "gift_card"
    assert data["giftcard"] is True
    assert data["buyer_email"] == "buyer@example.com"
    assert data["recipient_email"] == "ana@example.com"
    assert directory.members["ana@example.com"]["AMOUNT"] == "25.00 EUR"


@pytest.mark.asyncio
async def test_unhandled_event_type_is_acknowledged(app):
    body = json.dumps(checkout_event({"id": "in_1"}, event_type="invoice.paid"))

    response = await post_event(app, body, sign_payload(body))

    assert response.status_code == 200
    assert response.json() == {"received": True, "outcome": "unhandled", "unhandled": "invoice.paid"}


@pytest.mark.asyncio
async def test_invalid_signature_is_rejected_without_details(app, directory):
    body = json.dumps(checkout_event(GIFT_SESSION))

    response = await post_event(app, body, sign_payload(body, secret="whsec_wrong"))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid webhook signature"}
    assert directory.members == {}


@pytest.mark.asyncio
async def test_tampered_body_is_rejected(app):
    body = json.dumps(checkout_event(GIFT_SESSION))
    signature = sign_payload(body)

    response = await post_event(app, body.replace("2500", "1"), signature)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_missing_signature_is_rejected(app):
    response = await post_event(app, json.dumps(checkout_event(GIFT_SESSION)))

    assert response.status_code == 400
    assert response.json() == {"error": "Missing Stripe-Signature header"}


@pytest.mark.asyncio
async def test_empty_body_is_rejected(app):
    response = await post_event(app, "", sign_payload(""))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid payload"}


@pytest.mark.asyncio
async def test_missing_webhook_secret_is_server_error(app):
    app.dependency_overrides[routes.get_settings] = lambda: make_settings(stripe_webhook_secret=None)
    body = json.dumps(checkout_event(GIFT_SESSION))

    response = await post_event(app, body, sign_payload(body))

    assert response.status_code == 500
    assert response.json() == {"error": "Stripe not configured"}


@pytest.mark.asyncio
async def test_soft_error_still_returns_200(app, gateway):
    gateway.line_items = [line_item(product="prod_missing")]
    gateway.failing_products = {"prod_missing"}
    body = json.dumps(checkout_event(GIFT_SESSION))

    response = await post_event(app, body, sign_payload(body))

    assert response.status_code == 200
    assert response.json() == {"received": True, "outcome": "soft_error", "soft_error": True}


@pytest.mark.asyncio
async def test_get_on_webhook_route_is_not_allowed(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/webhook/stripe")

    assert response.status_code == 405


@pytest.mark.asyncio
async def test_checkout_without_session_object_is_acknowledged(app):
    body = json.dumps({"id": "evt_test_2", "type": "checkout.session.completed", "data": {"object": "cs_123"}})

    response = await post_event(app, body, sign_payload(body))

    assert response.status_code == 200
    assert response.json() == {"received": True, "outcome": "soft_error", "soft_error": True}
