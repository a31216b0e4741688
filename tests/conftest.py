import hashlib
import hmac
import json
import time
from typing import Any, Dict, Iterable, List, Optional

import pytest

from giftcard_webhook.integrations.directory import ContactDirectory, ContactDirectoryError
from giftcard_webhook.integrations.stripe_gateway import ProductLookupError
from giftcard_webhook.models.checkout import CheckoutSession, LineItem, Product

WEBHOOK_SECRET = "whsec_test_secret"


def sign_payload(body: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header for ``body``."""
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{body}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def custom_field(key: str, label: Optional[str], value: Optional[str]) -> Dict[str, Any]:
    return {
        "key": key,
        "label": {"type": "custom", "custom": label} if label is not None else None,
        "type": "text",
        "optional": True,
        "text": {"value": value},
    }


def make_session(**overrides) -> CheckoutSession:
    data = {
        "id": "cs_test_123",
        "object": "checkout.session",
        "amount_total": 2500,
        "currency": "eur",
        "customer_details": {"email": "buyer@example.com", "name": "Bea Buyer"},
        "customer_email": None,
        "metadata": {},
        "custom_fields": [],
    }
    data.update(overrides)
    return CheckoutSession.model_validate(data)


def line_item(
    description: str = "Camiseta",
    product: Any = None,
    price_metadata: Optional[Dict[str, Any]] = None,
    nickname: Optional[str] = None,
) -> LineItem:
    return LineItem.model_validate({
        "id": "li_1",
        "object": "item",
        "description": description,
        "quantity": 1,
        "price": {
            "id": "price_1",
            "nickname": nickname,
            "metadata": price_metadata or {},
            "product": product,
        },
    })


def checkout_event(session: Dict[str, Any], event_type: str = "checkout.session.completed") -> Dict[str, Any]:
    return {
        "id": "evt_test_1",
        "object": "event",
        "type": event_type,
        "data": {"object": session},
    }


class FakeGateway:
    """In-memory stand-in for StripeGateway."""

    def __init__(
        self,
        line_items: Optional[List[LineItem]] = None,
        products: Optional[Dict[str, Dict[str, Any]]] = None,
        customers: Optional[Dict[str, str]] = None,
        failing_products: Iterable[str] = (),
    ):
        self.line_items = line_items or []
        self.products = products or {}
        self.customers = customers or {}
        self.failing_products = set(failing_products)
        self.product_calls: List[str] = []
        self.customer_calls: List[str] = []

    async def list_line_items(self, session_id: str) -> List[LineItem]:
        return self.line_items

    async def retrieve_product(self, product_id: str) -> Product:
        self.product_calls.append(product_id)
        if product_id in self.failing_products:
            raise ProductLookupError(f"Failed to fetch product {product_id}")
        return Product.model_validate(self.products[product_id])

    async def retrieve_customer_name(self, customer_id: str) -> Optional[str]:
        self.customer_calls.append(customer_id)
        return self.customers.get(customer_id)


class InMemoryDirectory(ContactDirectory):
    """Contact directory keeping members and tags in dicts."""

    def __init__(self, failing_emails: Iterable[str] = ()):
        self.members: Dict[str, Dict[str, str]] = {}
        self.tags: Dict[str, List[str]] = {}
        self.failing_emails = set(failing_emails)

    async def upsert_contact(self, email, merge_fields):
        if not email:
            return False
        if email in self.failing_emails:
            raise ContactDirectoryError(f"Mailchimp PUT failed: HTTP 500 - {email}")
        self.members[email.lower()] = dict(merge_fields)
        return True

    async def tag_contact(self, email, tag_name):
        if not email:
            return False
        tags = self.tags.setdefault(email.lower(), [])
        if tag_name not in tags:
            tags.append(tag_name)
        return True


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory()


def dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(payload)
