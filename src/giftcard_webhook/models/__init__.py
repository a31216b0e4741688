"""Pydantic models for Stripe payloads and derived gift card records."""

from giftcard_webhook.models.checkout import (
    CheckoutSession,
    CustomerDetails,
    CustomField,
    LineItem,
    Price,
    Product,
)
from giftcard_webhook.models.gift import (
    ContactSyncStatus,
    GiftClassification,
    GiftRecord,
    WebhookOutcome,
    WebhookResult,
)

__all__ = [
    "CheckoutSession",
    "ContactSyncStatus",
    "CustomerDetails",
    "CustomField",
    "GiftClassification",
    "GiftRecord",
    "LineItem",
    "Price",
    "Product",
    "WebhookOutcome",
    "WebhookResult",
]
