"""Derived gift card records and webhook outcomes."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from giftcard_webhook.models.checkout import LineItem, Product


class GiftClassification(BaseModel):
    """Result of the gift card classifier."""

    is_gift_card: bool
    stage: Optional[str] = Field(None, description="Name of the stage that matched")
    line_item: Optional[LineItem] = None
    product: Optional[Product] = None

    class Config:
        frozen = True

    @classmethod
    def negative(cls) -> "GiftClassification":
        return cls(is_gift_card=False)


class GiftRecord(BaseModel):
    """Normalized gift card data forwarded to the contact directory."""

    buyer_email: Optional[str] = None
    recipient_name: str = ""
    recipient_email: Optional[str] = None
    sender_name: str = ""
    message: str = ""
    formatted_amount: str = ""

    class Config:
        frozen = True


class WebhookOutcome(str, Enum):
    """Distinguishable result of a verified webhook event."""

    UNHANDLED = "unhandled"
    IGNORED = "ignored"
    GIFT_CARD = "gift_card"
    PARTIAL = "partial"
    SOFT_ERROR = "soft_error"


class ContactSyncStatus(BaseModel):
    """Result of syncing one contact (buyer or recipient)."""

    email: Optional[str] = None
    success: bool = False
    skipped: bool = False
    error: Optional[str] = None


class WebhookResult(BaseModel):
    """Outcome of handling one event, rendered as the webhook response body."""

    outcome: WebhookOutcome
    event_type: Optional[str] = None
    stage: Optional[str] = None
    record: Optional[GiftRecord] = None
    sync: Dict[str, ContactSyncStatus] = Field(default_factory=dict)
    error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """JSON body returned to Stripe (always with received=True)."""
        body: Dict[str, Any] = {"received": True, "outcome": self.outcome.value}

        if self.outcome == WebhookOutcome.UNHANDLED:
            body["unhandled"] = self.event_type
        elif self.outcome == WebhookOutcome.IGNORED:
            body["ignored"] = True
        elif self.outcome == WebhookOutcome.SOFT_ERROR:
            body["soft_error"] = True
        else:
            body["giftcard"] = True
            body["stage"] = self.stage
            body["buyer_email"] = self.record.buyer_email if self.record else None
            body["recipient_email"] = self.record.recipient_email if self.record else None
            body["sync"] = {name: status.model_dump() for name, status in self.sync.items()}

        return body
