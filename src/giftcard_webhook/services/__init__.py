"""Services module - gift card classification, extraction and contact sync."""

from giftcard_webhook.services.classifier import GiftClassifier
from giftcard_webhook.services.contact_sync import ContactSync
from giftcard_webhook.services.custom_fields import lookup_custom_field, normalize
from giftcard_webhook.services.extractor import build_merge_fields, extract, format_amount

__all__ = [
    "ContactSync",
    "GiftClassifier",
    "build_merge_fields",
    "extract",
    "format_amount",
    "lookup_custom_field",
    "normalize",
]
