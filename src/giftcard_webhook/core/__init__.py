"""Core module - Logging, signature verification, and event logging."""

from giftcard_webhook.core.logger import setup_logger
from giftcard_webhook.core.signature import validate_webhook_request, verify_stripe_signature

__all__ = ["setup_logger", "validate_webhook_request", "verify_stripe_signature"]
