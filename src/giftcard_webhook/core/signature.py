"""Stripe Webhook Signature Verification.

Verifies that incoming webhooks are genuinely from Stripe. The HMAC check
itself is delegated to ``stripe.Webhook.construct_event``, which validates the
``Stripe-Signature`` header (``t=...,v1=...``) against the endpoint secret and
the timestamp tolerance.
"""

import json
from typing import Any, Dict, Optional

import stripe

from giftcard_webhook.core.logger import setup_logger

logger = setup_logger(__name__)

# Messages returned to the caller; never include exception text
INVALID_PAYLOAD = "Invalid payload"
INVALID_SIGNATURE = "Invalid webhook signature"
MISSING_SIGNATURE = "Missing Stripe-Signature header"


def verify_stripe_signature(
    request_body: str,
    signature_header: str,
    webhook_secret: str,
) -> bool:
    """
    Verify a Stripe webhook signature.

    Args:
        request_body: Raw request body as string (NOT parsed JSON)
        signature_header: Value from Stripe-Signature header
        webhook_secret: Endpoint signing secret (whsec_...)

    Returns:
        True if signature is valid and came from Stripe
    """
    try:
        stripe.Webhook.construct_event(request_body, signature_header, webhook_secret)
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Invalid webhook signature: {e}")
        return False
    except ValueError as e:
        # Raised by the SDK when the body is not valid JSON
        logger.warning(f"Signed body is not valid JSON: {e}")
        return False

    return True


def validate_webhook_request(
    raw_body: bytes,
    signature_header: Optional[str],
    webhook_secret: str,
) -> tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Full webhook validation: body checks + signature verification + parsing.

    Args:
        raw_body: Raw request body as bytes
        signature_header: Value from Stripe-Signature header
        webhook_secret: Endpoint signing secret

    Returns:
        Tuple of (event: Optional[dict], error_message: Optional[str])
        If valid: (event, None)
        If invalid: (None, error_message)
    """
    try:
        body_str = raw_body.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.error(f"Invalid UTF-8 in request body: {e}")
        return None, INVALID_PAYLOAD

    # Body must not be empty
    if not body_str.strip():
        return None, INVALID_PAYLOAD

    if not signature_header:
        logger.warning("Webhook received without Stripe-Signature header")
        return None, MISSING_SIGNATURE

    if not verify_stripe_signature(body_str, signature_header, webhook_secret):
        return None, INVALID_SIGNATURE

    # The signed body is the event; parse it as plain JSON
    try:
        event = json.loads(body_str)
    except json.JSONDecodeError:
        return None, INVALID_PAYLOAD

    if not isinstance(event, dict):
        return None, INVALID_PAYLOAD

    return event, None
