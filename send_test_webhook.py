#!/usr/bin/env python3
"""Send a signed checkout.session.completed test webhook to a running instance."""

import hashlib
import hmac
import json
import os
import time

import httpx
from dotenv import load_dotenv

load_dotenv()

WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
WEBHOOK_URL = os.getenv("TEST_WEBHOOK_URL", "http://localhost:8000/webhook/stripe")

# Load test data from environment or use placeholders
SESSION_ID = os.getenv("TEST_SESSION_ID", "cs_test_placeholder")
BUYER_EMAIL = os.getenv("TEST_BUYER_EMAIL", "buyer@example.com")

payload = {
    "id": f"evt_test_{int(time.time())}",
    "object": "event",
    "type": "checkout.session.completed",
    "data": {
        "object": {
            "id": SESSION_ID,
            "object": "checkout.session",
            "amount_total": 5000,
            "currency": "eur",
            "customer_details": {"email": BUYER_EMAIL, "name": "Test Buyer"},
            "metadata": {"recipient_name": "Ana"},
            "custom_fields": [
                {
                    "key": "mensaje",
                    "label": {"type": "custom", "custom": "Mensaje para el cumpleañero"},
                    "type": "text",
                    "text": {"value": "Feliz cumpleaños"},
                }
            ],
        }
    },
}

# Stripe signature scheme: v1 = HMAC-SHA256(secret, "<timestamp>.<body>")
body_str = json.dumps(payload)
timestamp = int(time.time())
signature = hmac.new(
    WEBHOOK_SECRET.encode("utf-8"),
    f"{timestamp}.{body_str}".encode("utf-8"),
    hashlib.sha256,
).hexdigest()

print("=" * 80)
print("SENDING TEST WEBHOOK")
print("=" * 80)
print(f"\nSession: {SESSION_ID}")
print(f"Payload:\n{json.dumps(payload, indent=2, ensure_ascii=False)}")
print(f"\nSignature: t={timestamp},v1={signature[:32]}...")

try:
    response = httpx.post(
        WEBHOOK_URL,
        content=body_str,
        headers={
            "Content-Type": "application/json",
            "Stripe-Signature": f"t={timestamp},v1={signature}",
        },
        timeout=30,
    )

    print(f"\n{'=' * 80}")
    print(f"RESPONSE: {response.status_code}")
    print(f"{'=' * 80}")
    print(f"Body: {response.text}")

except Exception as e:
    print(f"\nError: {e}")
