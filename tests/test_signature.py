import json

from giftcard_webhook.core.signature import (
    INVALID_PAYLOAD,
    INVALID_SIGNATURE,
    MISSING_SIGNATURE,
    validate_webhook_request,
    verify_stripe_signature,
)

from tests.conftest import WEBHOOK_SECRET, checkout_event, sign_payload

BODY = json.dumps(checkout_event({"id": "cs_test_1"}))


def test_valid_request_returns_parsed_event():
    event, error = validate_webhook_request(BODY.encode("utf-8"), sign_payload(BODY), WEBHOOK_SECRET)

    assert error is None
    assert event["data"]["object"]["id"] == "cs_test_1"


def test_missing_header_is_reported_before_verification():
    assert validate_webhook_request(BODY.encode("utf-8"), None, WEBHOOK_SECRET) == (None, MISSING_SIGNATURE)
    assert validate_webhook_request(BODY.encode("utf-8"), "", WEBHOOK_SECRET) == (None, MISSING_SIGNATURE)


def test_wrong_secret_fails_verification():
    header = sign_payload(BODY, secret="whsec_other")

    assert not verify_stripe_signature(BODY, header, WEBHOOK_SECRET)
    assert validate_webhook_request(BODY.encode("utf-8"), header, WEBHOOK_SECRET) == (None, INVALID_SIGNATURE)


def test_invalid_utf8_is_invalid_payload():
    assert validate_webhook_request(b"\xff\xfe", sign_payload("x"), WEBHOOK_SECRET) == (None, INVALID_PAYLOAD)
