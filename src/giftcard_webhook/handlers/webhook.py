"""Webhook event handling."""

from typing import Any, Dict, Optional

from giftcard_webhook.config.constants import CHECKOUT_COMPLETED_EVENT
from giftcard_webhook.core.event_logger import log_webhook_event
from giftcard_webhook.core.logger import setup_logger
from giftcard_webhook.core.monitoring import capture_exception, set_checkout_context
from giftcard_webhook.integrations.directory import ContactDirectory
from giftcard_webhook.integrations.stripe_gateway import StripeGateway
from giftcard_webhook.models.checkout import CheckoutSession
from giftcard_webhook.models.gift import WebhookOutcome, WebhookResult
from giftcard_webhook.services.classifier import GiftClassifier
from giftcard_webhook.services.contact_sync import ContactSync
from giftcard_webhook.services.extractor import extract

logger = setup_logger(__name__)


async def handle_webhook_event(
    event: Dict[str, Any],
    gateway: StripeGateway,
    directory: ContactDirectory,
    classifier: Optional[GiftClassifier] = None,
    log_dir: Optional[str] = None,
) -> WebhookResult:
    """
    Handle a verified Stripe event.

    Only ``checkout.session.completed`` is processed; every other type is
    acknowledged as unhandled. Any exception raised while processing is
    turned into a SOFT_ERROR result so Stripe does not retry.

    Args:
        event: Verified, parsed Stripe event
        gateway: Stripe lookups (line items, products, customers)
        directory: Contact directory receiving buyer and recipient
        classifier: Gift classifier (defaults to one using ``gateway``)
        log_dir: Directory for the per-event JSONL log (None = disabled)

    Returns:
        WebhookResult describing what happened
    """
    event_id = event.get("id")
    event_type = event.get("type")
    data = event.get("data")
    session_payload = data.get("object") if isinstance(data, dict) else None
    if not isinstance(session_payload, dict):
        session_payload = None

    set_checkout_context(
        event_id=event_id,
        event_type=event_type,
        session_id=session_payload.get("id") if session_payload else None,
    )

    if event_type != CHECKOUT_COMPLETED_EVENT:
        logger.info(f"Ignoring unhandled event type {event_type} ({event_id})")
        result = WebhookResult(outcome=WebhookOutcome.UNHANDLED, event_type=event_type)
    else:
        if classifier is None:
            classifier = GiftClassifier(product_lookup=gateway.retrieve_product)

        try:
            if session_payload is None:
                raise ValueError("Checkout event carries no session object")
            result = await handle_checkout_completed(session_payload, gateway, directory, classifier)
        except Exception as e:
            logger.error(f"Error processing checkout event {event_id}: {e}", exc_info=True)
            capture_exception(e, context={"event_id": event_id})
            result = WebhookResult(
                outcome=WebhookOutcome.SOFT_ERROR,
                event_type=event_type,
                error=type(e).__name__,
            )

    log_webhook_event(
        log_dir,
        event_id=event_id,
        event_type=event_type,
        outcome=result.outcome.value,
        details={
            "stage": result.stage,
            "sync": {name: status.model_dump() for name, status in result.sync.items()},
            "error": result.error,
        },
    )
    return result


async def handle_checkout_completed(
    session_payload: Dict[str, Any],
    gateway: StripeGateway,
    directory: ContactDirectory,
    classifier: GiftClassifier,
) -> WebhookResult:
    """
    Classify a completed checkout and, for gift cards, sync its contacts.

    Args:
        session_payload: ``event.data.object`` of the checkout event
        gateway: Stripe lookups
        directory: Contact directory
        classifier: Gift classifier

    Returns:
        IGNORED, GIFT_CARD or PARTIAL result
    """
    session = CheckoutSession.model_validate(session_payload)
    logger.info(f"Processing completed checkout session {session.id}")

    line_items = await gateway.list_line_items(session.id)
    classification = await classifier.classify(session, line_items)

    if not classification.is_gift_card:
        return WebhookResult(outcome=WebhookOutcome.IGNORED, event_type=CHECKOUT_COMPLETED_EVENT)

    record = extract(session)

    # Last sender-name fallback: the Stripe customer record
    if not record.sender_name and session.customer_id:
        customer_name = await gateway.retrieve_customer_name(session.customer_id)
        if customer_name:
            record = extract(session, customer_name=customer_name)

    logger.info(
        f"Gift card session {session.id}: amount={record.formatted_amount or 'n/a'}, "
        f"buyer={'yes' if record.buyer_email else 'no'}, "
        f"recipient={'yes' if record.recipient_email else 'no'}"
    )

    sync = await ContactSync(directory).sync(record)
    failed = [name for name, status in sync.items() if status.error]

    if failed:
        logger.warning(f"Contact sync partially failed for session {session.id}: {failed}")
        outcome = WebhookOutcome.PARTIAL
    else:
        outcome = WebhookOutcome.GIFT_CARD

    return WebhookResult(
        outcome=outcome,
        event_type=CHECKOUT_COMPLETED_EVENT,
        stage=classification.stage,
        record=record,
        sync=sync,
    )
