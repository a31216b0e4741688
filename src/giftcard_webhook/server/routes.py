"""API routes for the Stripe webhook receiver."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from giftcard_webhook import __version__
from giftcard_webhook.config.settings import Settings, settings
from giftcard_webhook.core.logger import setup_logger
from giftcard_webhook.core.signature import validate_webhook_request
from giftcard_webhook.handlers.webhook import handle_webhook_event
from giftcard_webhook.integrations.directory import ContactDirectory
from giftcard_webhook.integrations.mailchimp import MailchimpDirectory
from giftcard_webhook.integrations.stripe_gateway import StripeGateway
from giftcard_webhook.services.classifier import GiftClassifier

logger = setup_logger(__name__)
router = APIRouter()


def get_settings() -> Settings:
    """Dependency returning the application settings."""
    return settings


def get_stripe_gateway(config: Settings = Depends(get_settings)) -> StripeGateway:
    """Dependency building the Stripe lookup gateway."""
    return StripeGateway(config.stripe_secret_key)


def get_contact_directory(config: Settings = Depends(get_settings)) -> ContactDirectory:
    """Dependency building the Mailchimp contact directory."""
    return MailchimpDirectory(config.mailchimp_config())


@router.get("/")
async def root() -> dict:
    """Root endpoint with basic service info."""
    return {
        "service": "Stripe Gift Card Webhook",
        "version": __version__,
        "endpoints": {
            "webhook": "POST /webhook/stripe",
            "health": "GET /health",
            "docs": "GET /docs",
        },
    }


@router.get("/health")
async def health_check(config: Settings = Depends(get_settings)) -> dict:
    """Health check endpoint for monitoring."""
    env_checks = {
        "stripe_secret_key": "ok" if config.stripe_secret_key else "missing",
        "stripe_webhook_secret": "ok" if config.stripe_webhook_secret else "missing",
    }

    health_status = {
        "status": "healthy",
        "service": "giftcard-webhook",
        "checks": {
            "environment": env_checks,
            "mailchimp": "enabled" if config.mailchimp_config().enabled else "disabled",
        },
    }

    if any(v == "missing" for v in env_checks.values()):
        health_status["status"] = "degraded"

    return health_status


@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    config: Settings = Depends(get_settings),
    gateway: StripeGateway = Depends(get_stripe_gateway),
    directory: ContactDirectory = Depends(get_contact_directory),
) -> JSONResponse:
    """
    Main Stripe webhook endpoint - verifies, classifies and syncs.

    Only signature/transport problems produce an error status. Every verified
    event gets 200 so Stripe does not retry; the body's ``outcome`` tells
    unhandled, ignored, gift_card, partial and soft_error apart.

    Args:
        request: The HTTP request from Stripe
        stripe_signature: Value of the Stripe-Signature header

    Returns:
        JSON acknowledgement
    """
    if not config.stripe_secret_key or not config.stripe_webhook_secret:
        logger.error("Stripe secret key or webhook secret not configured")
        return JSONResponse({"error": "Stripe not configured"}, status_code=500)

    # Get raw body for signature verification
    raw_body = await request.body()

    event, error_msg = validate_webhook_request(raw_body, stripe_signature, config.stripe_webhook_secret)
    if error_msg:
        logger.warning(f"Rejected webhook request: {error_msg}")
        return JSONResponse({"error": error_msg}, status_code=400)

    logger.info(f"Webhook received: type={event.get('type')}, id={event.get('id')}")

    classifier = GiftClassifier(
        product_lookup=gateway.retrieve_product,
        lookup_timeout=config.product_lookup_timeout,
    )
    result = await handle_webhook_event(
        event,
        gateway,
        directory,
        classifier=classifier,
        log_dir=config.log_dir,
    )

    return JSONResponse(result.to_response(), status_code=200)
