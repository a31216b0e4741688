"""FastAPI application setup and configuration."""

from fastapi import FastAPI

from giftcard_webhook import __version__
from giftcard_webhook.config.settings import settings
from giftcard_webhook.core.logger import setup_logger

logger = setup_logger(__name__)


def _init_monitoring() -> None:
    """Initialize GlitchTip error monitoring (Sentry-compatible)."""
    if not settings.glitchtip_dsn:
        return

    try:
        import logging

        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=settings.glitchtip_dsn,
            environment=settings.environment,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=None,  # Capture all log levels as breadcrumbs
                    event_level=logging.ERROR  # Send ERROR logs as events
                ),
            ],
            traces_sample_rate=0.1,
            send_default_pii=False,  # Buyer and recipient e-mails stay out of GlitchTip
        )
        logger.info("GlitchTip error monitoring initialized")
    except Exception as e:
        logger.error(f"Failed to initialize GlitchTip: {e}")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Stripe Gift Card Webhook",
        version=__version__,
        description="Detects gift card purchases in Stripe checkouts and syncs buyer and recipient to Mailchimp",
    )

    _init_monitoring()

    from giftcard_webhook.server import routes

    app.include_router(routes.router)

    @app.on_event("startup")
    async def startup_handler():
        """Log which integrations are configured."""
        logger.info(
            f"Starting gift card webhook (environment={settings.environment}, "
            f"stripe={'configured' if settings.stripe_webhook_secret else 'missing'}, "
            f"mailchimp={'enabled' if settings.mailchimp_config().enabled else 'disabled'})"
        )

    return app
