"""Stripe Gift Card Webhook - Main Entry Point."""

import os

from giftcard_webhook.server.app import create_app

# Create FastAPI application
app = create_app()

if __name__ == "__main__":
    import uvicorn

    from giftcard_webhook.config.settings import settings

    reload = os.getenv("RELOAD", "false").lower() == "true"

    uvicorn.run(
        "giftcard_webhook.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        timeout_keep_alive=5,
        access_log=False,  # Disable uvicorn access log (we use structured logging)
    )
