"""Handlers module - Stripe webhook event handlers."""

from giftcard_webhook.handlers.webhook import handle_checkout_completed, handle_webhook_event

__all__ = ["handle_checkout_completed", "handle_webhook_event"]
