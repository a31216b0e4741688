"""
GlitchTip Error Monitoring Utilities

Helper functions for error tracking and context management.
"""

from typing import Any, Dict, Optional

from giftcard_webhook.core.logger import setup_logger

logger = setup_logger(__name__)


def set_checkout_context(
    event_id: Optional[str],
    event_type: Optional[str] = None,
    session_id: Optional[str] = None,
    **extra_tags
) -> None:
    """
    Set webhook-specific context for error tracking.

    Args:
        event_id: Stripe event id (evt_...)
        event_type: Stripe event type
        session_id: Checkout session id (cs_...)
        **extra_tags: Additional tags to add
    """
    try:
        import sentry_sdk

        if event_type:
            sentry_sdk.set_tag("webhook.event_type", event_type)
        if session_id:
            sentry_sdk.set_tag("webhook.session_id", session_id)

        for key, value in extra_tags.items():
            sentry_sdk.set_tag(key, value)

        context_data = {
            "event_id": event_id,
            "event_type": event_type,
            "session_id": session_id,
        }
        context_data.update(extra_tags)
        sentry_sdk.set_context("webhook", context_data)

    except Exception as e:
        logger.warning(f"Failed to set webhook context: {e}")


def capture_exception(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: str = "error"
) -> None:
    """
    Capture an exception and send to GlitchTip.

    Args:
        error: The exception to capture
        context: Additional context data
        level: Error level (error, warning, info)
    """
    try:
        import sentry_sdk

        with sentry_sdk.new_scope() as scope:
            if context:
                scope.set_context("custom", context)
            scope.set_level(level)
            sentry_sdk.capture_exception(error)

    except Exception as e:
        logger.warning(f"Failed to capture exception in GlitchTip: {e}")
