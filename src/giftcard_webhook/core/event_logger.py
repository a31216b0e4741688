"""
Webhook Event Logger

Appends the outcome of every verified Stripe event to a daily JSONL file so
that processed, ignored and partially failed gift card events can be audited.
Disabled unless ``log_dir`` is configured.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from giftcard_webhook.core.logger import setup_logger

logger = setup_logger(__name__)


def log_webhook_event(
    log_dir: Optional[str],
    event_id: Optional[str],
    event_type: Optional[str],
    outcome: str,
    details: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
    """
    Log a webhook outcome to a daily JSONL file.

    Args:
        log_dir: Directory for the event files (None = disabled)
        event_id: Stripe event id
        event_type: Stripe event type
        outcome: WebhookOutcome value
        details: Extra fields (emails, classifier stage, sync status)

    Returns:
        Path to the log file where the event was written, or None
    """
    if not log_dir:
        return None

    logs_dir = Path(log_dir)
    date_str = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    log_file = logs_dir / f"webhook_events_{date_str}.jsonl"

    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_id": event_id,
        "event_type": event_type,
        "outcome": outcome,
    }
    if details:
        log_entry["details"] = details

    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

        logger.debug(f"Logged webhook event {event_id} ({outcome}) to {log_file}")
        return str(log_file)

    except OSError as e:
        logger.error(f"Failed to write webhook event to log file: {e}")
        return None
