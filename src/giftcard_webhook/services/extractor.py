"""Gift card field extraction.

Pure functions: everything here works on an already-fetched checkout session
and never calls Stripe or Mailchimp.
"""

from decimal import Decimal
from typing import Dict, Optional

from giftcard_webhook.config.constants import (
    CURRENCY_DECIMAL_PLACES,
    MESSAGE_LABELS,
    MINOR_UNITS_PER_UNIT,
    RECIPIENT_EMAIL_LABELS,
    RECIPIENT_NAME_LABELS,
    SENDER_NAME_FIELDS,
)
from giftcard_webhook.models.checkout import CheckoutSession
from giftcard_webhook.models.gift import GiftRecord
from giftcard_webhook.services.custom_fields import CustomFieldLookup, lookup_custom_field


def format_amount(amount_minor: Optional[int], currency: Optional[str]) -> str:
    """
    Format a minor-unit amount as "<units with 2 decimals> <CURRENCY>".

    Args:
        amount_minor: Amount in minor units (e.g. 2500 cents)
        currency: ISO currency code, any case

    Returns:
        e.g. "25.00 EUR", or "" when amount or currency is missing
    """
    if amount_minor is None or not currency:
        return ""

    units = Decimal(int(amount_minor)) / MINOR_UNITS_PER_UNIT
    return f"{units:.{CURRENCY_DECIMAL_PLACES}f} {currency.upper()}"


def _first(*values: Optional[str]) -> str:
    for value in values:
        if value:
            return value
    return ""


def extract(
    session: CheckoutSession,
    lookup: CustomFieldLookup = lookup_custom_field,
    customer_name: Optional[str] = None,
) -> GiftRecord:
    """
    Build the gift record from session metadata and custom fields.

    Args:
        session: Completed checkout session
        lookup: Custom field lookup (see ``lookup_custom_field``)
        customer_name: Name resolved from the customer record, used as the
            last sender-name fallback

    Returns:
        GiftRecord, always fully constructed
    """
    details = session.customer_details
    buyer_email = _first(
        details.email if details else None,
        session.customer_email,
        session.metadata_value("buyer_email"),
    ) or None

    sender_name = _first(
        session.metadata_value("sender_name"),
        lookup(session, SENDER_NAME_FIELDS),
        details.name if details else None,
        buyer_email.split("@", 1)[0] if buyer_email else None,
        customer_name,
    )

    return GiftRecord(
        buyer_email=buyer_email,
        recipient_name=_first(
            session.metadata_value("recipient_name"),
            lookup(session, RECIPIENT_NAME_LABELS),
        ),
        recipient_email=_first(
            session.metadata_value("recipient_email"),
            lookup(session, RECIPIENT_EMAIL_LABELS),
        ) or None,
        sender_name=sender_name,
        message=_first(
            session.metadata_value("message"),
            lookup(session, MESSAGE_LABELS),
        ),
        formatted_amount=format_amount(session.amount_total, session.currency),
    )


def build_merge_fields(record: GiftRecord) -> Dict[str, str]:
    """Mailchimp merge fields, with both Spanish and English merge tags.

    Mailchimp ignores tags that do not exist in the audience.
    """
    return {
        "RECEPTOR": record.recipient_name,
        "RECIPIENT": record.recipient_name,
        "MENSAJE": record.message,
        "GFTMSG": record.message,
        "SENDER": record.sender_name,
        "IMPORTE": record.formatted_amount,
        "AMOUNT": record.formatted_amount,
    }
