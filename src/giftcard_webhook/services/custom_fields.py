"""Checkout custom field lookup, tolerant to case and accents."""

import unicodedata
from typing import Callable, Optional, Sequence

from giftcard_webhook.models.checkout import CheckoutSession

CustomFieldLookup = Callable[[CheckoutSession, Sequence[str]], str]


def normalize(value: Optional[str]) -> str:
    """Lower-case and strip diacritics ("Cumpleañero" -> "cumpleanero")."""
    decomposed = unicodedata.normalize("NFD", str(value or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def lookup_custom_field(session: CheckoutSession, candidates: Sequence[str]) -> str:
    """
    Return the text value of the first custom field matching any candidate.

    A candidate matches a field when it equals the field's normalized key or
    is contained in its normalized visible label. Fields are scanned in
    checkout order and the first hit wins, even if its value is empty.

    Args:
        session: Checkout session carrying ``custom_fields``
        candidates: Keys or label fragments, in priority order

    Returns:
        The field's text value, or "" when nothing matches
    """
    normalized = [n for n in (normalize(c) for c in candidates) if n]
    if not normalized:
        return ""

    for field in session.custom_fields:
        key = normalize(field.key)
        label = normalize(field.label_text)
        for candidate in normalized:
            if candidate == key or (label and candidate in label):
                return field.text_value

    return ""
