"""
Centralized application constants.

Single point of truth for the gift card detection rules and the Mailchimp
field/tag names shared by the classifier, the extractor and the contact sync.
"""

# ==============================================================================
# STRIPE EVENTS
# ==============================================================================

CHECKOUT_COMPLETED_EVENT = "checkout.session.completed"

# Expand products inline when listing line items to avoid follow-up lookups
LINE_ITEM_EXPAND = ["data.price.product"]

# ==============================================================================
# GIFT CARD DETECTION
# ==============================================================================

# Boolean-like metadata keys on price, product or session
GIFT_FLAG_KEYS = ("gift_card", "gift-card", "giftcard", "is_gift_card", "tarjeta_regalo")

# Only these string values (case-insensitive) count as true; see DESIGN.md
GIFT_FLAG_TRUE_VALUES = ("true", "1")

# Substrings searched in line item descriptions and product names
GIFT_KEYWORDS = (
    "gift card",
    "gift-card",
    "giftcard",
    "tarjeta regalo",
    "tarjeta-regalo",
    "bono regalo",
    "donación regalo",
    "donacion regalo",
    "donacion-regalo",
)

# ==============================================================================
# CHECKOUT CUSTOM FIELDS (key or visible label candidates)
# ==============================================================================

# Labels the gift fields are extracted from
RECIPIENT_NAME_LABELS = ("Nombre del cumpleañero",)
RECIPIENT_EMAIL_LABELS = ("Email del cumpleañero",)
MESSAGE_LABELS = ("Mensaje para el cumpleañero",)

# Recipient-presence check also accepts the machine keys
RECIPIENT_NAME_FIELDS = RECIPIENT_NAME_LABELS + ("recipient_name",)
RECIPIENT_EMAIL_FIELDS = RECIPIENT_EMAIL_LABELS + ("recipient_email",)
MESSAGE_FIELDS = MESSAGE_LABELS + ("message",)
SENDER_NAME_FIELDS = ("Tu nombre", "Remitente", "Quien envia", "Sender")

# ==============================================================================
# MAILCHIMP
# ==============================================================================

TAG_GIFT_CARD = "tarjeta_regalo"
TAG_BUYER = "gift_buyer"
TAG_RECIPIENT = "gift_recipient"

BUYER_TAGS = (TAG_BUYER, TAG_GIFT_CARD)
RECIPIENT_TAGS = (TAG_RECIPIENT, TAG_GIFT_CARD)

# Amounts arrive in minor units (cents)
MINOR_UNITS_PER_UNIT = 100
CURRENCY_DECIMAL_PLACES = 2
