"""Integrations module - Stripe lookups and the Mailchimp contact directory."""

from giftcard_webhook.integrations.directory import ContactDirectory, ContactDirectoryError
from giftcard_webhook.integrations.mailchimp import MailchimpDirectory, subscriber_hash
from giftcard_webhook.integrations.stripe_gateway import ProductLookupError, StripeGateway

__all__ = [
    "ContactDirectory",
    "ContactDirectoryError",
    "MailchimpDirectory",
    "ProductLookupError",
    "StripeGateway",
    "subscriber_hash",
]
