"""Stripe gift card webhook - classifies checkout sessions and syncs contacts to Mailchimp."""

__version__ = "1.0.0"
