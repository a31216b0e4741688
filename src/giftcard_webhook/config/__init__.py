"""Configuration module - Settings and business constants."""

from giftcard_webhook.config.settings import MailchimpConfig, Settings, settings

__all__ = ["MailchimpConfig", "Settings", "settings"]
