"""Configuration management using Pydantic Settings.

Loads configuration from environment variables with .env file support.
"""

from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class MailchimpConfig(BaseModel):
    """Connection settings for a single Mailchimp audience."""

    api_key: Optional[str] = None
    server_prefix: Optional[str] = None
    audience_id: Optional[str] = None
    status_if_new: str = "subscribed"
    timeout: float = 10.0

    class Config:
        frozen = True

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.server_prefix and self.audience_id)

    @property
    def base_url(self) -> str:
        return f"https://{self.server_prefix}.api.mailchimp.com/3.0"


class Settings(BaseSettings):
    """Application configuration."""

    # Stripe Configuration
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    product_lookup_timeout: float = 8.0

    # Mailchimp Configuration
    mailchimp_api_key: Optional[str] = None
    mailchimp_server_prefix: Optional[str] = None  # e.g. "us1"
    mailchimp_audience_id: Optional[str] = None
    mailchimp_status_if_new: str = "subscribed"
    mailchimp_timeout: float = 10.0

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    environment: str = "development"

    # GlitchTip Error Monitoring
    glitchtip_dsn: Optional[str] = None

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    def mailchimp_config(self) -> MailchimpConfig:
        """Project the Mailchimp settings into the directory's config struct."""
        return MailchimpConfig(
            api_key=self.mailchimp_api_key,
            server_prefix=self.mailchimp_server_prefix,
            audience_id=self.mailchimp_audience_id,
            status_if_new=self.mailchimp_status_if_new,
            timeout=self.mailchimp_timeout,
        )


# Create a global settings instance
settings = Settings()
