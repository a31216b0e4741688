"""Mailchimp audience as a contact directory."""

import hashlib
from typing import Any, Dict, Optional

import httpx

from giftcard_webhook.config.settings import MailchimpConfig
from giftcard_webhook.core.logger import setup_logger
from giftcard_webhook.integrations.directory import ContactDirectory, ContactDirectoryError

logger = setup_logger(__name__)


def subscriber_hash(email: str) -> str:
    """Mailchimp member id: MD5 of the lower-cased e-mail address."""
    return hashlib.md5(email.lower().encode("utf-8")).hexdigest()


class MailchimpDirectory(ContactDirectory):
    """Upserts and tags members of one Mailchimp audience.

    Disabled (every call is a logged no-op) unless the API key, server
    prefix and audience id are all configured.
    """

    def __init__(
        self,
        config: MailchimpConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize directory.

        Args:
            config: Mailchimp credentials and audience
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.config = config
        self.transport = transport
        self.enabled = config.enabled

        if not self.enabled:
            logger.info("Mailchimp sync disabled (API key, server prefix or audience missing)")

    def _member_url(self, email: str) -> str:
        return (
            f"{self.config.base_url}/lists/{self.config.audience_id}"
            f"/members/{subscriber_hash(email)}"
        )

    async def _request(self, method: str, url: str, payload: Dict[str, Any]) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                auth=("anystring", self.config.api_key),
                transport=self.transport,
            ) as client:
                response = await client.request(method, url, json=payload)
                response.raise_for_status()
                return response

        except httpx.HTTPStatusError as e:
            raise ContactDirectoryError(
                f"Mailchimp {method} failed: HTTP {e.response.status_code} - {e.response.text}"
            ) from e

        except httpx.HTTPError as e:
            raise ContactDirectoryError(f"Mailchimp {method} failed: {type(e).__name__}: {e}") from e

    async def upsert_contact(
        self,
        email: Optional[str],
        merge_fields: Dict[str, str],
    ) -> bool:
        if not email or not self.enabled:
            logger.debug("Skipping Mailchimp upsert (no email or sync disabled)")
            return False

        payload = {
            "email_address": email,
            "status_if_new": self.config.status_if_new,
            "merge_fields": merge_fields,
        }
        await self._request("PUT", self._member_url(email), payload)
        logger.info(f"Upserted Mailchimp member {subscriber_hash(email)}")
        return True

    async def tag_contact(self, email: Optional[str], tag_name: str) -> bool:
        if not email or not self.enabled:
            logger.debug("Skipping Mailchimp tag (no email or sync disabled)")
            return False

        payload = {"tags": [{"name": tag_name, "status": "active"}]}
        await self._request("POST", f"{self._member_url(email)}/tags", payload)
        logger.info(f"Tagged Mailchimp member {subscriber_hash(email)} with '{tag_name}'")
        return True
