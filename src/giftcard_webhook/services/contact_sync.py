"""Sync gift card buyer and recipient into the contact directory."""

import asyncio
from typing import Dict, Optional, Sequence

from giftcard_webhook.config.constants import BUYER_TAGS, RECIPIENT_TAGS
from giftcard_webhook.core.logger import setup_logger
from giftcard_webhook.integrations.directory import ContactDirectory, ContactDirectoryError
from giftcard_webhook.models.gift import ContactSyncStatus, GiftRecord
from giftcard_webhook.services.extractor import build_merge_fields

logger = setup_logger(__name__)


class ContactSync:
    """Upserts and tags the buyer and the recipient of a gift card.

    Both contacts are synced concurrently and independently: a failure for
    one is logged and reported but never affects the other, and nothing is
    retried.
    """

    def __init__(self, directory: ContactDirectory):
        """Initialize sync with the target directory."""
        self.directory = directory

    async def sync(self, record: GiftRecord) -> Dict[str, ContactSyncStatus]:
        """
        Sync both contacts of a gift record.

        Args:
            record: Extracted gift record

        Returns:
            {"buyer": status, "recipient": status}
        """
        merge_fields = build_merge_fields(record)

        buyer, recipient = await asyncio.gather(
            self._sync_contact("buyer", record.buyer_email, merge_fields, BUYER_TAGS),
            self._sync_contact("recipient", record.recipient_email, merge_fields, RECIPIENT_TAGS),
        )
        return {"buyer": buyer, "recipient": recipient}

    async def _sync_contact(
        self,
        role: str,
        email: Optional[str],
        merge_fields: Dict[str, str],
        tags: Sequence[str],
    ) -> ContactSyncStatus:
        if not email:
            logger.info(f"No {role} email, skipping contact sync")
            return ContactSyncStatus(email=None, skipped=True)

        try:
            upserted = await self.directory.upsert_contact(email, merge_fields)
            for tag in tags:
                await self.directory.tag_contact(email, tag)

        except ContactDirectoryError as e:
            logger.error(f"Contact sync failed for {role}: {e}")
            return ContactSyncStatus(email=email, error=str(e))

        except Exception as e:
            logger.error(f"Unexpected error syncing {role} contact: {e}", exc_info=True)
            return ContactSyncStatus(email=email, error=str(e))

        if not upserted:
            return ContactSyncStatus(email=email, skipped=True)

        logger.info(f"Synced {role} contact with tags {list(tags)}")
        return ContactSyncStatus(email=email, success=True)
