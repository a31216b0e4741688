"""Abstract contact directory (CRM) used by the contact sync."""

from abc import ABC, abstractmethod
from typing import Dict, Optional


class ContactDirectoryError(Exception):
    """A directory call failed (transport error or non-2xx response)."""


class ContactDirectory(ABC):
    """Abstract directory keyed by e-mail address.

    Both operations are idempotent and are no-ops (returning False) when the
    e-mail is missing, so callers never need to guard against it.
    """

    @abstractmethod
    async def upsert_contact(
        self,
        email: Optional[str],
        merge_fields: Dict[str, str],
    ) -> bool:
        """Create the contact if absent, otherwise update its merge fields.

        Args:
            email: Contact e-mail (None/empty = no-op)
            merge_fields: Merge tag -> value

        Returns:
            True if the call was made, False if skipped

        Raises:
            ContactDirectoryError: if the directory rejected the call
        """
        pass

    @abstractmethod
    async def tag_contact(self, email: Optional[str], tag_name: str) -> bool:
        """Add an active tag to the contact.

        Args:
            email: Contact e-mail (None/empty = no-op)
            tag_name: Tag to activate

        Returns:
            True if the call was made, False if skipped

        Raises:
            ContactDirectoryError: if the directory rejected the call
        """
        pass
