"""Read-only Stripe API lookups used while handling a checkout event."""

import asyncio
from typing import Any, List, Optional

import stripe

from giftcard_webhook.config.constants import LINE_ITEM_EXPAND
from giftcard_webhook.core.logger import setup_logger
from giftcard_webhook.models.checkout import LineItem, Product

logger = setup_logger(__name__)


class ProductLookupError(Exception):
    """A product (or the line items) could not be fetched from Stripe."""


def _to_dict(obj: Any) -> dict:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class StripeGateway:
    """Async wrapper over the blocking Stripe SDK calls.

    SDK calls run in a worker thread so concurrent product lookups do not
    block the event loop.
    """

    def __init__(self, api_key: str):
        """Initialize gateway with the Stripe secret key."""
        self.api_key = api_key

    async def list_line_items(self, session_id: str) -> List[LineItem]:
        """
        Fetch all line items of a checkout session with products expanded.

        Raises:
            ProductLookupError: on any Stripe API failure
        """
        try:
            raw_items = await asyncio.to_thread(self._list_line_items_sync, session_id)
        except stripe.StripeError as e:
            raise ProductLookupError(f"Failed to list line items for {session_id}: {e}") from e

        items = [LineItem.model_validate(item) for item in raw_items]
        logger.info(f"Fetched {len(items)} line items for session {session_id}")
        return items

    def _list_line_items_sync(self, session_id: str) -> List[dict]:
        page = stripe.checkout.Session.list_line_items(
            session_id,
            expand=LINE_ITEM_EXPAND,
            limit=100,
            api_key=self.api_key,
        )
        return [_to_dict(item) for item in page.auto_paging_iter()]

    async def retrieve_product(self, product_id: str) -> Product:
        """
        Fetch a single product by id.

        Raises:
            ProductLookupError: on any Stripe API failure
        """
        logger.info(f"Fetching product {product_id} (not expanded inline)")
        try:
            product = await asyncio.to_thread(
                stripe.Product.retrieve, product_id, api_key=self.api_key
            )
        except stripe.StripeError as e:
            raise ProductLookupError(f"Failed to fetch product {product_id}: {e}") from e

        return Product.model_validate(_to_dict(product))

    async def retrieve_customer_name(self, customer_id: str) -> Optional[str]:
        """Name of a Stripe customer, or None if unavailable."""
        try:
            customer = await asyncio.to_thread(
                stripe.Customer.retrieve, customer_id, api_key=self.api_key
            )
        except stripe.StripeError as e:
            logger.warning(f"Failed to fetch customer {customer_id}: {e}")
            return None

        return _to_dict(customer).get("name") or None
