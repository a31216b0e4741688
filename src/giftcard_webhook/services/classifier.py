"""Gift card classifier.

Decides whether a completed checkout bought a gift card by running a fixed,
ordered list of independent stages; the first stage that matches wins:

1. ``item_metadata``    gift flag on price or product metadata (product wins)
2. ``session_metadata`` gift flag on the session metadata
3. ``keyword``          gift keyword in line item description or product name
4. ``custom_fields``    recipient-oriented custom field filled in at checkout

Stages are pure functions over already-resolved data. The only I/O is
``GiftClassifier.resolve_products``, which fetches products that Stripe did
not expand inline, concurrently and bounded by a timeout, and stops as soon
as a fetched product carries a gift flag.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from giftcard_webhook.config.constants import (
    GIFT_FLAG_KEYS,
    GIFT_FLAG_TRUE_VALUES,
    GIFT_KEYWORDS,
    MESSAGE_FIELDS,
    RECIPIENT_EMAIL_FIELDS,
    RECIPIENT_NAME_FIELDS,
)
from giftcard_webhook.core.logger import setup_logger
from giftcard_webhook.integrations.stripe_gateway import ProductLookupError
from giftcard_webhook.models.checkout import CheckoutSession, LineItem, Product
from giftcard_webhook.models.gift import GiftClassification
from giftcard_webhook.services.custom_fields import CustomFieldLookup, lookup_custom_field, normalize

logger = setup_logger(__name__)

ProductLookup = Callable[[str], Awaitable[Product]]


@dataclass(frozen=True)
class ResolvedItem:
    """Line item paired with its product (None when unknown)."""

    line_item: LineItem
    product: Optional[Product] = None

    def merged_metadata(self) -> Dict[str, Any]:
        """Price metadata overlaid with product metadata."""
        merged: Dict[str, Any] = {}
        if self.line_item.price:
            merged.update(self.line_item.price.metadata)
        if self.product:
            merged.update(self.product.metadata)
        return merged


@dataclass(frozen=True)
class ClassificationInput:
    session: CheckoutSession
    items: Tuple[ResolvedItem, ...]
    lookup: CustomFieldLookup = lookup_custom_field


Stage = Callable[[ClassificationInput], Optional[GiftClassification]]


def is_flag_true(value: Any) -> bool:
    """Only True, "true" and "1" (case-insensitive) count as set."""
    if value is True:
        return True
    if not isinstance(value, str):
        return False
    return value.strip().lower() in GIFT_FLAG_TRUE_VALUES


def has_gift_flag(metadata: Mapping[str, Any]) -> bool:
    return any(is_flag_true(metadata.get(key)) for key in GIFT_FLAG_KEYS)


def contains_gift_keyword(text: Optional[str]) -> bool:
    normalized = normalize(text)
    if not normalized:
        return False
    return any(normalize(keyword) in normalized for keyword in GIFT_KEYWORDS)


def _positive(stage: str, item: Optional[ResolvedItem] = None) -> GiftClassification:
    return GiftClassification(
        is_gift_card=True,
        stage=stage,
        line_item=item.line_item if item else None,
        product=item.product if item else None,
    )


def item_metadata_stage(data: ClassificationInput) -> Optional[GiftClassification]:
    for item in data.items:
        if has_gift_flag(item.merged_metadata()):
            return _positive("item_metadata", item)
    return None


def session_metadata_stage(data: ClassificationInput) -> Optional[GiftClassification]:
    if has_gift_flag(data.session.metadata):
        return _positive("session_metadata")
    return None


def keyword_stage(data: ClassificationInput) -> Optional[GiftClassification]:
    for item in data.items:
        product_name = item.product.name if item.product else None
        if contains_gift_keyword(item.line_item.display_text) or contains_gift_keyword(product_name):
            return _positive("keyword", item)
    return None


def custom_field_stage(data: ClassificationInput) -> Optional[GiftClassification]:
    for candidates in (RECIPIENT_EMAIL_FIELDS, RECIPIENT_NAME_FIELDS, MESSAGE_FIELDS):
        if data.lookup(data.session, candidates):
            return _positive("custom_fields")
    return None


STAGES: Tuple[Tuple[str, Stage], ...] = (
    ("item_metadata", item_metadata_stage),
    ("session_metadata", session_metadata_stage),
    ("keyword", keyword_stage),
    ("custom_fields", custom_field_stage),
)


def run_stages(
    data: ClassificationInput,
    stages: Sequence[Tuple[str, Stage]] = STAGES,
) -> GiftClassification:
    """Run stages in order and return the first positive classification."""
    for name, stage in stages:
        result = stage(data)
        if result is not None and result.is_gift_card:
            logger.info(f"Gift card detected by stage '{name}' (session={data.session.id})")
            return result

    logger.info(f"No gift card signal in session {data.session.id}")
    return GiftClassification.negative()


class GiftClassifier:
    """Resolves line item products and runs the classification stages."""

    def __init__(
        self,
        product_lookup: Optional[ProductLookup] = None,
        lookup_timeout: Optional[float] = None,
        stages: Sequence[Tuple[str, Stage]] = STAGES,
    ):
        """
        Initialize classifier.

        Args:
            product_lookup: Async callable fetching a product by id
                (None = only inline-expanded products are used)
            lookup_timeout: Upper bound in seconds for all product lookups
            stages: Ordered (name, stage) pairs
        """
        self.product_lookup = product_lookup
        self.lookup_timeout = lookup_timeout
        self.stages = tuple(stages)

    async def classify(
        self,
        session: CheckoutSession,
        line_items: Sequence[LineItem],
        lookup: CustomFieldLookup = lookup_custom_field,
    ) -> GiftClassification:
        """
        Classify a checkout session.

        Raises:
            ProductLookupError: if a required product could not be fetched
        """
        items = await self.resolve_products(line_items)
        return run_stages(ClassificationInput(session, tuple(items), lookup), self.stages)

    async def resolve_products(self, line_items: Sequence[LineItem]) -> List[ResolvedItem]:
        """
        Pair every line item with its product.

        Inline-expanded products are used as-is. Products referenced only by
        id are fetched concurrently, unless an inline item already carries a
        gift flag. Outstanding lookups are cancelled as soon as one fetched
        product is flagged.
        """
        resolved = [
            ResolvedItem(item, item.price.expanded_product if item.price else None)
            for item in line_items
        ]

        if any(has_gift_flag(item.merged_metadata()) for item in resolved):
            return resolved

        # product id -> indexes of the line items referencing it
        pending: Dict[str, List[int]] = {}
        for index, item in enumerate(resolved):
            price = item.line_item.price
            if item.product is None and price and price.product_id:
                pending.setdefault(price.product_id, []).append(index)

        if not pending:
            return resolved

        if self.product_lookup is None:
            logger.warning(f"{len(pending)} products not expanded and no product lookup configured")
            return resolved

        try:
            await asyncio.wait_for(
                self._fetch_pending(resolved, pending),
                timeout=self.lookup_timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProductLookupError(
                f"Product lookup exceeded {self.lookup_timeout}s for {len(pending)} products"
            ) from e

        return resolved

    async def _fetch_pending(
        self,
        resolved: List[ResolvedItem],
        pending: Dict[str, List[int]],
    ) -> None:
        tasks = {
            asyncio.ensure_future(self.product_lookup(product_id)): product_id
            for product_id in pending
        }
        logger.debug(f"Fetching {len(tasks)} products not expanded inline")

        try:
            while tasks:
                done, _ = await asyncio.wait(tasks.keys(), return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    product_id = tasks.pop(task)
                    try:
                        product = task.result()
                    except ProductLookupError:
                        raise
                    except Exception as e:
                        raise ProductLookupError(f"Failed to fetch product {product_id}: {e}") from e

                    flagged = False
                    for index in pending[product_id]:
                        resolved[index] = ResolvedItem(resolved[index].line_item, product)
                        flagged = flagged or has_gift_flag(resolved[index].merged_metadata())

                    if flagged:
                        logger.debug(f"Product {product_id} is flagged, skipping {len(tasks)} lookups")
                        return
        finally:
            for task in tasks:
                task.cancel()
