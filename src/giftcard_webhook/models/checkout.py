"""Pydantic models for Stripe checkout data.

Only the fields the gift card rules read are declared; everything else in the
Stripe payload is kept via ``extra = "allow"``.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class CustomerDetails(BaseModel):
    """Customer details collected by Checkout."""

    email: Optional[str] = None
    name: Optional[str] = None

    class Config:
        extra = "allow"


class CustomFieldLabel(BaseModel):
    custom: Optional[str] = None
    type: Optional[str] = None

    class Config:
        extra = "allow"


class CustomFieldText(BaseModel):
    value: Optional[str] = None

    class Config:
        extra = "allow"


class CustomField(BaseModel):
    """Single custom field entry of a checkout session."""

    key: Optional[str] = None
    label: Optional[CustomFieldLabel] = None
    text: Optional[CustomFieldText] = None

    class Config:
        extra = "allow"

    @property
    def label_text(self) -> Optional[str]:
        return self.label.custom if self.label else None

    @property
    def text_value(self) -> str:
        if self.text and self.text.value:
            return self.text.value
        return ""


class Product(BaseModel):
    """Stripe product, either expanded inline or fetched by id."""

    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "allow"

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value):
        return value or {}


class Price(BaseModel):
    """Stripe price. ``product`` is an id string unless it was expanded."""

    id: Optional[str] = None
    nickname: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    product: Optional[Union[Product, str]] = None

    class Config:
        extra = "allow"

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value):
        return value or {}

    @property
    def product_id(self) -> Optional[str]:
        if isinstance(self.product, Product):
            return self.product.id
        return self.product

    @property
    def expanded_product(self) -> Optional[Product]:
        return self.product if isinstance(self.product, Product) else None


class LineItem(BaseModel):
    """Single purchased entry of a checkout session."""

    id: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None
    price: Optional[Price] = None

    class Config:
        extra = "allow"

    @property
    def display_text(self) -> str:
        """Description, or the price nickname when the description is empty."""
        if self.description:
            return self.description
        if self.price and self.price.nickname:
            return self.price.nickname
        return ""


class CheckoutSession(BaseModel):
    """Completed Stripe checkout session (``event.data.object``)."""

    id: Optional[str] = None
    customer: Optional[Union[str, Dict[str, Any]]] = None
    customer_email: Optional[str] = None
    customer_details: Optional[CustomerDetails] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    custom_fields: List[CustomField] = Field(default_factory=list)
    amount_total: Optional[int] = None
    currency: Optional[str] = None

    class Config:
        extra = "allow"

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value):
        return value or {}

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _null_custom_fields(cls, value):
        return value or []

    @property
    def customer_id(self) -> Optional[str]:
        if isinstance(self.customer, dict):
            return self.customer.get("id")
        return self.customer

    def metadata_value(self, key: str) -> str:
        """Metadata value as a string ("" when absent or empty)."""
        value = self.metadata.get(key)
        if value is None or value == "":
            return ""
        return str(value)
