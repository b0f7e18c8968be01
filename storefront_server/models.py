"""Data models for storefront entities."""

import json
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_serializer

ProductId = Union[int, str]

CENT = Decimal("0.01")


class LoadStatus(str, Enum):
    """Catalog loading status."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class CheckoutState(str, Enum):
    """Checkout flow state."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Product(BaseModel):
    """Represents a product from the catalog."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: ProductId = Field(description="Product ID")
    title: str = Field(description="Product title")
    price: Decimal = Field(ge=0, description="Product price")
    description: str = Field(default="", description="Product description")
    image: Optional[str] = Field(None, description="Product image URL")
    category: str = Field(default="", description="Product category")
    sport: str = Field(default="", description="Sport the product is made for")
    brand: Optional[str] = Field(None, description="Product brand")


class CartLine(BaseModel):
    """Represents one aggregated entry in the cart."""

    id: ProductId
    title: str
    price: Decimal = Field(ge=0, description="Price snapshot taken when first added")
    qty: int = Field(gt=0, description="Quantity of the product")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.qty


class FilterState(BaseModel):
    """Search and filter inputs. Empty strings mean unconstrained."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    category: str = ""
    sport: str = ""

    def to_params(self) -> dict[str, str]:
        """Query parameters for the product listing, empty fields omitted."""
        params = {"q": self.query, "category": self.category, "sport": self.sport}
        return {key: value for key, value in params.items() if value}


class OrderItem(BaseModel):
    """Represents an item in an order."""

    product_id: ProductId
    quantity: int = Field(gt=0)


class Customer(BaseModel):
    """Customer and shipping address attached to an order."""

    name: str
    email: str
    address: str
    city: str
    country: str
    postal_code: str


GUEST_CUSTOMER = Customer(
    name="Guest",
    email="guest@example.com",
    address="123 Street",
    city="City",
    country="Country",
    postal_code="00000",
)


class OrderPayload(BaseModel):
    """Order submitted to the order service."""

    items: list[OrderItem]
    customer: Customer
    subtotal: Decimal
    shipping: Decimal
    total: Decimal

    @field_serializer("subtotal", "shipping", "total", when_used="json")
    def serialize_money(self, value: Decimal) -> float:
        return float(value.quantize(CENT))


class OrderConfirmation(BaseModel):
    """Confirmation returned by the order service."""

    data: dict[str, Any] = Field(default_factory=dict)


class ErrorDetail(BaseModel):
    """Structured error body returned by the order service."""

    detail: Optional[str] = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ErrorDetail":
        """Parse an error body, yielding an empty detail when it is unusable."""
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return cls()

        if not isinstance(body, dict):
            return cls()

        detail = body.get("detail")
        if isinstance(detail, str) and detail:
            return cls(detail=detail)
        return cls()
