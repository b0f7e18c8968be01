"""Shop backend API client."""

import json
import logging
from decimal import Decimal
from typing import Optional

import httpx
from pydantic import ValidationError

from .config import DEFAULT_BACKEND_URL
from .errors import CheckoutError, FetchError
from .models import ErrorDetail, FilterState, OrderConfirmation, OrderPayload, Product

logger = logging.getLogger(__name__)


class StorefrontClient:
    """Client for the product and order services of the shop backend."""

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the storefront client.

        Args:
            base_url: Backend base URL (e.g. http://localhost:8000)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to plug in a mock backend
        """
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def list_products(self, filter_state: FilterState) -> list[Product]:
        """
        Fetch products matching the filter.

        Args:
            filter_state: Search and filter inputs; empty fields are not sent

        Returns:
            Products in the order returned by the backend

        Raises:
            FetchError: On transport failure, non-success status or a malformed body
        """
        params = filter_state.to_params()
        logger.info(f"Fetching products with params {params}")

        try:
            response = await self.client.get("/api/products", params=params)
        except httpx.HTTPError as e:
            logger.error(f"Product request failed: {e}")
            raise FetchError(f"Network error: {e}") from e

        if not response.is_success:
            logger.error(f"Product request returned {response.status_code}")
            raise FetchError(
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json(parse_float=Decimal)
            if not isinstance(data, list):
                raise ValueError(f"expected a list of products, got {type(data).__name__}")
            products = [Product.model_validate(item) for item in data]
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.error(f"Could not parse product list: {e}")
            raise FetchError(f"Invalid product list: {e}", status_code=response.status_code) from e

        logger.info(f"Fetched {len(products)} products")
        return products

    async def seed_products(self) -> None:
        """
        Ask the backend to populate its demo catalog.

        Raises:
            FetchError: On transport failure or non-success status
        """
        logger.info("Seeding demo products")

        try:
            response = await self.client.post("/api/products/seed")
        except httpx.HTTPError as e:
            raise FetchError(f"Network error: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

    async def create_order(self, payload: OrderPayload) -> OrderConfirmation:
        """
        Submit an order.

        Args:
            payload: Order items, customer and totals

        Returns:
            The confirmation body returned by the order service

        Raises:
            CheckoutError: With the service's detail message when it provides one,
                otherwise the HTTP status description
        """
        logger.info(f"Submitting order with {len(payload.items)} item(s), total {payload.total}")

        try:
            response = await self.client.post("/api/orders", json=payload.model_dump(mode="json"))
        except httpx.HTTPError as e:
            logger.error(f"Order request failed: {e}")
            raise CheckoutError(str(e) or type(e).__name__) from e

        if not response.is_success:
            error = ErrorDetail.from_response(response)
            logger.warning(
                f"Order rejected: status={response.status_code}, detail={error.detail!r}"
            )
            raise CheckoutError(
                error.detail or response.reason_phrase,
                status_code=response.status_code,
                detail=error.detail,
            )

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None

        logger.info(f"Order accepted: status={response.status_code}")
        return OrderConfirmation(data=body if isinstance(body, dict) else {})

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
