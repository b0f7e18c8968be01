"""Storefront page state: filter inputs wired to catalog, cart and checkout."""

import logging
from typing import Optional

from .cart import CartStore
from .catalog import CatalogQuery
from .checkout import CheckoutFlow
from .config import Settings
from .errors import ProductNotFound
from .models import FilterState, OrderConfirmation, Product, ProductId
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)


class Storefront:
    """
    One shopper's storefront session.

    Editing the filter inputs does not fetch anything; ``search`` (or
    ``apply_filters``) loads the catalog for the inputs as they stand.
    """

    def __init__(self, client: StorefrontClient) -> None:
        self.client = client
        self.catalog = CatalogQuery(client)
        self.cart = CartStore()
        self.checkout_flow = CheckoutFlow(self.cart, client)
        self.filter = FilterState()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Storefront":
        return cls(StorefrontClient(base_url=settings.backend_url, timeout=settings.timeout))

    @property
    def message(self) -> str:
        return self.checkout_flow.message

    def set_query(self, query: str) -> None:
        self.filter = self.filter.model_copy(update={"query": query})

    def set_category(self, category: str) -> None:
        self.filter = self.filter.model_copy(update={"category": category})

    def set_sport(self, sport: str) -> None:
        self.filter = self.filter.model_copy(update={"sport": sport})

    def update_filter(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        sport: Optional[str] = None,
    ) -> FilterState:
        """Update the given filter inputs, leaving the others as they are."""
        if query is not None:
            self.set_query(query)
        if category is not None:
            self.set_category(category)
        if sport is not None:
            self.set_sport(sport)
        return self.filter

    async def start(self) -> None:
        """Initial catalog load with an empty filter."""
        await self.catalog.load(self.filter)

    async def search(self) -> Optional[list[Product]]:
        return await self.catalog.load(self.filter)

    apply_filters = search

    async def seed(self) -> bool:
        return await self.catalog.seed_demo_data()

    def add_to_cart(self, product_id: ProductId) -> Product:
        """
        Add a loaded product to the cart.

        Raises:
            ProductNotFound: If the id is not in the current product list
        """
        product = self.catalog.find(product_id)
        if product is None:
            raise ProductNotFound(f"Product {product_id} is not in the current product list")
        self.cart.add_to_cart(product)
        return product

    def remove_from_cart(self, product_id: ProductId) -> None:
        line = next((line for line in self.cart if str(line.id) == str(product_id)), None)
        self.cart.remove_from_cart(line.id if line is not None else product_id)

    async def checkout(self) -> Optional[OrderConfirmation]:
        return await self.checkout_flow.checkout()

    async def close(self) -> None:
        await self.client.close()
