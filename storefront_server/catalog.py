"""Catalog query state: filters, product list and loading status."""

import logging
from typing import Optional

from .errors import FetchError
from .models import FilterState, LoadStatus, Product, ProductId
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)


def distinct_values(products: list[Product], field: str) -> list[str]:
    """Distinct values of a product field in first-seen order."""
    seen: dict[str, None] = {}
    for product in products:
        seen.setdefault(getattr(product, field), None)
    return list(seen)


class CatalogQuery:
    """
    Holds the product list loaded for the most recent filter.

    Loads may overlap. Every load takes a new request token and only the
    response for the latest token is applied, so the last load issued wins
    regardless of the order in which responses arrive. Superseded requests
    are not cancelled; their results are dropped on arrival.
    """

    def __init__(self, client: StorefrontClient) -> None:
        self.client = client
        self._filter = FilterState()
        self._products: list[Product] = []
        self._status = LoadStatus.IDLE
        self._error: Optional[str] = None
        self._token = 0

    @property
    def filter(self) -> FilterState:
        return self._filter

    @property
    def products(self) -> list[Product]:
        return list(self._products)

    @property
    def status(self) -> LoadStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._status == LoadStatus.LOADING

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def categories(self) -> list[str]:
        return distinct_values(self._products, "category")

    @property
    def sports(self) -> list[str]:
        return distinct_values(self._products, "sport")

    def find(self, product_id: ProductId) -> Optional[Product]:
        """Look up a loaded product by id."""
        for product in self._products:
            if product.id == product_id or str(product.id) == str(product_id):
                return product
        return None

    async def load(self, filter_state: FilterState) -> Optional[list[Product]]:
        """
        Load products for a filter.

        The status switches to loading before the request is sent. A failed
        load keeps the previous product list and records the error. A
        cancelled load restores the status it replaced and re-raises.

        Args:
            filter_state: Search and filter inputs

        Returns:
            The fetched products, or None if the request failed
        """
        self._token += 1
        token = self._token
        previous_status, previous_error = self._status, self._error
        self._filter = filter_state
        self._status = LoadStatus.LOADING
        self._error = None

        try:
            products = await self.client.list_products(filter_state)
        except FetchError as e:
            if token != self._token:
                logger.debug(f"Ignoring failure of superseded load #{token}: {e}")
                return None
            logger.warning(f"Product load #{token} failed: {e}")
            self._status = LoadStatus.ERROR
            self._error = e.message
            return None
        except BaseException:
            if token == self._token:
                self._status = self._settled_status(previous_status)
                self._error = previous_error if self._status == LoadStatus.ERROR else None
                logger.warning(f"Product load #{token} interrupted", exc_info=True)
            raise

        if token != self._token:
            logger.debug(f"Discarding stale response for load #{token} (latest is #{self._token})")
            return products

        self._products = products
        self._status = LoadStatus.READY
        logger.info(f"Load #{token} ready with {len(products)} products")
        return products

    def _settled_status(self, previous_status: LoadStatus) -> LoadStatus:
        """Status to fall back to when the latest load ends without a result."""
        if previous_status != LoadStatus.LOADING:
            return previous_status
        return LoadStatus.READY if self._products else LoadStatus.IDLE

    async def seed_demo_data(self) -> bool:
        """
        Populate the backend's demo catalog, then reload with the current filter.

        Failures are logged and otherwise ignored.

        Returns:
            True if the backend accepted the seed request
        """
        try:
            await self.client.seed_products()
        except FetchError as e:
            logger.warning(f"Seeding demo data failed: {e}")
            return False

        await self.load(self._filter)
        return True
