"""In-memory shopping cart."""

import logging
from decimal import Decimal
from typing import Iterator, Optional

from .models import CartLine, Product, ProductId
from .pricing import OrderTotals, compute_totals, subtotal

logger = logging.getLogger(__name__)


class CartStore:
    """
    Cart lines keyed by product id, kept in the order they were first added.

    There is never more than one line per product id and quantities only grow
    by one per add; removing a product drops its whole line.
    """

    def __init__(self) -> None:
        self._lines: dict[ProductId, CartLine] = {}

    def add_to_cart(self, product: Product) -> None:
        """Add one unit of a product, keeping the price of the first add."""
        line = self._lines.get(product.id)
        if line is not None:
            line.qty += 1
            logger.debug(f"Incremented {product.id} to qty {line.qty}")
            return

        self._lines[product.id] = CartLine(
            id=product.id,
            title=product.title,
            price=product.price,
            qty=1,
        )
        logger.debug(f"Added {product.id} to cart")

    def remove_from_cart(self, product_id: ProductId) -> None:
        """Remove a product's line. Unknown ids are ignored."""
        if self._lines.pop(product_id, None) is not None:
            logger.debug(f"Removed {product_id} from cart")

    def clear(self) -> None:
        self._lines.clear()

    def get(self, product_id: ProductId) -> Optional[CartLine]:
        line = self._lines.get(product_id)
        return line.model_copy() if line is not None else None

    @property
    def lines(self) -> tuple[CartLine, ...]:
        """Snapshot of the cart lines in insertion order."""
        return tuple(line.model_copy() for line in self._lines.values())

    @property
    def item_count(self) -> int:
        return sum(line.qty for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def subtotal(self) -> Decimal:
        return subtotal(self._lines.values())

    def totals(self) -> OrderTotals:
        return compute_totals(self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines
