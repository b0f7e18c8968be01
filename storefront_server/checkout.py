"""Checkout: turn the cart into an order and submit it."""

import logging
from typing import Iterable, Optional

from .cart import CartStore
from .errors import CheckoutError
from .models import (
    GUEST_CUSTOMER,
    CartLine,
    CheckoutState,
    Customer,
    OrderConfirmation,
    OrderItem,
    OrderPayload,
)
from .pricing import compute_totals
from .storefront_client import StorefrontClient

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Order placed! We sent a confirmation email."
INTERRUPTED_MESSAGE = "Checkout failed: order submission was interrupted"


def build_payload(lines: Iterable[CartLine], customer: Customer = GUEST_CUSTOMER) -> OrderPayload:
    """Build an order from a snapshot of cart lines."""
    lines = list(lines)
    totals = compute_totals(lines)
    return OrderPayload(
        items=[OrderItem(product_id=line.id, quantity=line.qty) for line in lines],
        customer=customer,
        subtotal=totals.subtotal,
        shipping=totals.shipping,
        total=totals.total,
    )


class CheckoutFlow:
    """
    Submits the cart as a single order.

    State machine: idle -> submitting -> succeeded | failed. A checkout
    request is ignored while the cart is empty or an order is already being
    submitted. Either terminal state goes back to idle on the next checkout,
    so a failed order can be retried.
    """

    def __init__(self, cart: CartStore, client: StorefrontClient) -> None:
        self.cart = cart
        self.client = client
        self._state = CheckoutState.IDLE
        self._message = ""

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def message(self) -> str:
        return self._message

    @property
    def is_submitting(self) -> bool:
        return self._state == CheckoutState.SUBMITTING

    @property
    def can_checkout(self) -> bool:
        return not self.cart.is_empty and not self.is_submitting

    async def checkout(self) -> Optional[OrderConfirmation]:
        """
        Submit the current cart.

        On success the cart is cleared; on failure it is left as it was and
        the message explains why. If the submission is cancelled or fails
        unexpectedly the flow is marked failed, the cart is kept and the
        exception propagates.

        Returns:
            The order confirmation, or None if nothing was submitted or the
            order failed
        """
        if not self.can_checkout:
            logger.debug(
                f"Checkout ignored: empty={self.cart.is_empty}, state={self._state.value}"
            )
            return None

        self._state = CheckoutState.IDLE
        payload = build_payload(self.cart.lines)
        self._state = CheckoutState.SUBMITTING

        try:
            confirmation = await self.client.create_order(payload)
        except CheckoutError as e:
            self._state = CheckoutState.FAILED
            self._message = f"Checkout failed: {e.message}"
            logger.warning(self._message)
            return None
        except BaseException:
            # cancelled or unexpected error: cart is kept and the flow stays retryable
            self._state = CheckoutState.FAILED
            self._message = INTERRUPTED_MESSAGE
            logger.warning(self._message, exc_info=True)
            raise

        self.cart.clear()
        self._state = CheckoutState.SUCCEEDED
        self._message = SUCCESS_MESSAGE
        logger.info("Checkout succeeded, cart cleared")
        return confirmation
