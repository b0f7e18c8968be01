"""Tests for the checkout flow."""

import asyncio
from decimal import Decimal

import httpx
import pytest

from storefront_server.cart import CartStore
from storefront_server.checkout import INTERRUPTED_MESSAGE, SUCCESS_MESSAGE, CheckoutFlow, build_payload
from storefront_server.errors import CheckoutError
from storefront_server.models import GUEST_CUSTOMER, CartLine, CheckoutState, OrderConfirmation, Product
from storefront_server.storefront_client import StorefrontClient


def make_product(product_id, price) -> Product:
    return Product(
        id=product_id,
        title=f"Product {product_id}",
        price=Decimal(price),
        category="Footwear",
        sport="Running",
    )


def filled_cart() -> CartStore:
    cart = CartStore()
    cart.add_to_cart(make_product(1, "49.99"))
    cart.add_to_cart(make_product(1, "49.99"))
    cart.add_to_cart(make_product(2, "10.00"))
    return cart


class BlockingOrderService:
    """Order service that holds every submission until released."""

    def __init__(self) -> None:
        self.released = asyncio.Event()
        self.payloads = []

    async def create_order(self, payload):
        self.payloads.append(payload)
        await self.released.wait()
        return OrderConfirmation(data={"id": "ord_1"})


class TestBuildPayload:
    """Order payload is derived from the cart snapshot."""

    def test_payload_items_and_totals(self):
        payload = build_payload(filled_cart().lines)

        assert [(item.product_id, item.quantity) for item in payload.items] == [(1, 2), (2, 1)]
        assert payload.customer == GUEST_CUSTOMER
        assert payload.subtotal == Decimal("109.98")
        assert payload.shipping == Decimal("0")
        assert payload.total == Decimal("109.98")

    def test_payload_serializes_money_as_numbers(self):
        lines = [CartLine(id=5, title="Cap", price=Decimal("12.50"), qty=1)]

        body = build_payload(lines).model_dump(mode="json")

        assert body["subtotal"] == 12.5
        assert body["shipping"] == 9.99
        assert body["total"] == 22.49
        assert body["items"] == [{"product_id": 5, "quantity": 1}]
        assert body["customer"]["postal_code"] == "00000"


class TestCheckoutSuccess:
    """Successful orders clear the cart."""

    @pytest.mark.asyncio
    async def test_success_clears_cart_and_sets_message(self, client, backend):
        cart = filled_cart()
        flow = CheckoutFlow(cart, client)

        confirmation = await flow.checkout()

        assert confirmation is not None
        assert confirmation.data["id"] == "ord_1"
        assert cart.is_empty
        assert flow.state == CheckoutState.SUCCEEDED
        assert flow.message == SUCCESS_MESSAGE

    @pytest.mark.asyncio
    async def test_submitted_body_matches_cart(self, client, backend):
        flow = CheckoutFlow(filled_cart(), client)

        await flow.checkout()

        assert len(backend.orders) == 1
        order = backend.orders[0]
        assert order["items"] == [
            {"product_id": 1, "quantity": 2},
            {"product_id": 2, "quantity": 1},
        ]
        assert order["subtotal"] == 109.98
        assert order["shipping"] == 0
        assert order["total"] == 109.98
        assert order["customer"] == {
            "name": "Guest",
            "email": "guest@example.com",
            "address": "123 Street",
            "city": "City",
            "country": "Country",
            "postal_code": "00000",
        }

    @pytest.mark.asyncio
    async def test_success_with_empty_body(self, client, backend):
        backend.order_response = httpx.Response(204)
        cart = filled_cart()
        flow = CheckoutFlow(cart, client)

        confirmation = await flow.checkout()

        assert confirmation == OrderConfirmation(data={})
        assert cart.is_empty


class TestCheckoutFailure:
    """Failed orders keep the cart for a retry."""

    @pytest.mark.asyncio
    async def test_failure_uses_detail_and_keeps_cart(self, client, backend):
        backend.order_response = httpx.Response(400, json={"detail": "out of stock"})
        cart = filled_cart()
        before = cart.lines
        flow = CheckoutFlow(cart, client)

        confirmation = await flow.checkout()

        assert confirmation is None
        assert cart.lines == before
        assert flow.state == CheckoutState.FAILED
        assert flow.message == "Checkout failed: out of stock"

    @pytest.mark.asyncio
    async def test_failure_without_detail_uses_status_description(self, client, backend):
        backend.order_response = httpx.Response(500, json={"error": "boom"})
        flow = CheckoutFlow(filled_cart(), client)

        await flow.checkout()

        assert flow.message == "Checkout failed: Internal Server Error"

    @pytest.mark.asyncio
    async def test_unparsable_error_body_falls_back_to_status(self, client, backend):
        backend.order_response = httpx.Response(502, content=b"<html>Bad gateway</html>")
        flow = CheckoutFlow(filled_cart(), client)

        await flow.checkout()

        assert flow.state == CheckoutState.FAILED
        assert flow.message == "Checkout failed: Bad Gateway"

    @pytest.mark.asyncio
    async def test_non_string_detail_is_ignored(self, client, backend):
        backend.order_response = httpx.Response(
            400, json={"detail": [{"loc": ["body"], "msg": "field required"}]}
        )
        flow = CheckoutFlow(filled_cart(), client)

        await flow.checkout()

        assert flow.message == "Checkout failed: Bad Request"

    @pytest.mark.asyncio
    async def test_network_error_keeps_cart(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = StorefrontClient(base_url="http://shop.test", transport=httpx.MockTransport(handler))
        cart = filled_cart()
        flow = CheckoutFlow(cart, client)

        await flow.checkout()

        assert len(cart) == 2
        assert flow.state == CheckoutState.FAILED
        assert flow.message == "Checkout failed: connection refused"

    @pytest.mark.asyncio
    async def test_failed_checkout_can_be_retried(self, client, backend):
        backend.order_response = httpx.Response(409, json={"detail": "out of stock"})
        cart = filled_cart()
        flow = CheckoutFlow(cart, client)
        await flow.checkout()
        assert flow.state == CheckoutState.FAILED

        backend.order_response = None
        confirmation = await flow.checkout()

        assert confirmation is not None
        assert len(backend.orders) == 2
        assert flow.state == CheckoutState.SUCCEEDED
        assert cart.is_empty


class FlakyOrderService:
    """Order service whose first submission blows up with an unexpected error."""

    def __init__(self) -> None:
        self.payloads = []

    async def create_order(self, payload):
        self.payloads.append(payload)
        if len(self.payloads) == 1:
            raise RuntimeError("connection pool exhausted")
        return OrderConfirmation(data={"id": f"ord_{len(self.payloads)}"})


class TestCheckoutInterrupted:
    """A submission that ends without an order service answer stays retryable."""

    @pytest.mark.asyncio
    async def test_cancelled_submission_keeps_cart_and_allows_retry(self):
        service = BlockingOrderService()
        cart = filled_cart()
        before = cart.lines
        flow = CheckoutFlow(cart, service)

        task = asyncio.create_task(flow.checkout())
        await asyncio.sleep(0)
        assert flow.state == CheckoutState.SUBMITTING

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert flow.state == CheckoutState.FAILED
        assert flow.message == INTERRUPTED_MESSAGE
        assert cart.lines == before
        assert flow.can_checkout is True

        service.released.set()
        confirmation = await flow.checkout()

        assert confirmation is not None
        assert len(service.payloads) == 2
        assert flow.state == CheckoutState.SUCCEEDED
        assert cart.is_empty

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_cart_and_allows_retry(self):
        service = FlakyOrderService()
        cart = filled_cart()
        before = cart.lines
        flow = CheckoutFlow(cart, service)

        with pytest.raises(RuntimeError):
            await flow.checkout()

        assert flow.state == CheckoutState.FAILED
        assert cart.lines == before

        confirmation = await flow.checkout()

        assert confirmation == OrderConfirmation(data={"id": "ord_2"})
        assert flow.state == CheckoutState.SUCCEEDED
        assert flow.message == SUCCESS_MESSAGE
        assert cart.is_empty


class TestCheckoutInert:
    """Checkout does nothing for an empty cart or while submitting."""

    @pytest.mark.asyncio
    async def test_empty_cart_submits_nothing(self, client, backend):
        flow = CheckoutFlow(CartStore(), client)

        assert flow.can_checkout is False
        assert await flow.checkout() is None

        assert backend.requests_to("/api/orders") == []
        assert flow.state == CheckoutState.IDLE
        assert flow.message == ""

    @pytest.mark.asyncio
    async def test_repeated_checkout_while_submitting_is_ignored(self):
        service = BlockingOrderService()
        cart = filled_cart()
        flow = CheckoutFlow(cart, service)

        first = asyncio.create_task(flow.checkout())
        await asyncio.sleep(0)
        assert flow.state == CheckoutState.SUBMITTING
        assert flow.can_checkout is False

        assert await flow.checkout() is None
        assert len(service.payloads) == 1

        service.released.set()
        assert await first is not None
        assert flow.state == CheckoutState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_cart_changes_during_submission_do_not_alter_payload(self):
        service = BlockingOrderService()
        cart = filled_cart()
        flow = CheckoutFlow(cart, service)

        task = asyncio.create_task(flow.checkout())
        await asyncio.sleep(0)
        cart.add_to_cart(make_product(3, "500.00"))
        service.released.set()
        await task

        payload = service.payloads[0]
        assert [item.product_id for item in payload.items] == [1, 2]
        assert payload.total == Decimal("109.98")


def test_checkout_error_carries_status_and_detail():
    error = CheckoutError("out of stock", status_code=400, detail="out of stock")

    assert error.message == "out of stock"
    assert error.status_code == 400
    assert str(error) == "out of stock"
