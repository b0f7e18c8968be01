"""Shared fixtures: an in-memory shop backend behind httpx.MockTransport."""

import json
from typing import Optional

import httpx
import pytest

from storefront_server.storefront import Storefront
from storefront_server.storefront_client import StorefrontClient

SAMPLE_PRODUCTS = [
    {
        "id": 1,
        "title": "Trail Runner Shoe",
        "price": 49.99,
        "description": "Grippy sole for muddy trails",
        "image": "https://img.example.com/trail.jpg",
        "category": "Footwear",
        "sport": "Running",
        "brand": "Peak",
    },
    {
        "id": 2,
        "title": "Yoga Mat",
        "price": 10.00,
        "description": "Non-slip mat",
        "image": None,
        "category": "Equipment",
        "sport": "Yoga",
    },
    {
        "id": 3,
        "title": "Running Socks",
        "price": 7.50,
        "description": "Pack of three",
        "category": "Apparel",
        "sport": "Running",
        "brand": None,
    },
    {
        "id": 4,
        "title": "Yoga Block",
        "price": 12.25,
        "description": "Cork block",
        "category": "Equipment",
        "sport": "Yoga",
    },
]


class FakeBackend:
    """Product and order services answering from memory."""

    def __init__(self, products: Optional[list[dict]] = None) -> None:
        self.products = list(products if products is not None else SAMPLE_PRODUCTS)
        self.seed_products: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.orders: list[dict] = []
        self.products_response: Optional[httpx.Response] = None
        self.seed_response: Optional[httpx.Response] = None
        self.order_response: Optional[httpx.Response] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and path == "/api/products":
            if self.products_response is not None:
                return self.products_response
            params = request.url.params
            query = params.get("q", "").lower()
            items = [
                product
                for product in self.products
                if (not query or query in product["title"].lower())
                and (not params.get("category") or product["category"] == params["category"])
                and (not params.get("sport") or product["sport"] == params["sport"])
            ]
            return httpx.Response(200, json=items)

        if request.method == "POST" and path == "/api/products/seed":
            if self.seed_response is not None:
                return self.seed_response
            self.products.extend(self.seed_products)
            return httpx.Response(200, json={"inserted": len(self.seed_products)})

        if request.method == "POST" and path == "/api/orders":
            self.orders.append(json.loads(request.content))
            if self.order_response is not None:
                return self.order_response
            return httpx.Response(201, json={"id": f"ord_{len(self.orders)}", "status": "confirmed"})

        return httpx.Response(404, json={"detail": "Not Found"})

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend: FakeBackend) -> StorefrontClient:
    return StorefrontClient(
        base_url="http://shop.test",
        transport=httpx.MockTransport(backend.handler),
    )


@pytest.fixture
def storefront(client: StorefrontClient) -> Storefront:
    return Storefront(client)
