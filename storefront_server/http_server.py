"""HTTP server for the storefront."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .config import Settings
from .errors import ProductNotFound
from .models import ProductId
from .pricing import format_money
from .storefront import Storefront

logger = logging.getLogger("storefront-http-server")

# Global state
storefront: Storefront


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global storefront

    # Startup
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    logger.info(f"Starting Storefront HTTP Server (backend: {settings.backend_url})...")
    storefront = Storefront.from_settings(settings)
    await storefront.start()

    yield

    # Shutdown
    logger.info("Shutting down Storefront HTTP Server...")
    await storefront.close()


app = FastAPI(
    title="Storefront MCP Server",
    description="HTTP API for browsing products, managing a cart and checking out",
    version="0.1.0",
    lifespan=lifespan,
)


# Request/Response Models
class SearchRequest(BaseModel):
    query: Optional[str] = None
    category: Optional[str] = None
    sport: Optional[str] = None


class CartItemRequest(BaseModel):
    product_id: ProductId


def catalog_response() -> dict:
    catalog = storefront.catalog
    return {
        "status": catalog.status.value,
        "error": catalog.error,
        "filter": catalog.filter.model_dump(),
        "categories": catalog.categories,
        "sports": catalog.sports,
        "count": len(catalog.products),
        "products": [product.model_dump(mode="json") for product in catalog.products],
    }


def cart_response() -> dict:
    cart = storefront.cart
    totals = cart.totals()
    return {
        "items": [line.model_dump(mode="json") for line in cart.lines],
        "item_count": cart.item_count,
        "subtotal": format_money(totals.subtotal),
        "shipping": format_money(totals.shipping),
        "total": format_money(totals.total),
        "can_checkout": storefront.checkout_flow.can_checkout,
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Storefront MCP Server",
        "version": "0.1.0",
        "description": "HTTP API for browsing products, managing a cart and checking out",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "products": {"list": "GET /products", "search": "POST /products/search", "seed": "POST /products/seed"},
            "cart": {"get": "GET /cart", "add": "POST /cart/add", "remove": "POST /cart/remove"},
            "checkout": "POST /checkout",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "catalog": storefront.catalog.status.value}


# Product endpoints
@app.get("/products")
async def list_products():
    """Products loaded for the current filter."""
    return catalog_response()


@app.post("/products/search")
async def search_products(request: SearchRequest):
    """Update the filter inputs and reload the product list."""
    storefront.update_filter(query=request.query, category=request.category, sport=request.sport)
    await storefront.search()
    return catalog_response()


@app.post("/products/seed")
async def seed_products():
    """Seed demo products and reload."""
    seeded = await storefront.seed()
    return {"seeded": seeded, **catalog_response()}


# Cart endpoints
@app.get("/cart")
async def get_cart():
    """Get current shopping cart."""
    return cart_response()


@app.post("/cart/add")
async def add_to_cart(request: CartItemRequest):
    """Add one unit of a loaded product to the cart."""
    try:
        storefront.add_to_cart(request.product_id)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return cart_response()


@app.post("/cart/remove")
async def remove_from_cart(request: CartItemRequest):
    """Remove a product from the cart."""
    storefront.remove_from_cart(request.product_id)
    return cart_response()


@app.post("/checkout")
async def checkout():
    """Place an order for the cart contents."""
    if not storefront.checkout_flow.can_checkout:
        raise HTTPException(status_code=409, detail="Cart is empty or an order is already being submitted")

    try:
        confirmation = await storefront.checkout()
    except Exception as e:
        logger.error(f"Checkout error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "success": confirmation is not None,
        "state": storefront.checkout_flow.state.value,
        "message": storefront.message,
        "order": confirmation.data if confirmation is not None else None,
        "cart": cart_response(),
    }


def run_http_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the HTTP server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server()
