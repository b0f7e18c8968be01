"""MCP Server for the storefront."""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from .config import Settings
from .errors import ProductNotFound
from .models import LoadStatus
from .pricing import format_money
from .storefront import Storefront

logger = logging.getLogger("storefront-mcp-server")

# Initialize server
app = Server("storefront-mcp-server")

# Global state
storefront: Storefront


def format_cart() -> str:
    """Render the cart with its totals."""
    cart = storefront.cart
    if cart.is_empty:
        return "Your cart is empty."

    totals = cart.totals()
    result_lines = [f"Shopping Cart ({cart.item_count} items):\n"]
    for line in cart.lines:
        result_lines.append(
            f"  - {line.title} (ID: {line.id}): Qty {line.qty} • {format_money(line.price)}"
        )
    result_lines.append(f"\nSubtotal: {format_money(totals.subtotal)}")
    result_lines.append(f"Shipping: {format_money(totals.shipping)}")
    result_lines.append(f"Total: {format_money(totals.total)}")
    return "\n".join(result_lines)


def format_products() -> str:
    """Render the loaded product list."""
    catalog = storefront.catalog
    if catalog.status == LoadStatus.LOADING:
        return "Loading products..."

    result_lines = []
    if catalog.status == LoadStatus.ERROR:
        result_lines.append(f"⚠️ Could not load products: {catalog.error}\n")

    products = catalog.products
    if not products:
        result_lines.append("No products found.")
        return "\n".join(result_lines)

    result_lines.append(f"Found {len(products)} product(s):\n")
    for i, product in enumerate(products, 1):
        result_lines.append(f"\n{i}. {product.title} - {format_money(product.price)}")
        result_lines.append(f"   ID: {product.id}")
        tags = [product.category, product.sport]
        if product.brand:
            tags.append(product.brand)
        result_lines.append(f"   {' / '.join(tag for tag in tags if tag)}")
        if product.description:
            result_lines.append(f"   {product.description}")

    return "\n".join(result_lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl("storefront://cart"),
            name="Shopping Cart",
            mimeType="application/json",
            description="Current shopping cart contents and totals",
        ),
        Resource(
            uri=AnyUrl("storefront://products"),
            name="Products",
            mimeType="application/json",
            description="Products loaded for the current filter",
        ),
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str == "storefront://cart":
        cart = storefront.cart
        result = {
            "lines": [line.model_dump(mode="json") for line in cart.lines],
            **cart.totals().model_dump(mode="json"),
        }
        return json.dumps(result, indent=2)

    elif uri_str == "storefront://products":
        catalog = storefront.catalog
        result = {
            "status": catalog.status.value,
            "filter": catalog.filter.model_dump(),
            "products": [product.model_dump(mode="json") for product in catalog.products],
        }
        return json.dumps(result, indent=2)

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="storefront_search_products",
            description="Search products and filter by category and sport. "
                        "Omitted fields keep their current value; pass an empty string to clear one.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search term (e.g., 'running shoes')",
                    },
                    "category": {
                        "type": "string",
                        "description": "Category to filter by (see storefront_list_filters)",
                    },
                    "sport": {
                        "type": "string",
                        "description": "Sport to filter by (see storefront_list_filters)",
                    },
                },
            },
        ),
        Tool(
            name="storefront_list_filters",
            description="List the categories and sports present in the loaded products",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_seed_demo_data",
            description="Populate the shop with demo products and reload the product list",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_add_to_cart",
            description="Add one unit of a product from the loaded product list to the cart",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {
                        "type": "string",
                        "description": "Product ID from search results",
                    },
                },
                "required": ["product_id"],
            },
        ),
        Tool(
            name="storefront_remove_from_cart",
            description="Remove a product from the cart",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {
                        "type": "string",
                        "description": "Product ID to remove",
                    },
                },
                "required": ["product_id"],
            },
        ),
        Tool(
            name="storefront_get_cart",
            description="Get current shopping cart contents with subtotal, shipping and total",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_checkout",
            description="Place an order for everything in the cart",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "storefront_search_products":
            storefront.update_filter(
                query=arguments.get("query"),
                category=arguments.get("category"),
                sport=arguments.get("sport"),
            )
            await storefront.search()
            return [TextContent(type="text", text=format_products())]

        elif name == "storefront_list_filters":
            catalog = storefront.catalog
            result_lines = [
                f"Categories: {', '.join(catalog.categories) or 'none'}",
                f"Sports: {', '.join(catalog.sports) or 'none'}",
            ]
            return [TextContent(type="text", text="\n".join(result_lines))]

        elif name == "storefront_seed_demo_data":
            if await storefront.seed():
                return [
                    TextContent(
                        type="text",
                        text=f"✅ Demo data seeded\n\n{format_products()}",
                    )
                ]
            return [TextContent(type="text", text="Demo data was not seeded.")]

        elif name == "storefront_add_to_cart":
            product_id = arguments.get("product_id")
            if product_id is None or product_id == "":
                return [TextContent(type="text", text="Error: product_id parameter required")]

            try:
                product = storefront.add_to_cart(product_id)
            except ProductNotFound as e:
                return [TextContent(type="text", text=f"❌ {e}")]

            return [
                TextContent(
                    type="text",
                    text=f"✅ Added {product.title} to cart\n\n{format_cart()}",
                )
            ]

        elif name == "storefront_remove_from_cart":
            product_id = arguments.get("product_id")
            if product_id is None or product_id == "":
                return [TextContent(type="text", text="Error: product_id parameter required")]

            storefront.remove_from_cart(product_id)
            return [TextContent(type="text", text=format_cart())]

        elif name == "storefront_get_cart":
            return [TextContent(type="text", text=format_cart())]

        elif name == "storefront_checkout":
            if storefront.cart.is_empty:
                return [TextContent(type="text", text="Your cart is empty. Add products before checking out.")]
            if storefront.checkout_flow.is_submitting:
                return [TextContent(type="text", text="An order is already being submitted.")]

            confirmation = await storefront.checkout()
            prefix = "✅" if confirmation is not None else "❌"
            return [TextContent(type="text", text=f"{prefix} {storefront.message}")]

        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return [
            TextContent(
                type="text",
                text=f"Error: {str(e)}",
            )
        ]


async def main() -> None:
    """Main entry point."""
    global storefront

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    storefront = Storefront.from_settings(settings)
    logger.info(f"Backend URL: {settings.backend_url}")

    # Initial product load, like opening the shop page
    await storefront.start()
    if storefront.catalog.error:
        logger.warning(f"Initial product load failed: {storefront.catalog.error}")

    logger.info("Starting Storefront MCP Server...")

    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await storefront.close()


if __name__ == "__main__":
    asyncio.run(main())
