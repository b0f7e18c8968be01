"""Storefront MCP Server: product catalog, cart and checkout for a shop backend."""

__version__ = "0.1.0"
