"""Order and fulfillment services with cursor-based pagination."""

__version__ = "0.1.0"
