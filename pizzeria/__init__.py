"""Pizza ordering service: order placement, fulfillment and stock reservation."""

__version__ = "0.1.0"
