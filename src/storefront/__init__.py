"""Storefront pricing, cart and coupon service."""

__version__ = "0.1.0"
