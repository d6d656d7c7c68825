"""Storefront API access layer."""

from storefront.api import StorefrontAPI

__version__ = "0.1.0"

__all__ = ["StorefrontAPI"]
