"""Delivery pricing."""

from .engine import PricingEngine, quote

__all__ = ["PricingEngine", "quote"]
