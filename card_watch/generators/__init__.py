"""Synthetic data generators for demos and tests."""

from card_watch.generators.base import BaseGenerator
from card_watch.generators.clover import CloverCustomerGenerator, CustomerProfile

__all__ = ["BaseGenerator", "CloverCustomerGenerator", "CustomerProfile"]
