"""Base generator class for synthetic data generators."""

from __future__ import annotations

import random
from abc import ABC
from datetime import datetime, timedelta

from faker import Faker


class BaseGenerator(ABC):
    """Base class for all data generators.

    Provides common initialization: Faker instance creation and
    seed-based reproducibility.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_US``).
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)

    @staticmethod
    def instant_before(now: datetime, min_days: int, max_days: int) -> datetime:
        """Random instant between ``min_days`` and ``max_days`` days before ``now``."""
        return now - timedelta(days=random.randint(min_days, max_days), seconds=random.randint(0, 86399))
