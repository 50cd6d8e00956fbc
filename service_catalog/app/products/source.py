"""
Origin source for the product collection.
"""

import asyncio
import random
from typing import Optional

from shared.logging import get_logger
from .models import Product, ProductCollection


class ProductSource:
    """Slow, authoritative producer of the full product collection.

    Stands in for the backing database: every call waits a random delay in
    ``[0, max_delay_seconds)`` and then yields a freshly built collection.
    """

    def __init__(self, max_delay_seconds: float = 5.0, rng: Optional[random.Random] = None):
        self.max_delay_seconds = max_delay_seconds
        self.rng = rng or random.Random()
        self.logger = get_logger("catalog.products.source")

    async def get_all_products(self) -> ProductCollection:
        """Produce the product collection after a variable delay."""
        delay = self.rng.random() * self.max_delay_seconds
        self.logger.debug("Querying origin source", delay_seconds=round(delay, 3))
        await asyncio.sleep(delay)

        return [
            Product(id=1, name="Produto 1"),
            Product(id=2, name="Produto 2"),
            Product(id=3, name="Produto 3"),
            Product(id=4, name="Produto 4"),
        ]
