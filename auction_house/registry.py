"""
Shared product registry.

One mutex and one condition guard the catalog. Inserts never block and wake
every waiting remover; a remove blocks until its product is present, so a
removal may be dispatched before the matching insert becomes visible.

Catalog mutations are usually dispatched as detached worker threads
(``dispatch_add``, ``dispatch_remove``, ``dispatch_read``). Nothing joins a
dispatched remove: a caller that has just seen a product sold may still find
it in a snapshot for a short while.
"""

import threading
from typing import Optional

import structlog

from .models.products import Product

logger = structlog.get_logger()


class ProductRegistry:
    """
    Thread-safe catalog of products keyed by id.

    Example:
        registry = ProductRegistry()
        registry.dispatch_remove(vase)   # waits for the insert below
        registry.add(vase)
    """

    def __init__(self):
        self._products: list[Product] = []
        self._lock = threading.Lock()
        self._was_added = threading.Condition(self._lock)
        # Bumped on reset/close so blocked removers abandon their attempt
        self._generation = 0
        self._closed = False

    def add(self, product: Product) -> bool:
        """
        Insert a product unless its id is already present.

        Returns:
            True if inserted, False if it was already there
        """
        with self._was_added:
            if self._find(product.id) is not None:
                logger.debug("registry.add_skipped", product_id=product.id)
                return False
            self._products.append(product)
            self._was_added.notify_all()

        logger.debug("registry.product_added", product_id=product.id, name=product.name)
        return True

    def remove(self, product: Product) -> bool:
        """
        Remove a product, blocking until it is present.

        There is no timeout. A wait abandoned by ``close`` or ``reset`` leaves
        the catalog untouched.

        Returns:
            True if removed, False if the wait was cancelled
        """
        with self._was_added:
            generation = self._generation
            while self._find(product.id) is None:
                if self._closed or generation != self._generation:
                    logger.info("registry.remove_cancelled", product_id=product.id)
                    return False
                self._was_added.wait()
            self._products = [p for p in self._products if p.id != product.id]

        logger.debug("registry.product_removed", product_id=product.id)
        return True

    def snapshot(self) -> list[Product]:
        """Consistent, deduplicated copy of the catalog."""
        with self._lock:
            seen: dict[int, Product] = {}
            for product in self._products:
                seen.setdefault(product.id, product)
            return list(seen.values())

    def get(self, product_id: int) -> Optional[Product]:
        """Look up a product by id."""
        with self._lock:
            return self._find(product_id)

    def __contains__(self, product: Product) -> bool:
        return self.get(product.id) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def reset(self) -> None:
        """Empty the catalog and release any blocked removers."""
        with self._was_added:
            self._products = []
            self._generation += 1
            self._closed = False
            self._was_added.notify_all()
        logger.info("registry.reset")

    def close(self) -> None:
        """Cancel every pending and future blocked remove."""
        with self._was_added:
            self._closed = True
            self._was_added.notify_all()

    # -------------------------------------------------------------------------
    # Detached worker tasks
    # -------------------------------------------------------------------------

    def dispatch_add(self, product: Product) -> threading.Thread:
        """Insert a product on a background thread."""
        return self._spawn(self.add, product, name=f"add-{product.id}")

    def dispatch_remove(self, product: Product) -> threading.Thread:
        """Remove a product on a background thread; nobody needs to join it."""
        return self._spawn(self.remove, product, name=f"remove-{product.id}")

    def dispatch_read(self) -> threading.Thread:
        """Read the whole catalog on a background thread."""
        return self._spawn(self._read_all, name="read-catalog")

    def _read_all(self) -> None:
        products = self.snapshot()
        logger.debug(
            "registry.catalog_read",
            product_count=len(products),
            product_ids=[p.id for p in products],
        )

    @staticmethod
    def _spawn(target, *args, name: str) -> threading.Thread:
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        thread.start()
        return thread

    def _find(self, product_id: int) -> Optional[Product]:
        # Caller holds the lock
        for product in self._products:
            if product.id == product_id:
                return product
        return None
