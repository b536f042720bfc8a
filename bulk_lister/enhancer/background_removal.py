"""
Background Removal
==================
Optional cosmetic pass over product cover images.

The seller ticks which products should get a clean background, then the
runner calls the enhancement service one product at a time (the service
is slow and rate limited). A failed product is logged and skipped; the
batch always runs to the end.

Products that already have an enhanced cover cannot be selected again,
and re-running a batch leaves them untouched.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional, Set

from ..schema.bulk_listing import Product, Progress

logger = logging.getLogger(__name__)


class EnhancementSelection:
    """Which products to enhance, and which already are"""

    def __init__(self):
        self.selected: Set[str] = set()
        self.enhanced: Set[str] = set()

    def is_selected(self, group_id: str) -> bool:
        return group_id in self.selected

    def is_enhanced(self, group_id: str) -> bool:
        return group_id in self.enhanced

    def toggle(self, group_id: str) -> bool:
        """Flip selection. Returns the new state (always False for enhanced products)."""
        if group_id in self.enhanced:
            return False
        if group_id in self.selected:
            self.selected.discard(group_id)
            return False
        self.selected.add(group_id)
        return True

    def select_all(self, products: Iterable[Product]):
        self.selected = {p.group_id for p in products if p.group_id not in self.enhanced}

    def clear(self):
        self.selected = set()

    def mark_enhanced(self, group_id: str):
        self.enhanced.add(group_id)
        self.selected.discard(group_id)

    def forget(self, group_id: str):
        """Drop a product that no longer exists"""
        self.selected.discard(group_id)
        self.enhanced.discard(group_id)


class BackgroundRemover:
    """Drives the enhancement service over a selection"""

    def __init__(self, adapter):
        """
        Args:
            adapter: EnhancementAdapter (anything with remove_background(url, correlation_id))
        """
        self.adapter = adapter

    def enhance_product(self, product: Product, correlation_id: str) -> str:
        """
        Replace one product's cover with its enhanced version.

        Raises:
            ValueError: If the product has no photos
            ServiceError: If the enhancement call fails
        """
        if not product.cover_url:
            raise ValueError(f"Product {product.group_id} has no cover image")
        enhanced_url = self.adapter.remove_background(product.cover_url, correlation_id)
        product.replace_cover(enhanced_url)
        return enhanced_url

    def run(
        self,
        products: List[Product],
        selection: EnhancementSelection,
        on_progress: Optional[Callable[[Progress], None]] = None,
    ) -> List[str]:
        """
        Enhance every selected product, sequentially.

        Returns:
            Group ids that were enhanced in this run
        """
        queue = [
            p for p in products
            if selection.is_selected(p.group_id) and not selection.is_enhanced(p.group_id)
        ]
        total = len(queue)
        done = []
        stamp = int(time.time() * 1000)

        for i, product in enumerate(queue):
            try:
                self.enhance_product(product, f"bulk-{stamp}-{i}")
                selection.mark_enhanced(product.group_id)
                done.append(product.group_id)
            except Exception as e:
                logger.warning("Background removal failed for %s: %s", product.group_id, e)

            if on_progress:
                on_progress(Progress(i + 1, total, "enhancing"))

        logger.info("Background removal complete: %d of %d products", len(done), total)
        return done
