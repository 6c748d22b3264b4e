# storefront/service.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from storefront.catalog import list_products
from storefront.config import Settings
from storefront.errors import BackendError
from storefront.logging_config import get_logger
from storefront.models import Product, PurchaseResult, Snapshot
from storefront.purchase import check_purchasable, purchase

logger = get_logger(__name__)

CatalogReader = Callable[[Settings], List[Product]]
PurchaseProcessor = Callable[[Settings, int, int], PurchaseResult]
Confirm = Callable[[Product], bool]


@dataclass
class StoreService:
    """
    Application layer between a front-end and the database.

    Holds the last good catalog snapshot. A failed read leaves it as it was;
    a successful read replaces it wholesale.
    """
    settings: Settings
    catalog: CatalogReader = list_products
    processor: PurchaseProcessor = purchase
    snapshot: Snapshot = field(default_factory=tuple)

    def refresh(self) -> Snapshot:
        try:
            products = self.catalog(self.settings)
        except BackendError as e:
            logger.info("Error retrieving products: %s", e)
            raise
        self.snapshot = tuple(products)
        return self.snapshot

    def find(self, product_id: int) -> Optional[Product]:
        for p in self.snapshot:
            if p.id == product_id:
                return p
        return None

    def buy(self, product_id: Optional[int], confirm: Confirm) -> Optional[PurchaseResult]:
        """
        Validate the selection, ask for confirmation, then decrement.
        Returns None if the user declined.
        """
        product = check_purchasable(self.find(product_id) if product_id is not None else None)

        if not confirm(product):
            logger.info("Purchase of product %s cancelled by user", product.id)
            return None

        try:
            result = self.processor(self.settings, product.id, product.stock)
        except BackendError:
            # a conflict or missing row means the snapshot is stale
            self._refresh_quietly()
            raise
        logger.info("Purchased product %s: stock %s -> %s", product.id, result.previous_stock, result.new_stock)

        # purchase already committed; a failed refresh keeps the old snapshot
        self._refresh_quietly()
        return result

    def _refresh_quietly(self) -> None:
        try:
            self.refresh()
        except BackendError as e:
            logger.warning("Catalog refresh failed, keeping previous snapshot: %s", e)
