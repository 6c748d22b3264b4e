# storefront/purchase.py
from __future__ import annotations

from typing import Optional

from storefront.config import Settings
from storefront.db import connect, exec_one, exec_update
from storefront.errors import NotFound, StockConflict, ValidationError
from storefront.logging_config import get_logger, log_database_operation
from storefront.models import Product, PurchaseResult

logger = get_logger(__name__)

# Conditional on the stock the buyer saw, so two buyers can't both apply N -> N-1.
UPDATE_STOCK_SQL = (
    "UPDATE products SET stock = :new_stock "
    "WHERE id = :product_id AND stock = :expected_stock"
)
CURRENT_STOCK_SQL = "SELECT stock FROM products WHERE id = :product_id"


def check_purchasable(product: Optional[Product]) -> Product:
    """Caller-side gate: something must be selected and it must be in stock."""
    if product is None:
        raise ValidationError("Please select a product to buy.")
    if product.stock <= 0:
        raise ValidationError(f"Sorry, {product.name} is out of stock.")
    return product


def purchase(settings: Settings, product_id: int, expected_current_stock: int) -> PurchaseResult:
    """
    Decrement one unit of stock for product_id.

    Raises NotFound if the id does not exist and StockConflict if the row no
    longer holds expected_current_stock. Read the catalog again afterwards to
    see the new state.
    """
    if expected_current_stock <= 0:
        raise ValidationError(f"Cannot buy product {product_id}: stock is {expected_current_stock}")

    new_stock = expected_current_stock - 1
    with connect(settings) as conn:
        updated = exec_update(
            conn,
            UPDATE_STOCK_SQL,
            {"new_stock": new_stock, "product_id": product_id, "expected_stock": expected_current_stock},
        )
        if updated == 0:
            row = exec_one(conn, CURRENT_STOCK_SQL, {"product_id": product_id})
            log_database_operation(logger, "UPDATE", "products", product_id, success=False)
            if row is None:
                raise NotFound(f"No product with id {product_id}")
            raise StockConflict(product_id, expected_current_stock, int(row["stock"]))

    log_database_operation(logger, "UPDATE", "products", product_id)
    return PurchaseResult(product_id=product_id, previous_stock=expected_current_stock, new_stock=new_stock)
