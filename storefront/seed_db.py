# storefront/seed_db.py
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Tuple

from storefront.config import Settings
from storefront.db import connect, exec_update, init_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

ProductRow = Tuple[int, str, Decimal, int]

# (id, name, price in Rs., stock)
SAMPLE_PRODUCTS: Tuple[ProductRow, ...] = (
    (1, "USB-C Cable (1m)", Decimal("299.00"), 25),
    (2, "Wireless Mouse", Decimal("749.00"), 12),
    (3, "Mechanical Keyboard", Decimal("3499.00"), 6),
    (4, "Laptop Stand", Decimal("1299.00"), 10),
    (5, "Noise-Cancelling Earbuds", Decimal("4999.00"), 4),
    (6, "HDMI Adapter", Decimal("549.00"), 0),
    (7, "Notebook (pack of 3)", Decimal("199.00"), 30),
    (8, "Desk Lamp", Decimal("999.00"), 8),
)


def seed(settings: Settings, products: Iterable[ProductRow] = SAMPLE_PRODUCTS) -> int:
    """Replace the contents of the products table. Returns rows inserted."""
    init_db(settings)
    count = 0
    with connect(settings) as conn:
        exec_update(conn, "DELETE FROM products")
        for product_id, name, price, stock in products:
            exec_update(
                conn,
                "INSERT INTO products(id, name, price, stock) VALUES (:id, :name, :price, :stock)",
                # sqlite3 has no Decimal adapter
                {"id": product_id, "name": name, "price": str(price), "stock": stock},
            )
            count += 1
    logger.info("Seeded %d products at %s", count, settings.db_url)
    return count
