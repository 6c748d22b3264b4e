# storefront/catalog.py
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from storefront.config import Settings
from storefront.db import connect, exec_all
from storefront.errors import BackendError
from storefront.logging_config import get_logger, log_database_operation
from storefront.models import Product

logger = get_logger(__name__)

LIST_PRODUCTS_SQL = "SELECT id, name, price, stock FROM products"


def _row_to_product(row: Dict[str, Any]) -> Product:
    return Product(
        id=row["id"],
        name=row["name"],
        price=row["price"],
        stock=row["stock"],
    )


def list_products(settings: Settings) -> List[Product]:
    """
    Every product with its current stock, in whatever order the backend
    returns them. Each call queries again; failures raise BackendError.
    """
    try:
        with connect(settings) as conn:
            rows = exec_all(conn, LIST_PRODUCTS_SQL)
        products = [_row_to_product(r) for r in rows]
    except PydanticValidationError as e:
        log_database_operation(logger, "SELECT", "products", success=False)
        raise BackendError(f"Malformed product row: {e}") from e
    except BackendError:
        log_database_operation(logger, "SELECT", "products", success=False)
        raise

    log_database_operation(logger, "SELECT", "products")
    return products
