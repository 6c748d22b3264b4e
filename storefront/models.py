# storefront/models.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, conint, field_validator


NonNegativeInt = conint(ge=0)  # type: ignore[valid-type]


# ---------- Products ----------
class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price: Decimal = Field(..., ge=0, description="Unit price (Rs.)")
    stock: NonNegativeInt  # type: ignore[valid-type]

    @field_validator("price", mode="before")
    @classmethod
    def _price_from_float(cls, v: Any) -> Any:
        # sqlite hands back REAL as float; keep the printed value, not the binary one
        if isinstance(v, float):
            return Decimal(str(v))
        return v


Snapshot = Tuple[Product, ...]


# ---------- Purchase ----------
class PurchaseResult(BaseModel):
    product_id: int
    previous_stock: int
    new_stock: NonNegativeInt  # type: ignore[valid-type]
