from .product_schema import StockUpdate
from .sale_schema import (
    SaleItemInput,
    SaleDraft,
    SalePatch,
    )

__all__ = [
    "StockUpdate",
    "SaleItemInput", "SaleDraft", "SalePatch",
]
