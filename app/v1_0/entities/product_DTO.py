from dataclasses import dataclass
from decimal import Decimal
from typing import List

@dataclass(slots=True)
class ProductDTO:
    """Catalog product with its current stock count."""
    id: str
    name: str
    price: Decimal
    stock: int


@dataclass(slots=True)
class StockOverviewDTO:
    products: List[ProductDTO]
    total_stock: int
    can_sell: bool
