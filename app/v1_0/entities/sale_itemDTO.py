from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

@dataclass(frozen=True, slots=True)
class SaleItemDTO:
    """Line of a sale; price is the product price captured when the sale was made."""
    product_id: str
    quantity: int
    price: Decimal
    product_name: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

@dataclass(slots=True)
class SaleItemViewDTO:
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    subtotal: Decimal
