from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from .sale_itemDTO import SaleItemDTO, SaleItemViewDTO

@dataclass(slots=True)
class SaleDTO:
    id: str
    items: Tuple[SaleItemDTO, ...]
    total: Decimal
    created_at: datetime
    customer_name: Optional[str] = None
    is_reservation: bool = False
    is_paid: bool = False
    is_collected: bool = False
    is_promotion: bool = False
    promotion_price: Optional[Decimal] = None

    @property
    def charged_amount(self) -> Decimal:
        """Amount shown/charged: a non-zero promotion price when one applies, else the item total."""
        if self.is_promotion and self.promotion_price:
            return self.promotion_price
        return self.total

@dataclass(slots=True)
class SaleViewDTO:
    """Sale as shown to the presentation layer, with product names resolved."""
    id: str
    customer_name: Optional[str]
    items: List[SaleItemViewDTO]
    total: Decimal
    charged_amount: Decimal
    is_reservation: bool
    is_paid: bool
    is_collected: bool
    is_promotion: bool
    promotion_price: Optional[Decimal]
    created_at: datetime
    display_amount: str
    display_date: str
