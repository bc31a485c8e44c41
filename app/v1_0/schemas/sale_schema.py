from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

# Business rules (non-empty items, positive quantities, reservation name,
# non-negative promotion price) are enforced by SaleJournal, not here.

class SaleItemInput(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int
    price: Optional[Decimal] = Field(
        default=None,
        description="Ignored; the current product price is captured at sale time",
    )

class SaleDraft(BaseModel):
    customer_name: Optional[str] = Field(default=None, max_length=120)
    items: List[SaleItemInput] = Field(default_factory=list)
    is_reservation: bool = False
    is_paid: bool = False
    is_promotion: bool = False
    promotion_price: Optional[Decimal] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "customer_name": "Maria",
                "items": [{"product_id": "1", "quantity": 2}],
                "is_reservation": True,
                "is_paid": False,
                "is_promotion": False,
            }
        }
    }

class SalePatch(BaseModel):
    """Flag patch. Unknown fields are kept so the journal can reject them explicitly."""
    model_config = ConfigDict(extra="allow")

    is_paid: Optional[bool] = None
    is_collected: Optional[bool] = None
