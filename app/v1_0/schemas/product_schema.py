from pydantic import BaseModel, Field

class StockUpdate(BaseModel):
    """Explicit stock entry; negative values are stored as 0."""
    quantity: int = Field(..., description="New stock count for the product")

    model_config = {
        "json_schema_extra": {
            "example": {"quantity": 12}
        }
    }
