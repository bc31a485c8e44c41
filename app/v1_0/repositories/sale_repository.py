from decimal import Decimal
from typing import Any, Dict, Optional

from app.storage.document_store import WriteOp
from app.utils.clock import from_epoch_ms, to_epoch_ms
from app.v1_0.entities import SaleDTO, SaleItemDTO
from .base_repository import BaseRepository


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else _decimal(value)


class SaleRepository(BaseRepository[SaleDTO]):
    """
    sales/{id} holds the whole sale as flat camelCase fields, items as an
    ordered array of {productId, quantity, price, productName} and createdAt
    as integer epoch milliseconds.
    """

    collection = "sales"

    def to_document(self, entity: SaleDTO) -> Dict[str, Any]:
        return {
            "customerName": entity.customer_name,
            "items": [
                {
                    "productId": it.product_id,
                    "quantity": it.quantity,
                    "price": str(it.price),
                    "productName": it.product_name,
                }
                for it in entity.items
            ],
            "total": str(entity.total),
            "isReservation": entity.is_reservation,
            "isPaid": entity.is_paid,
            "isCollected": entity.is_collected,
            "isPromotion": entity.is_promotion,
            "promotionPrice": None if entity.promotion_price is None else str(entity.promotion_price),
            "createdAt": to_epoch_ms(entity.created_at),
        }

    def from_document(self, doc_id: str, data: Dict[str, Any]) -> SaleDTO:
        items = tuple(
            SaleItemDTO(
                product_id=str(raw["productId"]),
                quantity=int(raw["quantity"]),
                price=_decimal(raw["price"]),
                product_name=raw.get("productName"),
            )
            for raw in data.get("items") or []
        )
        if not items:
            raise ValueError("sale without items")
        return SaleDTO(
            id=doc_id,
            items=items,
            total=_decimal(data["total"]),
            created_at=from_epoch_ms(data["createdAt"]),
            customer_name=data.get("customerName"),
            is_reservation=bool(data.get("isReservation", False)),
            is_paid=bool(data.get("isPaid", False)),
            is_collected=bool(data.get("isCollected", False)),
            is_promotion=bool(data.get("isPromotion", False)),
            promotion_price=_optional_decimal(data.get("promotionPrice")),
        )

    def flags_op(self, sale_id: str, updates: Dict[str, bool]) -> WriteOp:
        fields = {"is_paid": "isPaid", "is_collected": "isCollected"}
        return self.merge_op(sale_id, {fields[k]: v for k, v in updates.items()})
