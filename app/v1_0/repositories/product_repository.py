import re
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from app.storage.document_store import Snapshot, WriteOp
from app.v1_0.entities import ProductDTO
from .base_repository import BaseRepository

_DIGITS = re.compile(r"(\d+)")


def _natural_key(product_id: str) -> list:
    return [int(part) if part.isdigit() else part for part in _DIGITS.split(product_id)]


class ProductRepository(BaseRepository[ProductDTO]):
    """products/{id} -> {name, price, stock}; price persisted as a decimal string."""

    collection = "products"

    def to_document(self, entity: ProductDTO) -> Dict[str, Any]:
        return {
            "name": entity.name,
            "price": str(entity.price),
            "stock": int(entity.stock),
        }

    def from_document(self, doc_id: str, data: Dict[str, Any]) -> ProductDTO:
        price = Decimal(str(data.get("price", 0)))
        if price < 0:
            raise ValueError(f"negative price {price}")
        return ProductDTO(
            id=doc_id,
            name=str(data["name"]),
            price=price,
            stock=max(0, int(data.get("stock", 0))),
        )

    def decode_snapshot(self, snapshot: Snapshot) -> List[ProductDTO]:
        products = super().decode_snapshot(snapshot)
        return sorted(products, key=lambda p: _natural_key(p.id))

    def stock_ops(self, products: Iterable[ProductDTO]) -> List[WriteOp]:
        return [self.merge_op(p.id, {"stock": int(p.stock)}) for p in products]
