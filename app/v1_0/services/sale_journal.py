import uuid
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from app.core.errors import NotFound, ValidationError
from app.core.logger import logger
from app.utils.clock import utcnow
from app.v1_0.entities import SaleDTO, SaleItemDTO
from app.v1_0.schemas import SaleDraft, SalePatch
from .inventory_ledger import InventoryLedger


def new_sale_id() -> str:
    return uuid.uuid4().hex


class SaleJournal:
    """
    Ordered (most-recent-first) log of sales and reservations.

    Creating a sale reserves its items in the ledger and deleting it releases
    them. All validation happens before either store is touched, so each
    operation either fully applies or leaves both unchanged.
    """

    MUTABLE_FIELDS = frozenset({"is_paid", "is_collected"})

    def __init__(
        self,
        ledger: InventoryLedger,
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_sale_id,
    ) -> None:
        self.ledger = ledger
        self._clock = clock
        self._id_factory = id_factory
        self._sales: List[SaleDTO] = []

    def __len__(self) -> int:
        return len(self._sales)

    def __contains__(self, sale_id: object) -> bool:
        return any(s.id == sale_id for s in self._sales)

    def _index_of(self, sale_id: str) -> int:
        for idx, sale in enumerate(self._sales):
            if sale.id == sale_id:
                return idx
        raise NotFound("sale", sale_id)

    def _build_items(self, draft: SaleDraft) -> Tuple[SaleItemDTO, ...]:
        """
        Validate the draft lines and snapshot the current product prices.

        Args:
            draft: Sale draft coming from the presentation layer.

        Returns:
            Tuple of SaleItemDTO with price and name captured from the ledger.

        Raises:
            ValidationError: If there are no items or a quantity is not positive.
            UnknownProduct: If an item references a product not in the ledger.
        """
        if not draft.items:
            raise ValidationError("A sale needs at least one item")

        items: List[SaleItemDTO] = []
        for idx, raw in enumerate(draft.items, start=1):
            if raw.quantity <= 0:
                raise ValidationError(f"Item #{idx}: quantity must be > 0")
            product = self.ledger.require(raw.product_id)
            if raw.price is not None and raw.price != product.price:
                logger.debug(
                    "[SaleJournal] item #%s price %s replaced by current price %s",
                    idx,
                    raw.price,
                    product.price,
                )
            items.append(
                SaleItemDTO(
                    product_id=product.id,
                    quantity=raw.quantity,
                    price=product.price,
                    product_name=product.name,
                )
            )
        return tuple(items)

    @staticmethod
    def _customer_name(draft: SaleDraft) -> Optional[str]:
        if not draft.is_reservation:
            return None
        name = (draft.customer_name or "").strip()
        if not name:
            raise ValidationError("A reservation needs a customer name")
        return name

    @staticmethod
    def _promotion_price(draft: SaleDraft) -> Optional[Decimal]:
        if not draft.is_promotion or draft.promotion_price is None:
            return None
        try:
            price = Decimal(draft.promotion_price)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Promotion price is not a number")
        if not price.is_finite() or price < 0:
            raise ValidationError("Promotion price must be >= 0")
        return price

    def create_sale(self, draft: SaleDraft) -> SaleDTO:
        """
        Record a sale and take its items out of stock.

        Args:
            draft: Customer, items and flags of the new sale.

        Returns:
            Copy of the created SaleDTO.

        Raises:
            ValidationError: On an invalid draft.
            UnknownProduct: If an item references a product not in the ledger.
            InsufficientStock: If the ledger rejects an oversell.
        """
        items = self._build_items(draft)
        customer_name = self._customer_name(draft)
        promotion_price = self._promotion_price(draft)
        total = sum((it.subtotal for it in items), Decimal("0"))

        self.ledger.reserve(items)

        sale = SaleDTO(
            id=self._id_factory(),
            items=items,
            total=total,
            created_at=self._clock(),
            customer_name=customer_name,
            is_reservation=draft.is_reservation,
            is_paid=draft.is_paid,
            is_collected=False,
            is_promotion=draft.is_promotion,
            promotion_price=promotion_price,
        )
        self._sales.insert(0, sale)
        logger.info(
            "[SaleJournal] sale created id=%s reservation=%s items=%s total=%s",
            sale.id,
            sale.is_reservation,
            len(items),
            total,
        )
        return replace(sale)

    def update_sale(self, sale_id: str, updates: Union[SalePatch, Mapping[str, Any]]) -> SaleDTO:
        """
        Partially update the mutable flags (is_paid, is_collected) of a sale.

        Raises:
            NotFound: If the sale does not exist.
            ValidationError: If the patch touches any other field or a flag is not a bool.
        """
        data: Dict[str, Any]
        if isinstance(updates, BaseModel):
            data = {**updates.model_dump(exclude_unset=True), **(updates.model_extra or {})}
        else:
            data = dict(updates)

        idx = self._index_of(sale_id)
        forbidden = sorted(k for k in data if k not in self.MUTABLE_FIELDS)
        if forbidden:
            raise ValidationError(f"Fields cannot be updated: {', '.join(forbidden)}")
        for field, value in data.items():
            if not isinstance(value, bool):
                raise ValidationError(f"{field} must be a boolean")

        sale = self._sales[idx]
        for field, value in data.items():
            setattr(sale, field, value)
        logger.info("[SaleJournal] sale updated id=%s fields=%s", sale_id, data)
        return replace(sale)

    def mark_collected(self, sale_id: str) -> SaleDTO:
        sale = self._sales[self._index_of(sale_id)]
        if sale.is_collected:
            return replace(sale)
        return self.update_sale(sale_id, {"is_collected": True})

    def delete_sale(self, sale_id: str) -> SaleDTO:
        """
        Remove a sale and put its items back in stock.

        Returns:
            The removed sale.

        Raises:
            NotFound: If the sale does not exist; nothing is changed.
        """
        idx = self._index_of(sale_id)
        sale = self._sales[idx]
        self.ledger.release(sale.items)
        del self._sales[idx]
        logger.info("[SaleJournal] sale deleted id=%s", sale_id)
        return sale

    def get_sale(self, sale_id: str) -> SaleDTO:
        return replace(self._sales[self._index_of(sale_id)])

    def list_sales(self) -> List[SaleDTO]:
        return [replace(s) for s in self._sales]

    def reservations(self) -> List[SaleDTO]:
        return [replace(s) for s in self._sales if s.is_reservation]

    def direct_sales(self) -> List[SaleDTO]:
        return [replace(s) for s in self._sales if not s.is_reservation]

    def replace_all(self, sales: Iterable[SaleDTO]) -> None:
        """Snapshot replace, re-sorted most-recent-first."""
        self._sales = sorted((replace(s) for s in sales), key=lambda s: s.created_at, reverse=True)
