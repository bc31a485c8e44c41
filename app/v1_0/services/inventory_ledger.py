from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.core.errors import InsufficientStock, UnknownProduct, ValidationError
from app.core.logger import logger
from app.core.settings import OversellPolicy
from app.v1_0.entities import ProductDTO

StockLine = Tuple[str, int]


def _as_line(item: Any) -> StockLine:
    if isinstance(item, tuple):
        product_id, quantity = item
    else:
        product_id, quantity = item.product_id, item.quantity
    return str(product_id), int(quantity)


def _aggregate(items: Iterable[Any]) -> List[StockLine]:
    """Sum quantities per product, keeping first-seen order."""
    totals: Dict[str, int] = {}
    for item in items:
        product_id, quantity = _as_line(item)
        totals[product_id] = totals.get(product_id, 0) + quantity
    return list(totals.items())


class InventoryLedger:
    """
    Local authoritative stock count per product.

    Stock never goes below zero. How an oversell is handled depends on
    ``oversell_policy``: "clamp" floors the stock at zero, "reject" raises
    InsufficientStock before touching any product.
    """

    def __init__(
        self,
        oversell_policy: OversellPolicy = "clamp",
        products: Iterable[ProductDTO] = (),
    ) -> None:
        if oversell_policy not in ("clamp", "reject"):
            raise ValueError(f"Unsupported oversell policy: {oversell_policy}")
        self.oversell_policy = oversell_policy
        self._products: Dict[str, ProductDTO] = {}
        self.replace_all(products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def __len__(self) -> int:
        return len(self._products)

    def require(self, product_id: str) -> ProductDTO:
        product = self._products.get(product_id)
        if product is None:
            raise UnknownProduct(product_id)
        return product

    def get_product(self, product_id: str) -> Optional[ProductDTO]:
        product = self._products.get(product_id)
        return replace(product) if product else None

    def list_products(self) -> List[ProductDTO]:
        return [replace(p) for p in self._products.values()]

    def set_stock(self, product_id: str, quantity: int) -> ProductDTO:
        """
        Replace the stored stock of a product.

        Args:
            product_id: Identifier of the product.
            quantity: New stock count; values below zero are stored as 0.

        Returns:
            Copy of the updated product.

        Raises:
            UnknownProduct: If the product is not in the ledger.
        """
        product = self.require(product_id)
        product.stock = max(0, int(quantity))
        logger.info("[InventoryLedger] stock set product_id=%s stock=%s", product_id, product.stock)
        return replace(product)

    def reserve(self, items: Iterable[Any]) -> List[ProductDTO]:
        """
        Decrement stock for each (product_id, quantity) line.

        Every line is checked before any product is touched, so a failure
        leaves the ledger unchanged.

        Args:
            items: Tuples or objects exposing product_id and quantity.

        Returns:
            Copies of the affected products after the decrement.

        Raises:
            ValidationError: If a quantity is not positive.
            UnknownProduct: If a line references a product not in the ledger.
            InsufficientStock: Under the "reject" policy, when a line asks for
                more than is available.
        """
        lines = _aggregate(items)
        for product_id, quantity in lines:
            if quantity <= 0:
                raise ValidationError(f"Quantity for product {product_id} must be > 0")
            product = self.require(product_id)
            if self.oversell_policy == "reject" and quantity > product.stock:
                raise InsufficientStock(product_id, quantity, product.stock)

        affected: List[ProductDTO] = []
        for product_id, quantity in lines:
            product = self._products[product_id]
            if quantity > product.stock:
                logger.warning(
                    "[InventoryLedger] oversell clamped product_id=%s requested=%s available=%s",
                    product_id,
                    quantity,
                    product.stock,
                )
            product.stock = max(0, product.stock - quantity)
            affected.append(replace(product))
        return affected

    def release(self, items: Iterable[Any]) -> List[ProductDTO]:
        """
        Give stock back for each line (inverse of reserve). No upper bound.

        Lines whose product is no longer in the ledger are skipped.
        """
        affected: List[ProductDTO] = []
        for product_id, quantity in _aggregate(items):
            product = self._products.get(product_id)
            if product is None:
                logger.warning("[InventoryLedger] release skipped, unknown product_id=%s", product_id)
                continue
            product.stock += max(0, quantity)
            affected.append(replace(product))
        return affected

    def total_stock(self) -> int:
        return sum(p.stock for p in self._products.values())

    def can_sell(self) -> bool:
        return self.total_stock() > 0

    def replace_all(self, products: Iterable[ProductDTO]) -> None:
        """Snapshot replace: the given products become the whole ledger."""
        self._products = {p.id: replace(p, stock=max(0, int(p.stock))) for p in products}
