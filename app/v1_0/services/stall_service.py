from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from app.core.logger import logger
from app.v1_0.entities import (
    ProductDTO,
    SaleDTO,
    SaleItemViewDTO,
    SaleViewDTO,
    StockOverviewDTO,
    SyncStatusDTO,
)
from app.v1_0.helper.catalog import DEFAULT_CATALOG
from app.v1_0.helper.formatting import format_datetime, format_price
from app.v1_0.repositories import ProductRepository, SaleRepository
from app.v1_0.schemas import SaleDraft, SalePatch
from .inventory_ledger import InventoryLedger
from .sale_journal import SaleJournal
from .sync_service import RemoteSynchronizer


class StallService:
    """
    Entry point used by the presentation layer.

    Every mutation is applied to the local ledger/journal first and returned
    immediately; the matching remote write is handed to the synchronizer as a
    background task. Sale creation and deletion go out as one batch holding
    the sale document and the stock of every affected product.
    """

    def __init__(
        self,
        ledger: InventoryLedger,
        journal: SaleJournal,
        synchronizer: RemoteSynchronizer,
        product_repository: ProductRepository,
        sale_repository: SaleRepository,
        missing_product_label: str = "Produto não encontrado",
        currency: str = "BRL",
        display_timezone: Optional[str] = None,
    ) -> None:
        self.ledger = ledger
        self.journal = journal
        self.synchronizer = synchronizer
        self.product_repository = product_repository
        self.sale_repository = sale_repository
        self.missing_product_label = missing_product_label
        self.currency = currency
        self.display_timezone = display_timezone

    # ---- products / ledger ----

    def list_products(self) -> List[ProductDTO]:
        return self.ledger.list_products()

    def total_stock_across_products(self) -> int:
        return self.ledger.total_stock()

    def stock_overview(self) -> StockOverviewDTO:
        return StockOverviewDTO(
            products=self.ledger.list_products(),
            total_stock=self.ledger.total_stock(),
            can_sell=self.ledger.can_sell(),
        )

    def set_stock(self, product_id: str, quantity: int) -> ProductDTO:
        """
        Replace the stock of a product and push the new count.

        Raises:
            UnknownProduct: If the product does not exist locally.
        """
        product = self.ledger.set_stock(product_id, quantity)
        self.synchronizer.push("set_stock", self.product_repository.stock_ops([product]))
        return product

    def product_name(self, product_id: str, fallback: Optional[str] = None) -> str:
        """Live product name, else the given fallback, else the missing-product label."""
        product = self.ledger.get_product(product_id)
        if product:
            return product.name
        return fallback or self.missing_product_label

    # ---- sales / journal ----

    def list_sales(self) -> List[SaleDTO]:
        return self.journal.list_sales()

    def get_sale(self, sale_id: str) -> SaleDTO:
        return self.journal.get_sale(sale_id)

    def reservations(self) -> List[SaleDTO]:
        return self.journal.reservations()

    def direct_sales(self) -> List[SaleDTO]:
        return self.journal.direct_sales()

    def _affected_products(self, product_ids: Iterable[str]) -> List[ProductDTO]:
        seen: List[ProductDTO] = []
        for pid in dict.fromkeys(product_ids):
            product = self.ledger.get_product(pid)
            if product:
                seen.append(product)
        return seen

    def create_sale(self, draft: SaleDraft) -> SaleDTO:
        """
        Create a sale (or reservation) and decrement stock for its items.

        Args:
            draft: Sale draft with items and flags.

        Returns:
            The created SaleDTO.

        Raises:
            ValidationError: On an invalid draft; nothing is changed.
            UnknownProduct: If an item references an unknown product.
            InsufficientStock: If the ledger rejects an oversell.
        """
        sale = self.journal.create_sale(draft)
        products = self._affected_products(it.product_id for it in sale.items)
        self.synchronizer.push(
            "create_sale",
            [
                self.sale_repository.set_op(sale.id, sale),
                *self.product_repository.stock_ops(products),
            ],
        )
        return sale

    def update_sale(self, sale_id: str, patch: Union[SalePatch, Mapping[str, Any]]) -> SaleDTO:
        """
        Update the is_paid / is_collected flags of a sale.

        Raises:
            NotFound: If the sale does not exist.
            ValidationError: If the patch touches an immutable field.
        """
        if isinstance(patch, SalePatch):
            data = {**patch.model_dump(exclude_unset=True), **(patch.model_extra or {})}
        else:
            data = dict(patch)
        sale = self.journal.update_sale(sale_id, data)
        if data:
            self.synchronizer.push("update_sale", [self.sale_repository.flags_op(sale_id, data)])
        return sale

    def mark_collected(self, sale_id: str) -> SaleDTO:
        before = self.journal.get_sale(sale_id)
        sale = self.journal.mark_collected(sale_id)
        if not before.is_collected:
            self.synchronizer.push(
                "mark_collected",
                [self.sale_repository.flags_op(sale_id, {"is_collected": True})],
            )
        return sale

    def delete_sale(self, sale_id: str) -> None:
        """
        Delete a sale and give its items back to stock.

        Raises:
            NotFound: If the sale does not exist; nothing is changed.
        """
        sale = self.journal.delete_sale(sale_id)
        products = self._affected_products(it.product_id for it in sale.items)
        self.synchronizer.push(
            "delete_sale",
            [
                self.sale_repository.delete_op(sale_id),
                *self.product_repository.stock_ops(products),
            ],
        )

    # ---- display ----

    def describe_sale(self, sale: SaleDTO) -> SaleViewDTO:
        return SaleViewDTO(
            id=sale.id,
            customer_name=sale.customer_name,
            items=[
                SaleItemViewDTO(
                    product_id=it.product_id,
                    product_name=self.product_name(it.product_id, it.product_name),
                    quantity=it.quantity,
                    price=it.price,
                    subtotal=it.subtotal,
                )
                for it in sale.items
            ],
            total=sale.total,
            charged_amount=sale.charged_amount,
            is_reservation=sale.is_reservation,
            is_paid=sale.is_paid,
            is_collected=sale.is_collected,
            is_promotion=sale.is_promotion,
            promotion_price=sale.promotion_price,
            created_at=sale.created_at,
            display_amount=format_price(sale.charged_amount, self.currency),
            display_date=format_datetime(sale.created_at, self.display_timezone),
        )

    def describe_sales(self, sales: Sequence[SaleDTO]) -> List[SaleViewDTO]:
        return [self.describe_sale(s) for s in sales]

    # ---- remote ----

    async def seed_catalog(self, catalog: Iterable[ProductDTO] = DEFAULT_CATALOG) -> bool:
        """
        Write the fixed catalog to the remote store when it has no products yet.

        Returns:
            True if the catalog was written.
        """
        existing = await self.product_repository.list_all()
        if existing:
            logger.debug("[StallService] catalog already present (%s products)", len(existing))
            return False
        products = list(catalog)
        await self.product_repository.store.apply(self.product_repository.set_ops(products))
        logger.info("[StallService] seeded catalog with %s products", len(products))
        return True

    async def resync(self) -> None:
        await self.synchronizer.resync()

    def sync_status(self) -> SyncStatusDTO:
        return self.synchronizer.status()
