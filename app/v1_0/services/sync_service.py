import asyncio
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from app.core.errors import SyncError
from app.core.logger import logger
from app.core.realtime import ConnectionManager
from app.storage.document_store import DocumentStore, Snapshot, Unsubscribe, WriteOp
from app.utils.clock import utcnow, to_epoch_ms
from app.v1_0.entities import SyncStatusDTO
from app.v1_0.repositories import ProductRepository, SaleRepository
from .inventory_ledger import InventoryLedger
from .sale_journal import SaleJournal


class RemoteSynchronizer:
    """
    Keeps the local cache (ledger + journal) in step with the remote store.

    Policy is snapshot-replace-wins: every snapshot delivered by the store
    replaces the matching local collection wholesale, even if it discards a
    local change whose remote write has not landed yet. Local writes are
    queued and committed in push order by one background writer; a failed
    write is logged and announced on the realtime channel as ``sync.failed``
    but never rolls back local state, and it is not retried (``resync``
    re-reads the remote state on demand).
    """

    def __init__(
        self,
        store: DocumentStore,
        ledger: InventoryLedger,
        journal: SaleJournal,
        product_repository: ProductRepository,
        sale_repository: SaleRepository,
        realtime_manager: ConnectionManager,
        channel_id: str,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self.journal = journal
        self.product_repository = product_repository
        self.sale_repository = sale_repository
        self._realtime_manager = realtime_manager
        self.channel_id = channel_id
        self._clock = clock
        self._unsubscribers: List[Unsubscribe] = []
        self._queue: Optional[asyncio.Queue[Tuple[str, List[WriteOp]]]] = None
        self._writer: Optional[asyncio.Task] = None
        self._pending = 0
        self.failed_writes = 0
        self.last_error: Optional[SyncError] = None
        self.last_snapshot_at: Optional[datetime] = None

    @property
    def subscribed(self) -> bool:
        return bool(self._unsubscribers)

    @property
    def pending_writes(self) -> int:
        return self._pending

    async def start(self) -> None:
        """Subscribe to both collections; each subscription delivers its current snapshot."""
        if self.subscribed:
            return
        self._unsubscribers.append(
            await self.store.subscribe(self.product_repository.collection, self._on_products_snapshot)
        )
        self._unsubscribers.append(
            await self.store.subscribe(self.sale_repository.collection, self._on_sales_snapshot)
        )
        logger.info("[RemoteSynchronizer] started channel=%s", self.channel_id)

    async def stop(self) -> None:
        await self.drain()
        await self._stop_writer()
        while self._unsubscribers:
            self._unsubscribers.pop()()
        logger.info("[RemoteSynchronizer] stopped")

    async def resync(self) -> None:
        """
        Wait for pending writes, then re-read both collections and replace
        local state with them.

        Raises:
            SyncError: If the remote store cannot be read.
        """
        await self.drain()
        try:
            products = await self.store.list_documents(self.product_repository.collection)
            sales = await self.store.list_documents(self.sale_repository.collection)
        except Exception as e:
            raise SyncError("resync", e)
        await self._on_products_snapshot(self.product_repository.collection, products)
        await self._on_sales_snapshot(self.sale_repository.collection, sales)

    def push(self, operation: str, ops: Sequence[WriteOp]) -> None:
        """
        Queue a remote write without blocking the caller.

        Batches are committed one at a time, in the order they were pushed,
        by a single writer task. Must be called from within the running event loop.

        Args:
            operation: Label used in logs and failure notifications.
            ops: Write ops committed together as one batch.
        """
        batch = list(ops)
        if not batch:
            return
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._writer is None or self._writer.done():
            self._writer = asyncio.get_running_loop().create_task(self._run_writer())
        self._pending += 1
        self._queue.put_nowait((operation, batch))

    async def drain(self) -> None:
        """Wait until every queued remote write has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def _run_writer(self) -> None:
        queue = self._queue
        while True:
            operation, batch = await queue.get()
            try:
                await self._write(operation, batch)
            finally:
                self._pending -= 1
                queue.task_done()

    async def _stop_writer(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None or writer.done():
            return
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass

    async def _write(self, operation: str, ops: List[WriteOp]) -> None:
        try:
            await self.store.apply(ops)
        except Exception as e:
            err = SyncError(operation, e)
            self.failed_writes += 1
            self.last_error = err
            logger.error("[RemoteSynchronizer] remote write failed: %s", err, exc_info=True)
            await self._publish(
                "sync",
                "failed",
                {"operation": operation, "detail": err.message},
            )
            return
        logger.debug("[RemoteSynchronizer] remote write done operation=%s ops=%s", operation, len(ops))

    async def _on_products_snapshot(self, collection: str, snapshot: Snapshot) -> None:
        products = self.product_repository.decode_snapshot(snapshot)
        self.ledger.replace_all(products)
        self.last_snapshot_at = self._clock()
        logger.debug("[RemoteSynchronizer] products snapshot size=%s", len(products))
        await self._publish(
            "product",
            "snapshot",
            {"ids": [p.id for p in products], "total_stock": self.ledger.total_stock()},
        )

    async def _on_sales_snapshot(self, collection: str, snapshot: Snapshot) -> None:
        sales = self.sale_repository.decode_snapshot(snapshot)
        self.journal.replace_all(sales)
        self.last_snapshot_at = self._clock()
        logger.debug("[RemoteSynchronizer] sales snapshot size=%s", len(sales))
        await self._publish(
            "sale",
            "snapshot",
            {"ids": [s.id for s in self.journal.list_sales()]},
        )

    async def _publish(self, resource: str, action: str, payload: dict) -> None:
        try:
            await self._realtime_manager.publish(
                channel_id=self.channel_id,
                resource=resource,
                action=action,
                payload={**payload, "at": to_epoch_ms(self._clock())},
            )
        except Exception as e:
            logger.error(
                "[RemoteSynchronizer] realtime publish failed: %s",
                e,
                exc_info=True,
            )

    def status(self) -> SyncStatusDTO:
        return SyncStatusDTO(
            subscribed=self.subscribed,
            pending_writes=self.pending_writes,
            failed_writes=self.failed_writes,
            last_error=self.last_error.message if self.last_error else None,
            last_snapshot_at=self.last_snapshot_at,
        )
