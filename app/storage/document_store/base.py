from abc import ABC, abstractmethod
from inspect import isawaitable
from typing import Dict, Iterable, List, Optional, Sequence, Any

from app.core.logger import logger
from .types import Snapshot, SnapshotCallback, Unsubscribe, WriteOp


class DocumentStore(ABC):
    """
    Remote document store with collection-level subscriptions.

    Writes are applied as batches; every committed batch notifies the
    subscribers of each touched collection with a full snapshot of it.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[SnapshotCallback]] = {}

    @abstractmethod
    async def init_schema(self) -> None: ...

    @abstractmethod
    async def list_documents(self, collection: str) -> Snapshot: ...

    @abstractmethod
    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def _commit(self, ops: Sequence[WriteOp]) -> None:
        """Apply every op in one transaction, or none of them."""

    async def close(self) -> None:
        self._subscribers.clear()

    async def apply(self, ops: Iterable[WriteOp]) -> None:
        batch = list(ops)
        if not batch:
            return
        await self._commit(batch)
        logger.debug("[DocumentStore] committed batch size=%s", len(batch))
        touched: List[str] = []
        for op in batch:
            if op.collection not in touched:
                touched.append(op.collection)
        for collection in touched:
            await self._notify(collection)

    async def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        """
        Register a snapshot listener and deliver the current snapshot right away.

        Returns:
            A callable that removes the listener.
        """
        self._subscribers.setdefault(collection, []).append(callback)
        logger.info("[DocumentStore] subscribed collection=%s", collection)
        await self._deliver(callback, collection, await self.list_documents(collection))

        def _unsubscribe() -> None:
            listeners = self._subscribers.get(collection, [])
            if callback in listeners:
                listeners.remove(callback)
                logger.info("[DocumentStore] unsubscribed collection=%s", collection)
            if not listeners:
                self._subscribers.pop(collection, None)

        return _unsubscribe

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscribers.get(collection, ()))

    async def _notify(self, collection: str) -> None:
        listeners = list(self._subscribers.get(collection, ()))
        if not listeners:
            return
        snapshot = await self.list_documents(collection)
        for callback in listeners:
            await self._deliver(callback, collection, snapshot)

    async def _deliver(self, callback: SnapshotCallback, collection: str, snapshot: Snapshot) -> None:
        try:
            ret = callback(collection, [(doc_id, dict(data)) for doc_id, data in snapshot])
            if isawaitable(ret):
                await ret
        except Exception as e:
            logger.error(
                "[DocumentStore] snapshot listener failed collection=%s: %s",
                collection,
                e,
                exc_info=True,
            )
