from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from app.core.logger import logger
from app.storage.document_store import DocumentStore, Snapshot, WriteOp

EntityT = TypeVar("EntityT")


class BaseRepository(ABC, Generic[EntityT]):
    """Maps one remote collection to entities and entity changes to write ops."""

    collection: str

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    @abstractmethod
    def to_document(self, entity: EntityT) -> Dict[str, Any]: ...

    @abstractmethod
    def from_document(self, doc_id: str, data: Dict[str, Any]) -> EntityT: ...

    def decode_snapshot(self, snapshot: Snapshot) -> List[EntityT]:
        """Decode every document; malformed ones are logged and left out."""
        entities: List[EntityT] = []
        for doc_id, data in snapshot:
            try:
                entities.append(self.from_document(doc_id, data))
            except (KeyError, TypeError, ValueError, ArithmeticError) as e:
                logger.warning(
                    "[%s] skipping malformed document %s/%s: %s",
                    type(self).__name__,
                    self.collection,
                    doc_id,
                    e,
                )
        return entities

    async def list_all(self) -> List[EntityT]:
        return self.decode_snapshot(await self.store.list_documents(self.collection))

    async def get_by_id(self, doc_id: str) -> Optional[EntityT]:
        data = await self.store.get_document(self.collection, doc_id)
        return self.from_document(doc_id, data) if data is not None else None

    def set_op(self, doc_id: str, entity: EntityT) -> WriteOp:
        return WriteOp.set(self.collection, doc_id, self.to_document(entity))

    def merge_op(self, doc_id: str, data: Dict[str, Any]) -> WriteOp:
        return WriteOp.merge(self.collection, doc_id, data)

    def delete_op(self, doc_id: str) -> WriteOp:
        return WriteOp.delete(self.collection, doc_id)

    def set_ops(self, entities: Iterable[EntityT]) -> List[WriteOp]:
        return [self.set_op(self.doc_id_of(e), e) for e in entities]

    @staticmethod
    def doc_id_of(entity: Any) -> str:
        return str(entity.id)
