from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union


class WriteKind(StrEnum):
    SET = "set"        # create or replace the whole document
    MERGE = "merge"    # update listed fields of an existing document
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class WriteOp:
    collection: str
    doc_id: str
    kind: WriteKind
    data: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def set(cls, collection: str, doc_id: str, data: Dict[str, Any]) -> "WriteOp":
        return cls(collection, doc_id, WriteKind.SET, dict(data))

    @classmethod
    def merge(cls, collection: str, doc_id: str, data: Dict[str, Any]) -> "WriteOp":
        return cls(collection, doc_id, WriteKind.MERGE, dict(data))

    @classmethod
    def delete(cls, collection: str, doc_id: str) -> "WriteOp":
        return cls(collection, doc_id, WriteKind.DELETE)


# Full-collection snapshot: (doc_id, data) pairs.
Snapshot = List[Tuple[str, Dict[str, Any]]]

SnapshotCallback = Callable[[str, Snapshot], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]
