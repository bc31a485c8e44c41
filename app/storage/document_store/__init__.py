from .types import WriteKind, WriteOp, Snapshot, SnapshotCallback, Unsubscribe
from .base import DocumentStore
from .sql_store import SqlDocumentStore

__all__ = [
    "WriteKind", "WriteOp", "Snapshot", "SnapshotCallback", "Unsubscribe",
    "DocumentStore", "SqlDocumentStore",
]
