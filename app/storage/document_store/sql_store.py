from typing import Any, Dict, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.errors import NotFound
from app.core.logger import logger
from app.storage.database import build_session_factory, dispose_engine
from app.utils.tx import maybe_begin
from app.v1_0.models import Base, Document
from .base import DocumentStore
from .types import Snapshot, WriteKind, WriteOp


class SqlDocumentStore(DocumentStore):
    """DocumentStore over a single SQL table, one row per (collection, doc_id)."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ) -> None:
        super().__init__()
        self._engine = engine
        self._session_factory = session_factory or build_session_factory(engine)

    async def init_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("[SqlDocumentStore] schema ready")

    async def list_documents(self, collection: str) -> Snapshot:
        async with self._session_factory() as session:
            stmt = (
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.doc_id.asc())
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [(row.doc_id, dict(row.data or {})) for row in rows]

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        async with self._session_factory() as session:
            row = await session.get(Document, (collection, doc_id))
            return dict(row.data or {}) if row else None

    async def _commit(self, ops: Sequence[WriteOp]) -> None:
        async with self._session_factory() as session:
            async with maybe_begin(session):
                for op in ops:
                    await self._apply_one(op, session)

    async def _apply_one(self, op: WriteOp, session: AsyncSession) -> None:
        if op.kind is WriteKind.DELETE:
            await session.execute(
                delete(Document).where(
                    Document.collection == op.collection,
                    Document.doc_id == op.doc_id,
                )
            )
            return

        row = await session.get(Document, (op.collection, op.doc_id))

        if op.kind is WriteKind.MERGE:
            if row is None:
                raise NotFound("document", f"{op.collection}/{op.doc_id}")
            # new dict so the JSON column registers the change
            row.data = {**(row.data or {}), **(op.data or {})}
            await session.flush()
            return

        if row is None:
            session.add(Document(collection=op.collection, doc_id=op.doc_id, data=dict(op.data or {})))
        else:
            row.data = dict(op.data or {})
        await session.flush()

    async def close(self) -> None:
        await super().close()
        await dispose_engine(self._engine)
