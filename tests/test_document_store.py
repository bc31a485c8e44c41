import pytest

from app.core.errors import NotFound
from app.storage.document_store import WriteOp


async def test_set_and_get_document(store):
    await store.apply([WriteOp.set("products", "1", {"name": "Frango", "stock": 3})])
    assert await store.get_document("products", "1") == {"name": "Frango", "stock": 3}
    assert await store.get_document("products", "2") is None


async def test_set_replaces_whole_document(store):
    await store.apply([WriteOp.set("products", "1", {"name": "Frango", "stock": 3})])
    await store.apply([WriteOp.set("products", "1", {"name": "Frango assado"})])
    assert await store.get_document("products", "1") == {"name": "Frango assado"}


async def test_merge_updates_listed_fields_only(store):
    await store.apply([WriteOp.set("products", "1", {"name": "Frango", "stock": 3})])
    await store.apply([WriteOp.merge("products", "1", {"stock": 9})])
    assert await store.get_document("products", "1") == {"name": "Frango", "stock": 9}


async def test_batch_is_all_or_nothing(store):
    await store.apply([WriteOp.set("products", "1", {"name": "Frango", "stock": 3})])
    with pytest.raises(NotFound):
        await store.apply(
            [
                WriteOp.merge("products", "1", {"stock": 0}),
                WriteOp.set("sales", "s1", {"total": "10"}),
                WriteOp.merge("products", "missing", {"stock": 1}),
            ]
        )
    assert await store.get_document("products", "1") == {"name": "Frango", "stock": 3}
    assert await store.list_documents("sales") == []


async def test_delete_document(store):
    await store.apply([WriteOp.set("sales", "s1", {"total": "10"})])
    await store.apply([WriteOp.delete("sales", "s1")])
    assert await store.list_documents("sales") == []


async def test_subscribe_delivers_current_snapshot_then_changes(store):
    await store.apply([WriteOp.set("products", "1", {"name": "Frango"})])
    seen = []

    async def listener(collection, snapshot):
        seen.append((collection, [doc_id for doc_id, _ in snapshot]))

    unsubscribe = await store.subscribe("products", listener)
    await store.apply([WriteOp.set("products", "2", {"name": "Carne"})])
    await store.apply([WriteOp.set("sales", "s1", {"total": "1"})])

    assert seen == [("products", ["1"]), ("products", ["1", "2"])]

    unsubscribe()
    assert store.subscriber_count("products") == 0
    await store.apply([WriteOp.delete("products", "2")])
    assert len(seen) == 2


async def test_failing_listener_does_not_block_others(store):
    calls = []

    def broken(collection, snapshot):
        raise RuntimeError("boom")

    def healthy(collection, snapshot):
        calls.append(len(snapshot))

    await store.subscribe("sales", broken)
    await store.subscribe("sales", healthy)
    await store.apply([WriteOp.set("sales", "s1", {"total": "1"})])
    assert calls == [0, 1]


async def test_snapshot_copies_are_isolated(store):
    await store.apply([WriteOp.set("products", "1", {"name": "Frango"})])
    snapshot = await store.list_documents("products")
    snapshot[0][1]["name"] = "changed"
    assert (await store.get_document("products", "1"))["name"] == "Frango"
