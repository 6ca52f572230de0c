from types import SimpleNamespace
import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError
from todos.adapters.mongo.task_store import MongoTaskStore
from todos.domain.task import Task, TaskId
from todos.domain.errors import TaskAlreadyExistsError, StoreError

pytestmark = pytest.mark.anyio


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs
    async def to_list(self, length=None):
        return self.docs


class FakeCollection:
    """Just enough of pymongo's async collection for the store."""
    def __init__(self):
        self.docs: list[dict] = []
        self.unique_fields: set[str] = set()

    async def create_index(self, field, unique=False):
        if unique:
            self.unique_fields.add(field)
        return f"{field}_1"

    async def insert_one(self, doc):
        for field in self.unique_fields:
            if any(d[field] == doc[field] for d in self.docs):
                raise DuplicateKeyError("E11000 duplicate key error", 11000)
        doc = {"_id": ObjectId(), **doc}
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def find(self, query, projection):
        hidden = [k for k, keep in projection.items() if not keep]
        return FakeCursor([{k: v for k, v in d.items() if k not in hidden} for d in self.docs])

    async def update_one(self, query, update):
        for d in self.docs:
            if d["id"] == query["id"]:
                changes = update["$set"]
                modified = int(any(d.get(k) != v for k, v in changes.items()))
                d.update(changes)
                return SimpleNamespace(matched_count=1, modified_count=modified)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for d in self.docs:
            if d["id"] == query["id"]:
                self.docs.remove(d)
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeAdmin:
    def __init__(self, reachable):
        self.reachable = reachable
    async def command(self, name):
        if not self.reachable:
            raise ServerSelectionTimeoutError("no servers available")
        return {"ok": 1}


class FakeClient:
    def __init__(self, reachable=True):
        self.admin = FakeAdmin(reachable)
        self.collection = FakeCollection()
        self.closed = False
    def __getitem__(self, db_name):
        return {"tasks": self.collection}
    async def close(self):
        self.closed = True


@pytest.fixture
async def client_and_store():
    client = FakeClient()
    store = MongoTaskStore("mongodb://fake", "todos", "tasks", client=client)
    await store.connect()
    return client, store


async def test_connect_creates_unique_index(client_and_store):
    client, _ = client_and_store
    assert client.collection.unique_fields == {"id"}


async def test_insert_returns_object_id_and_stores_logical_fields(client_and_store):
    client, store = client_and_store

    key = await store.insert(Task(1, "buy milk"))

    assert ObjectId.is_valid(key)
    stored = client.collection.docs[0]
    assert {k: stored[k] for k in ("id", "title", "completed")} == {"id": 1, "title": "buy milk", "completed": False}


async def test_list_all_hides_storage_id(client_and_store):
    _, store = client_and_store
    await store.insert(Task(1, "A"))
    await store.insert(Task(2, "B", completed=True))

    assert await store.list_all() == [Task(1, "A"), Task(2, "B", completed=True)]


async def test_duplicate_key_maps_to_domain_error(client_and_store):
    _, store = client_and_store
    await store.insert(Task(1, "A"))

    with pytest.raises(TaskAlreadyExistsError):
        await store.insert(Task(1, "B"))


async def test_update_returns_matched_count(client_and_store):
    _, store = client_and_store
    await store.insert(Task(1, "A", completed=True))

    assert await store.update_fields(TaskId(1), {"completed": True}) == 1
    assert await store.update_fields(TaskId(2), {"completed": True}) == 0


async def test_delete_returns_deleted_count(client_and_store):
    _, store = client_and_store
    await store.insert(Task(1, "A"))

    assert await store.delete_by_id(TaskId(1)) == 1
    assert await store.delete_by_id(TaskId(1)) == 0


async def test_unreachable_server_raises_store_error():
    store = MongoTaskStore("mongodb://fake", "todos", "tasks", client=FakeClient(reachable=False))

    with pytest.raises(StoreError):
        await store.connect()


async def test_primitives_require_connect():
    store = MongoTaskStore("mongodb://fake", "todos", "tasks", client=FakeClient())

    with pytest.raises(StoreError):
        await store.list_all()


async def test_close_releases_client(client_and_store):
    client, store = client_and_store

    await store.close()
    await store.close()

    assert client.closed
    with pytest.raises(StoreError):
        await store.list_all()
