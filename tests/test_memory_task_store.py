import pytest
from todos.adapters.memory.task_store import InMemoryTaskStore
from todos.domain.task import Task, TaskId
from todos.domain.errors import TaskAlreadyExistsError, StoreError

pytestmark = pytest.mark.anyio


async def connected(*tasks: Task, enforce_unique: bool = True) -> InMemoryTaskStore:
    store = InMemoryTaskStore(tasks, enforce_unique=enforce_unique)
    await store.connect()
    return store


async def test_seed_tasks_are_listed_in_order():
    store = await connected(Task(2, "B"), Task(1, "A"))

    assert await store.list_all() == [Task(2, "B"), Task(1, "A")]


async def test_insert_returns_storage_key_distinct_from_id():
    store = await connected()

    key = await store.insert(Task(1, "A"))

    assert isinstance(key, str)
    assert key != "1"


async def test_insert_duplicate_raises():
    store = await connected(Task(1, "A"))

    with pytest.raises(TaskAlreadyExistsError):
        await store.insert(Task(1, "B"))


async def test_insert_duplicate_allowed_without_unique_constraint():
    store = await connected(Task(1, "A"), enforce_unique=False)

    await store.insert(Task(1, "B"))

    assert [t.title for t in await store.list_all()] == ["A", "B"]


async def test_listed_tasks_are_copies():
    store = await connected(Task(1, "A"))

    (task,) = await store.list_all()
    task.title = "changed"

    assert await store.list_all() == [Task(1, "A")]


async def test_update_and_delete_report_counts():
    store = await connected(Task(1, "A"))

    assert await store.update_fields(TaskId(1), {"title": "B"}) == 1
    assert await store.update_fields(TaskId(2), {"title": "B"}) == 0
    assert await store.delete_by_id(TaskId(2)) == 0
    assert await store.delete_by_id(TaskId(1)) == 1
    assert await store.list_all() == []


async def test_primitives_require_connect():
    store = InMemoryTaskStore()

    with pytest.raises(StoreError):
        await store.insert(Task(1, "A"))

    await store.connect()
    await store.close()
    with pytest.raises(StoreError):
        await store.list_all()
