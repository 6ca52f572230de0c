from todos.ports.id_provider import IdProvider
from todos.ports.task_store import TaskStore
from todos.domain.task import TaskId

class MaxScanIdProvider(IdProvider):
    """Mints `max(existing ids) + 1`, or 1 for an empty collection.

    Scans the whole collection on every call and is not safe under concurrent
    creates: two callers can read the same maximum. The store's uniqueness
    constraint rejects the second insert.
    """

    def __init__(self, store: TaskStore) -> None:
        self.store = store

    async def new_id(self) -> TaskId:
        tasks = await self.store.list_all()
        return TaskId(max((t.id for t in tasks), default=0) + 1)
