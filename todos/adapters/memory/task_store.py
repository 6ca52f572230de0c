from todos.domain.task import Task, TaskId
from todos.domain.errors import TaskAlreadyExistsError, StoreError
from typing import Any, Iterable
from uuid import uuid4
import asyncio
import logging

### COMMENTS
# ==========================================================
# In-memory adapter of the task store (adapters/memory/task_store.py).
# ==========================================================
# This module implements the `TaskStore` port in process memory.
#
# - Used by tests, local runs and `--store memory` (no durability across restarts).
# - Documents live in a dict `_docs: dict[storage_key, dict]`; insertion order
#   of the dict is the natural storage order returned by `list_all`.
# - Every primitive yields to the event loop once before touching `_docs`, so
#   concurrent requests interleave at the same points they would against a
#   real database.
# - Rules follow the port contract:
#     * `insert` -> raises `TaskAlreadyExistsError` when the logical id exists
#       (unless built with `enforce_unique=False`),
#     * `update_fields` / `delete_by_id` -> return counts, never raise for a miss,
#     * any primitive before `connect()` -> `StoreError`.

logger = logging.getLogger(__name__)


class InMemoryTaskStore:
    """
        Initializes the store with an optional collection of seed tasks.
        :param initial: Iterable of Task objects loaded before the first request.
        :param enforce_unique: When False the store accepts duplicate logical ids,
        like a document collection without a unique index.
    """
    def __init__(self, initial: Iterable[Task] | None = None, enforce_unique: bool = True) -> None:
        self.enforce_unique = enforce_unique
        self.connected = False
        self._docs: dict[str, dict[str, Any]] = {}
        for t in (initial or []):
            self._docs[uuid4().hex] = {"id": t.id, "title": t.title, "completed": t.completed}

    async def connect(self) -> None:
        """Marks the store as connected. Kept data survives reconnects."""
        self.connected = True
        logger.info("Connected to in-memory task store")

    async def close(self) -> None:
        self.connected = False
        logger.info("In-memory task store closed")

    async def _checkpoint(self) -> None:
        await asyncio.sleep(0)
        if not self.connected:
            raise StoreError("store is not connected")

    def _matching_keys(self, task_id: TaskId) -> list[str]:
        return [key for key, doc in self._docs.items() if doc["id"] == task_id]

    async def insert(self, task: Task) -> str:
        """
            Adds a new document with the task's fields.

            - A collision is detected on the logical `task.id`.
            - When the id already exists the document is not overwritten;
            `TaskAlreadyExistsError` is raised instead (unique constraint).
            - The store performs no business validation, that is the service's job.

            :param task: Task domain object to store.
            :raises TaskAlreadyExistsError: When a document with the same `id` exists
            and uniqueness is enforced.
            :raises StoreError: When the store is not connected.
            :return: Generated storage key.
        """
        await self._checkpoint()
        if self.enforce_unique and self._matching_keys(task.id):
            raise TaskAlreadyExistsError(task.id)
        key = uuid4().hex
        self._docs[key] = {"id": task.id, "title": task.title, "completed": task.completed}
        logger.debug("Task inserted: %s", key)
        return key

    async def list_all(self) -> list[Task]:
        """
            Returns every task in insertion order.

            - Each call builds fresh `Task` objects; mutating them does not
            change the stored documents.

            :raises StoreError: When the store is not connected.
            :return: List of `Task` objects.
        """
        await self._checkpoint()
        tasks = [Task(id=doc["id"], title=doc["title"], completed=doc["completed"]) for doc in self._docs.values()]
        logger.debug("Tasks listed: %d", len(tasks))
        return tasks

    async def update_fields(self, task_id: TaskId, fields: dict[str, Any]) -> int:
        """
            Merge-patches the first document whose logical `id` equals `task_id`.

            - Only keys present in `fields` are written.
            - Returns the matched count, also when the values were already equal.

            :param task_id: Logical identifier of the task.
            :param fields: Subset of {"title", "completed"} to write.
            :raises StoreError: When the store is not connected.
            :return: 1 if a document matched, otherwise 0.
        """
        await self._checkpoint()
        keys = self._matching_keys(task_id)
        if not keys:
            logger.debug("Task update matched nothing: %s", task_id)
            return 0
        self._docs[keys[0]].update(fields)
        logger.debug("Task updated: %s", task_id)
        return 1

    async def delete_by_id(self, task_id: TaskId) -> int:
        """
            Removes the first document whose logical `id` equals `task_id`.

            :param task_id: Logical identifier of the task.
            :raises StoreError: When the store is not connected.
            :return: 1 if a document was deleted, otherwise 0.
        """
        await self._checkpoint()
        keys = self._matching_keys(task_id)
        if not keys:
            return 0
        del self._docs[keys[0]]
        logger.debug("Task deleted: %s", task_id)
        return 1
