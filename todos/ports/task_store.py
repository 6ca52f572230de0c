from typing import Any, Protocol
from todos.domain.task import Task, TaskId


### COMMENTS
# ==========================================================
# Task store contract (ports/task_store.py).
# ==========================================================
# This module defines the interface (Protocol) of the persistence layer.
# - It does not depend on a technology (memory, MongoDB, SQL).
# - Adapters map driver errors to domain errors
#   (connectivity -> StoreError, duplicate key -> TaskAlreadyExistsError).
# - The store holds no business logic: it reports counts, the service decides
#   what a 0 count means.
# - Every method is a suspension point; the service awaits each one.


class TaskStore(Protocol):
    """Interface of a store holding `Task` records in a single collection.

    Adapters (implementations) must:
    - require `connect()` before any primitive and raise `StoreError` otherwise,
    - enforce uniqueness of the logical `id` at the storage layer,
    - map driver errors to domain errors,
    - perform no business validation (that belongs to the service).
    """

    async def connect(self) -> None:
        """Opens the connection to the collection.

        Domain errors:
            StoreError: When the backend cannot be reached.
        """

    async def close(self) -> None:
        """Closes the connection.

        Notes:
            Best-effort: failures are logged and swallowed, never raised.
        """

    async def insert(self, task: Task) -> str:
        """Writes a new record with the task's fields.

        Returns:
            str: The storage-generated key (not the logical `id`).

        Domain errors:
            TaskAlreadyExistsError: When a record with the same `id` exists.
            StoreError: On connectivity failure.
        """

    async def list_all(self) -> list[Task]:
        """Returns every stored task in natural storage order.

        No filtering, sorting or pagination.

        Domain errors:
            StoreError: On connectivity failure.
        """

    async def update_fields(self, task_id: TaskId, fields: dict[str, Any]) -> int:
        """Merge-patches the record whose logical `id` equals `task_id`.

        Only the keys present in `fields` change; all other fields are left untouched.

        Returns:
            int: Number of records matched by `task_id` (0 or 1). A record that
                 matched but whose values were already equal still counts as 1.

        Domain errors:
            StoreError: On connectivity failure. No match is not an error.
        """

    async def delete_by_id(self, task_id: TaskId) -> int:
        """Removes (hard delete) the record whose logical `id` equals `task_id`.

        Returns:
            int: Number of deleted records (0 or 1).

        Domain errors:
            StoreError: On connectivity failure. No match is not an error.
        """
