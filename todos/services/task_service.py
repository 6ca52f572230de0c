from todos.ports.task_store import TaskStore
from todos.ports.id_provider import IdProvider
from todos.domain.task import Task, TaskId
from todos.domain.errors import TaskValidationError, TaskNotFoundError
from typing import Any


### COMMENTS
# ==========================================================
# Service layer (services/task_service.py): use cases.
# ==========================================================
# Role:
# - Orchestrates the application logic over the `TaskStore` port.
# - Validates business rules (non-empty title).
# - Owns the identifier policy (through the `IdProvider` port) and the
#   interpretation of store counts as "not found".
#
# Rules:
# - The service only talks to ports; it never touches an adapter directly.
# - The service keeps no state between calls; every task lives in the store.
# - Domain errors:
#     * Validation (e.g. empty title) -> `TaskValidationError`.
#     * Missing task on get/update/delete -> `TaskNotFoundError`.
# - Store failures (`StoreError`, `TaskAlreadyExistsError`) propagate unchanged.

UPDATABLE_FIELDS = ("title", "completed")


def _check_title(title) -> None:
    if not isinstance(title, str) or not title.strip():
        raise TaskValidationError("title", "title required")


class TaskService:
    """
    Use-case service for tasks.

    :param store: Implementation of the TaskStore port.
    :param id_provider: Implementation of the IdProvider port (mints new ids).
    """
    def __init__(self, store: TaskStore, id_provider: IdProvider) -> None:
        self.store = store
        self.id_provider = id_provider

    async def list_tasks(self) -> list[Task]:
        """
            Returns every task, verbatim from the store.

            :return: List of `Task` objects in storage order.
        """
        return await self.store.list_all()

    async def get_task(self, task_id: TaskId) -> Task:
        """
            Returns the task with the given identifier.

            - Lists all tasks and scans for the first one whose `id` equals `task_id`.
            - If none matches, raises `TaskNotFoundError`.

            :param task_id: Identifier of the task to fetch.
            :raises TaskNotFoundError: When no task matches.
            :return: The `Task` object.
        """
        for task in await self.store.list_all():
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    async def create_task(self, title: str, completed: bool = False) -> Task:
        """
            Creates a new task and stores it.

            - Validation: `title` cannot be empty or whitespace only
            (`TaskValidationError("title", "...")`).
            - `id` comes from the IdProvider (max + 1 by default).
            - Concurrent creates can mint the same id; the store's uniqueness
            constraint then raises `TaskAlreadyExistsError` for the loser.

            :param title: Task title (required).
            :param completed: Initial completion flag.
            :raises TaskValidationError: When `title` is invalid.
            :raises TaskAlreadyExistsError: When the minted id is already taken.
            :return: The created `Task`.
        """
        _check_title(title)

        task_id = await self.id_provider.new_id()
        task = Task(id=task_id, title=title, completed=completed)
        await self.store.insert(task)

        return task

    async def update_task(self, task_id: TaskId, changes: dict[str, Any]) -> Task:
        """
            Applies a partial update (merge-patch) to an existing task.

            - Only `title` and `completed` present in `changes` are written;
            absent fields are left untouched.
            - A 0 matched count from the store means the task does not exist.
            - An empty patch writes nothing and returns the stored task.
            - On success the task is read back from the store, so the result
            reflects the stored state rather than the patch.

            :param task_id: Identifier of the task to update.
            :param changes: Fields to change.
            :raises TaskValidationError: When `title` is present but empty.
            :raises TaskNotFoundError: When no task matches.
            :return: The updated `Task` as stored.
        """
        patch = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if "title" in patch:
            _check_title(patch["title"])
        if not patch:
            return await self.get_task(task_id)

        matched = await self.store.update_fields(task_id, patch)
        if matched == 0:
            raise TaskNotFoundError(task_id)
        return await self.get_task(task_id)

    async def remove_task(self, task_id: TaskId) -> None:
        """
            Removes a task from the store.

            - Delegates to `store.delete_by_id(task_id)`.
            - A 0 deleted count means the task does not exist, so deleting
            twice fails the second time.

            :param task_id: Identifier of the task to remove.
            :raises TaskNotFoundError: When no task matches.
            :return: None
        """
        deleted = await self.store.delete_by_id(task_id)
        if deleted == 0:
            raise TaskNotFoundError(task_id)
