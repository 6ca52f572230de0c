### COMMENTS
# ============================================
# Domain error conventions used across the project
# ============================================
# - Stores (adapters):
#     * map driver failures (PyMongoError, SQLAlchemyError) to StoreError
#     * map duplicate-key failures to TaskAlreadyExistsError
#     * never raise TaskNotFoundError; they report counts instead
#
# - Service:
#     * validates business rules and raises TaskValidationError
#     * turns a 0 count or a missing task into TaskNotFoundError
#
# - Boundary (HTTP, CLI):
#     * catches DomainError (or a specific subclass) and shows a friendly message
#     * everything else is treated as a technical failure (logged with traceback)


class DomainError(Exception):
    """Base class for domain errors.
    Shared parent of every business exception in the system, so the boundary
    can tell domain failures apart from unexpected ones.
    Should not be raised directly, use a subclass.
    """


class TaskValidationError(DomainError):
    """Raised when request input does not satisfy the rules for a task.
    Examples:
    - `title` is missing, not text, or empty,
    - `completed` is not a boolean,
    - the path identifier is not an integer.
    Raised by the validation layer and by `TaskService`, always before any write.
    Carries the offending `field` and a readable `message` for the caller.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return self.message


class TaskNotFoundError(DomainError):
    """Raised when the requested task does not exist in the store.
    Occurs on get, update and delete. Raised by the service when a lookup
    finds no match or a store primitive reports a 0 count.
    """
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"Task {self.task_id} not found"


class StoreError(DomainError):
    """Raised by store adapters on connectivity or constraint failures."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TaskAlreadyExistsError(StoreError):
    """Raised when an insert collides with an existing logical `id`.
    This is the storage-level safety net for concurrent creates that computed
    the same next identifier.
    """
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task {task_id} already exists")
