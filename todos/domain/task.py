from typing import NewType
from dataclasses import dataclass

TaskId = NewType("TaskId", int)

@dataclass
class Task():
    """
    Domain model of a single task: service-assigned integer id, title and completion flag.
    No validation happens here; that belongs to the validation layer and the service.
    """
    id: TaskId
    title: str
    completed: bool = False



### COMMENTS
# ======================================
# Task as a plain record
# ======================================
# - `id` is the logical identifier minted by the service (IdProvider port),
#   never by the caller and never by the store. Storage-internal keys
#   (Mongo `_id`, SQL row key) never leave the adapters.
# - The dataclass is not frozen: fields can be read and set
#   directly (`task.completed = True`), but the service never reassigns `id`.
# - Field order matters for the generated __init__: required fields first,
#   `completed` with its default last, so `Task(1, "buy milk")` is valid.
