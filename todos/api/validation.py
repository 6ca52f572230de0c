"""
Request validation: pure checks run before the service is called.

Each function either returns the cleaned value for the next step or raises
`TaskValidationError`. Nothing here touches the store.
"""
from typing import Any
import re
from todos.domain.task import TaskId
from todos.domain.errors import TaskValidationError

# ASCII digits only; int() alone would also take "1_0", "+3" and other scripts' digits
TASK_ID_PATTERN = re.compile(r"-?[0-9]+")

# stores keep the logical id in a signed 64-bit integer
MIN_TASK_ID = -(2 ** 63)
MAX_TASK_ID = 2 ** 63 - 1


def validate_task_id(raw: Any) -> TaskId:
    """Parses a path identifier into a `TaskId`.

    :raises TaskValidationError: When `raw` is not an integer literal or does not
        fit in a signed 64-bit integer.
    """
    if isinstance(raw, bool) or not TASK_ID_PATTERN.fullmatch(str(raw)):
        raise TaskValidationError("id", "invalid id")
    task_id = int(str(raw))
    if not MIN_TASK_ID <= task_id <= MAX_TASK_ID:
        raise TaskValidationError("id", "invalid id")
    return TaskId(task_id)


def _require_object(body: Any) -> dict:
    if not isinstance(body, dict):
        raise TaskValidationError("body", "request body must be a JSON object")
    return body


def _check_completed(body: dict) -> None:
    if "completed" in body and not isinstance(body["completed"], bool):
        raise TaskValidationError("completed", "completed must be a boolean")


def _check_title(body: dict) -> None:
    if "title" not in body:
        return
    if not isinstance(body["title"], str):
        raise TaskValidationError("title", "title must be a string")
    if not body["title"].strip():
        raise TaskValidationError("title", "title required")


def validate_create_payload(body: Any) -> dict:
    """Checks a create body: `title` required non-blank text, `completed` optional boolean.

    :return: `{"title": ..., "completed": ...}` with `completed` defaulting to False.
    """
    body = _require_object(body)
    if body.get("title") is None:
        raise TaskValidationError("title", "title required")
    _check_title(body)
    _check_completed(body)
    return {"title": body["title"], "completed": body.get("completed", False)}


def validate_update_payload(body: Any) -> dict:
    """Checks an update body; every field is optional, a present `title` cannot be blank.

    :return: Only the fields present in the body (the merge-patch).
    """
    body = _require_object(body)
    _check_title(body)
    _check_completed(body)
    return {k: body[k] for k in ("title", "completed") if k in body}
