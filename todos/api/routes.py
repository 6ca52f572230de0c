from json import JSONDecodeError
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, Request, Response, status

from todos.adapters.system.id_provider_max_scan import MaxScanIdProvider
from todos.api.validation import validate_create_payload, validate_task_id, validate_update_payload
from todos.domain.errors import TaskValidationError
from todos.domain.task import Task, TaskId
from todos.ports.task_store import TaskStore
from todos.services.task_service import TaskService


### COMMENTS
# ==========================================================
# HTTP routes (api/routes.py): /tasks CRUD.
# ==========================================================
# Each route runs: [id validation] -> [body validation] -> [service].
# Validation dependencies are declared before `get_service`, and FastAPI
# resolves dependencies in declaration order, so a rejected request never
# opens or touches the store.
# Failures are raised, never turned into responses here; the handlers in
# api/errors.py shape the envelope.

# collection routes answer on both "/tasks" and "/tasks/", no redirect
router = APIRouter(prefix="/tasks", tags=["tasks"])


def build_service(store: TaskStore) -> TaskService:
    return TaskService(store, MaxScanIdProvider(store))


async def get_service(request: Request) -> AsyncIterator[TaskService]:
    """Yields a service bound to the app's store.

    With the `request` connection policy the store is opened for this request
    only and closed afterwards.
    """
    state = request.app.state
    if not state.per_request:
        yield build_service(state.store)
    else:
        store = state.store_factory()
        await store.connect()
        try:
            yield build_service(store)
        finally:
            await store.close()


def task_id_param(task_id: str) -> TaskId:
    return validate_task_id(task_id)


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        raise TaskValidationError("body", "request body must be valid JSON")


async def create_payload(request: Request) -> dict:
    return validate_create_payload(await _json_body(request))


async def update_payload(request: Request) -> dict:
    return validate_update_payload(await _json_body(request))


def to_json(task: Task) -> dict:
    return {"id": task.id, "title": task.title, "completed": task.completed}


@router.get("")
@router.get("/", include_in_schema=False)
async def list_tasks(service: TaskService = Depends(get_service)) -> list[dict]:
    return [to_json(t) for t in await service.list_tasks()]


@router.get("/{task_id}")
async def get_task(
    task_id: TaskId = Depends(task_id_param),
    service: TaskService = Depends(get_service),
) -> dict:
    return to_json(await service.get_task(task_id))


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_task(
    payload: dict = Depends(create_payload),
    service: TaskService = Depends(get_service),
) -> dict:
    return to_json(await service.create_task(**payload))


@router.put("/{task_id}")
async def update_task(
    task_id: TaskId = Depends(task_id_param),
    payload: dict = Depends(update_payload),
    service: TaskService = Depends(get_service),
) -> dict:
    return to_json(await service.update_task(task_id, payload))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: TaskId = Depends(task_id_param),
    service: TaskService = Depends(get_service),
) -> Response:
    await service.remove_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
