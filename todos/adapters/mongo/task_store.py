from __future__ import annotations
from typing import Any
import logging
from pymongo import AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError
from todos.ports.task_store import TaskStore
from todos.domain.task import Task, TaskId
from todos.domain.errors import TaskAlreadyExistsError, StoreError

logger = logging.getLogger(__name__)

# logical fields only, Mongo's `_id` never leaves the adapter
PROJECTION = {"_id": False, "id": True, "title": True, "completed": True}


def _encode_task(task: Task) -> dict:
    return {
        "id": int(task.id),
        "title": task.title,
        "completed": bool(task.completed),
    }

def _decode_task(doc: dict) -> Task:
    return Task(
        id=TaskId(doc["id"]),
        title=doc["title"],
        completed=doc.get("completed", False),
    )


class MongoTaskStore(TaskStore):
    """Document store over a single MongoDB collection.

    The client is created lazily in `connect()` unless one is passed in.
    A unique index on `id` is ensured on connect.
    """

    def __init__(
        self,
        uri: str,
        db_name: str,
        collection_name: str,
        client: AsyncMongoClient | None = None,
        unique_index: bool = True,
    ) -> None:
        self.uri = uri
        self.db_name = db_name
        self.collection_name = collection_name
        self.unique_index = unique_index
        self.client = client
        self.collection = None

    def _collection(self):
        if self.collection is None:
            raise StoreError("store is not connected")
        return self.collection

    async def connect(self) -> None:
        try:
            if self.client is None:
                self.client = AsyncMongoClient(self.uri)
            # the client connects lazily; ping surfaces a bad URI or an unreachable server here
            await self.client.admin.command("ping")
            collection = self.client[self.db_name][self.collection_name]
            if self.unique_index:
                await collection.create_index("id", unique=True)
        except PyMongoError as e:
            logger.error("Error connecting to MongoDB: %s", e)
            raise StoreError(f"cannot connect to MongoDB: {e}") from e
        self.collection = collection
        logger.info("Connected to MongoDB collection %s.%s", self.db_name, self.collection_name)

    async def close(self) -> None:
        if self.client is None:
            return
        try:
            await self.client.close()
            logger.info("MongoDB connection closed")
        except PyMongoError as e:
            logger.warning("Error closing MongoDB connection: %s", e)
        finally:
            self.client = None
            self.collection = None

    async def insert(self, task: Task) -> str:
        try:
            result = await self._collection().insert_one(_encode_task(task))
        except DuplicateKeyError as e:
            raise TaskAlreadyExistsError(task.id) from e
        except PyMongoError as e:
            logger.error("Error inserting task: %s", e)
            raise StoreError(str(e)) from e
        logger.debug("Task inserted: %s", result.inserted_id)
        return str(result.inserted_id)

    async def list_all(self) -> list[Task]:
        try:
            docs = await self._collection().find({}, PROJECTION).to_list()
        except PyMongoError as e:
            logger.error("Error listing tasks: %s", e)
            raise StoreError(str(e)) from e
        logger.debug("Tasks listed: %d", len(docs))
        return [_decode_task(d) for d in docs]

    async def update_fields(self, task_id: TaskId, fields: dict[str, Any]) -> int:
        if not fields:
            raise ValueError("update_fields requires at least one field")
        try:
            result = await self._collection().update_one({"id": int(task_id)}, {"$set": fields})
        except PyMongoError as e:
            logger.error("Error updating task: %s", e)
            raise StoreError(str(e)) from e
        # matched, not modified: setting a field to its current value still counts
        logger.debug("Task update matched: %d, modified: %d", result.matched_count, result.modified_count)
        return result.matched_count

    async def delete_by_id(self, task_id: TaskId) -> int:
        try:
            result = await self._collection().delete_one({"id": int(task_id)})
        except PyMongoError as e:
            logger.error("Error deleting task: %s", e)
            raise StoreError(str(e)) from e
        logger.debug("Task deleted: %d", result.deleted_count)
        return result.deleted_count
