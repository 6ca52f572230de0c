from __future__ import annotations
from typing import Any
import asyncio
import logging
import sqlalchemy as db
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from pathlib import Path
from todos.ports.task_store import TaskStore
from todos.domain.task import Task, TaskId
from todos.domain.errors import TaskAlreadyExistsError, StoreError

logger = logging.getLogger(__name__)

class SqlTaskStore(TaskStore):
    def __init__(self, url: str | Path) -> None:
        """
        url: e.g. 'sqlite:///data/tasks.db' or a Path to a file (turned into a sqlite URL)
        """
        if isinstance(url, Path):
            # absolute path -> sqlite:////abs/path.db
            self.url = f"sqlite:///{url}"
        else:
            self.url = url

        self.engine: Engine | None = None
        self.meta = db.MetaData()

        # `_id` is the storage key, `id` the logical identifier
        self.tasks = db.Table(
            "tasks",
            self.meta,
            db.Column("_id", db.Integer, primary_key=True, autoincrement=True),
            db.Column("id", db.Integer, nullable=False, unique=True),
            db.Column("title", db.String, nullable=False),
            db.Column("completed", db.Boolean, nullable=False, default=False),
        )

    def _create_engine(self) -> Engine:
        url = make_url(self.url)
        if url.get_backend_name() != "sqlite":
            return db.create_engine(url)
        if url.database:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            return db.create_engine(url, connect_args={"check_same_thread": False})
        # in-memory database shared by every worker thread
        return db.create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)

    def _from_row(self, row: db.RowMapping | dict) -> Task:
        return Task(
            id=TaskId(row["id"]),
            title=row["title"],
            completed=bool(row["completed"]),
        )

    def _engine(self) -> Engine:
        if self.engine is None:
            raise StoreError("store is not connected")
        return self.engine

    async def _run(self, fn, *args):
        # SQLAlchemy Core is blocking; keep it off the event loop
        try:
            return await asyncio.to_thread(fn, *args)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error("SQL task store failure: %s", e)
            raise StoreError(str(e)) from e

    async def connect(self) -> None:
        def _connect() -> Engine:
            engine = self._create_engine()
            # create the table if it does not exist
            self.meta.create_all(engine)
            return engine

        self.engine = await self._run(_connect)
        logger.info("Connected to SQL task store: %s", make_url(self.url).render_as_string(hide_password=True))

    async def close(self) -> None:
        if self.engine is None:
            return
        try:
            await asyncio.to_thread(self.engine.dispose)
            logger.info("SQL task store closed")
        except SQLAlchemyError as e:
            logger.warning("Error closing SQL task store: %s", e)
        finally:
            self.engine = None

    async def insert(self, task: Task) -> str:
        stmt = db.insert(self.tasks).values(id=int(task.id), title=task.title, completed=task.completed)

        def _insert() -> str:
            with self._engine().begin() as conn:
                result = conn.execute(stmt)
                return str(result.inserted_primary_key[0])

        try:
            key = await self._run(_insert)
        except IntegrityError as e:
            # UNIQUE(id) conflict
            raise TaskAlreadyExistsError(task.id) from e
        logger.debug("Task inserted: %s", key)
        return key

    async def list_all(self) -> list[Task]:
        stmt = db.select(self.tasks).order_by(self.tasks.c["_id"].asc())

        def _list() -> list[Task]:
            with self._engine().connect() as conn:
                rows = conn.execute(stmt).mappings().all()
                return [self._from_row(r) for r in rows]

        tasks = await self._run(_list)
        logger.debug("Tasks listed: %d", len(tasks))
        return tasks

    async def update_fields(self, task_id: TaskId, fields: dict[str, Any]) -> int:
        if not fields:
            raise ValueError("update_fields requires at least one field")
        stmt = (
            db.update(self.tasks)
            .where(self.tasks.c.id == int(task_id))
            .values(**fields)
        )

        def _update() -> int:
            # rowcount counts matched rows, also when the values did not change
            with self._engine().begin() as conn:
                return conn.execute(stmt).rowcount

        matched = await self._run(_update)
        logger.debug("Task update matched: %d", matched)
        return matched

    async def delete_by_id(self, task_id: TaskId) -> int:
        stmt = db.delete(self.tasks).where(self.tasks.c.id == int(task_id))

        def _delete() -> int:
            with self._engine().begin() as conn:
                return conn.execute(stmt).rowcount

        deleted = await self._run(_delete)
        logger.debug("Task deleted: %d", deleted)
        return deleted
