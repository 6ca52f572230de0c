from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Literal, Mapping
import os

from todos.ports.task_store import TaskStore

StoreKind = Literal["mongo", "sql", "memory"]
ConnectionPolicy = Literal["process", "request"]

STORE_KINDS = ("mongo", "sql", "memory")
CONNECTION_POLICIES = ("process", "request")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read from the environment.

    `connection` picks the store lifetime: `process` opens it once for the
    whole app, `request` opens and closes it around every request (stateless
    and serverless deployments).
    """
    store: StoreKind = "mongo"
    mongo_uri: str = "mongodb://localhost:27017"
    db_name: str = "todos"
    collection_name: str = "tasks"
    database_url: str = "sqlite:///data/tasks.db"
    connection: ConnectionPolicy = "process"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.store not in STORE_KINDS:
            raise ValueError(f"unknown store {self.store!r}, expected one of {', '.join(STORE_KINDS)}")
        if self.connection not in CONNECTION_POLICIES:
            raise ValueError(
                f"unknown connection policy {self.connection!r}, expected one of {', '.join(CONNECTION_POLICIES)}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            store=env.get("TODOS_STORE", defaults.store),
            mongo_uri=env.get("MONGO_URI", defaults.mongo_uri),
            db_name=env.get("DB_NAME", defaults.db_name),
            collection_name=env.get("COLLECTION_NAME", defaults.collection_name),
            database_url=env.get("DATABASE_URL", defaults.database_url),
            connection=env.get("TODOS_CONNECTION", defaults.connection),
            host=env.get("HOST", defaults.host),
            port=int(env.get("PORT", defaults.port)),
            log_level=env.get("LOG_LEVEL", defaults.log_level),
        )

    def with_overrides(self, **overrides) -> Settings:
        """Returns a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def build_store(settings: Settings) -> TaskStore:
    """Creates (but does not connect) the store selected by `settings.store`."""
    if settings.store == "mongo":
        from todos.adapters.mongo.task_store import MongoTaskStore
        return MongoTaskStore(settings.mongo_uri, settings.db_name, settings.collection_name)
    if settings.store == "sql":
        from todos.adapters.sql.task_store import SqlTaskStore
        return SqlTaskStore(settings.database_url)
    from todos.adapters.memory.task_store import InMemoryTaskStore
    return InMemoryTaskStore()
