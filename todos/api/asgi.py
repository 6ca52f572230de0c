"""ASGI entry point for servers and serverless adapters: `uvicorn todos.api.asgi:app`."""
from todos.api.app import create_app
from todos.api.logs import configure_logging
from todos.config import Settings

settings = Settings.from_env()
configure_logging(settings.log_level)

app = create_app(settings)
