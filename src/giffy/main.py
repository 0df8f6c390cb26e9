"""FastAPI application entry point."""

import time

from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers
from .lifecycle import lifespan
from .logging import configure_logging


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(cfg.log_level)
    app = FastAPI(title="Giffy", lifespan=lifespan)
    app.state.started_at = time.monotonic()
    include_routers(app, cfg)
    return app


app = create_app()
