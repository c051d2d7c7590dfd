"""FastAPI application hosting one nested-set tree."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from nestedset.api.router import get_tree_service
from nestedset.api.router import router as tree_router
from nestedset.config import TreeConfig
from nestedset.db.connection import Database
from nestedset.tree import NestedSetTree


def load_settings() -> tuple[str, TreeConfig]:
    """Database path and tree config from the environment (.env is read first)."""
    load_dotenv(Path.cwd() / ".env")
    db_path = os.environ.get("NESTEDSET_DB_PATH", "nestedset.db")
    config_path = os.environ.get("NESTEDSET_CONFIG")
    config = TreeConfig.from_yaml(config_path) if config_path else TreeConfig()
    return db_path, config


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage database lifecycle and service wiring."""
    db_path, config = load_settings()
    db = await Database.connect(db_path, config)

    service = NestedSetTree(db, config)
    app.dependency_overrides[get_tree_service] = lambda: service

    app.state.db = db
    yield

    await db.close()


app = FastAPI(
    title="nestedset",
    description="Nested-set (MPTT) tree storage over SQLite",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(tree_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
