from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import asynccontextmanager
from os import PathLike
from pathlib import Path
from typing import AsyncIterator

from sqlalchemy import pool, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from photo_catalog.core.config import settings
from photo_catalog.core.errors import BootstrapError, CatalogError
from photo_catalog.models.photo import PHOTO_TABLE_NAME

logger = logging.getLogger(__name__)

_TABLE_EXISTS = text("SELECT name FROM sqlite_master WHERE type='table' AND name=:name")


def database_url(store_path: str | PathLike[str]) -> str:
    return f"sqlite+aiosqlite:///{store_path}"


class CatalogConnection:
    """The one connection to the catalog store, shared by every caller.

    All access goes through ``acquire()``, which holds an asyncio lock for the
    duration of one logical operation and runs that operation in a single
    transaction. Reads and writes share the same exclusive section. A failure
    inside the section rolls the transaction back and releases the lock.
    """

    def __init__(self, engine: AsyncEngine, connection: AsyncConnection) -> None:
        self._engine = engine
        self._connection = connection
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def closed(self) -> bool:
        return self._closed

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[AsyncConnection]:
        async with self._lock:
            if self._closed:
                raise CatalogError("The catalog connection is closed")
            async with self._connection.begin():
                yield self._connection

    async def close(self) -> None:
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            await self._connection.close()
            await self._engine.dispose()

    async def __aenter__(self) -> "CatalogConnection":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


async def _table_exists(connection: AsyncConnection) -> bool:
    try:
        result = await connection.execute(_TABLE_EXISTS, {"name": PHOTO_TABLE_NAME})
        name = result.scalar_one_or_none()
        await connection.commit()
    except SQLAlchemyError as exc:
        raise BootstrapError(f"Unable to read from the database: {exc}") from exc
    return name is not None


async def _apply_schema(connection: AsyncConnection, schema_path: str | PathLike[str]) -> None:
    try:
        schema = Path(schema_path).read_text(encoding="utf-8")
    except OSError as exc:
        raise BootstrapError(f'Unable to open "{schema_path}": {exc}') from exc

    try:
        raw_connection = await connection.get_raw_connection()
        await raw_connection.driver_connection.executescript(schema)
    except (SQLAlchemyError, sqlite3.Error) as exc:
        raise BootstrapError(f'Unable to apply "{schema_path}": {exc}') from exc


async def open_or_initialize(
    store_path: str | PathLike[str] | None = None,
    schema_path: str | PathLike[str] | None = None,
) -> CatalogConnection:
    """Open the catalog store, creating it and its schema when missing.

    The schema script is only run when the ``photo`` table does not exist yet,
    so calling this against an initialized store is a no-op beyond the check.
    Any failure raises BootstrapError; nothing is handed out in that case.
    """
    store_path = store_path if store_path is not None else settings.DATABASE_PATH
    schema_path = schema_path if schema_path is not None else settings.SCHEMA_PATH

    engine = create_async_engine(database_url(store_path), echo=False, poolclass=pool.NullPool)
    try:
        connection = await engine.connect()
    except SQLAlchemyError as exc:
        await engine.dispose()
        raise BootstrapError(f"Unable to open the database {store_path}: {exc}") from exc

    try:
        if not await _table_exists(connection):
            logger.info("Database %s is empty, creating schema from %s", store_path, schema_path)
            await _apply_schema(connection, schema_path)
            if not await _table_exists(connection):
                raise BootstrapError(
                    f'Schema "{schema_path}" did not create the "{PHOTO_TABLE_NAME}" table'
                )
            logger.info("Schema created")
    except Exception:
        await connection.close()
        await engine.dispose()
        raise

    return CatalogConnection(engine, connection)
