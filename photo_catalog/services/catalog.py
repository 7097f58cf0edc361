from __future__ import annotations

import logging
import os
from os import PathLike
from typing import Any, Iterable, Sequence

from sqlalchemy import bindparam, delete, func, insert, or_, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql.expression import Executable

from photo_catalog.core.database import CatalogConnection
from photo_catalog.core.errors import (
    ConstraintViolation,
    DuplicateUidError,
    InvalidSortColumnError,
    StatementError,
)
from photo_catalog.models.photo import (
    METADATA_COLUMNS,
    PHOTO_TABLE_NAME,
    SORTABLE_COLUMNS,
    Photo,
    photo_table,
    row_to_photo,
)

logger = logging.getLogger(__name__)

_ENRICHED_COLUMNS = tuple(column for column in METADATA_COLUMNS if column != "metadata_parsed")

# Nullable columns where the model default means "unknown" and is stored as NULL.
_UNKNOWN_AS_NULL = frozenset({"width", "height"})


def _metadata_value(photo: Photo, column: str) -> Any:
    value = getattr(photo, column)
    if column in _UNKNOWN_AS_NULL and value == Photo.model_fields[column].get_default():
        return None
    return value


def _constraint_violation(exc: IntegrityError, uid: str | None) -> ConstraintViolation:
    message = str(exc.orig)
    if "UNIQUE" in message and f"{PHOTO_TABLE_NAME}.uid" in message:
        if uid is not None:
            message = f"Photo uid {uid!r} already exists ({message})"
        return DuplicateUidError(uid, message)
    return ConstraintViolation(message)


async def _execute(
    conn: AsyncConnection,
    statement: Executable,
    parameters: dict[str, Any] | list[dict[str, Any]] | None = None,
    uid: str | None = None,
) -> CursorResult[Any]:
    try:
        return await conn.execute(statement, parameters)
    except IntegrityError as exc:
        raise _constraint_violation(exc, uid) from exc
    except SQLAlchemyError as exc:
        raise StatementError(str(exc)) from exc


def _map_photos(rows: Iterable[Sequence[Any]]) -> list[Photo]:
    return [row_to_photo(row, index) for index, row in enumerate(rows)]


async def list_uids(db: CatalogConnection) -> list[str]:
    """Get the list of UIDs that exist in the catalog."""
    async with db.acquire() as conn:
        result = await _execute(conn, select(photo_table.c.uid))
        return list(result.scalars().all())


async def list_paths_with_prefix(db: CatalogConnection, prefix: str | PathLike[str]) -> list[str]:
    """Get the distinct known paths whose first characters are exactly ``prefix``.

    The match is on characters, not path segments: ``/a/b`` matches ``/a/bc``.
    """
    prefix = os.fspath(prefix)
    statement = (
        select(photo_table.c.path)
        .where(func.substr(photo_table.c.path, 1, len(prefix)) == prefix)
        .group_by(photo_table.c.path)
    )
    async with db.acquire() as conn:
        result = await _execute(conn, statement)
        return list(result.scalars().all())


async def list_paths_within(
    db: CatalogConnection,
    path: str | PathLike[str],
    separator: str = os.sep,
) -> list[str]:
    """Get the distinct known paths equal to ``path`` or nested below it."""
    path = os.fspath(path)
    child_prefix = path if path.endswith(separator) else path + separator
    statement = (
        select(photo_table.c.path)
        .where(
            or_(
                photo_table.c.path == path,
                func.substr(photo_table.c.path, 1, len(child_prefix)) == child_prefix,
            )
        )
        .group_by(photo_table.c.path)
    )
    async with db.acquire() as conn:
        result = await _execute(conn, statement)
        return list(result.scalars().all())


async def list_photos_in_paths(
    db: CatalogConnection,
    paths: Iterable[str | PathLike[str]],
) -> list[Photo]:
    """Get the photos registered in any of the given paths."""
    paths = list(dict.fromkeys(os.fspath(path) for path in paths))
    if not paths:
        return []

    statement = select(photo_table).where(photo_table.c.path.in_(paths))
    async with db.acquire() as conn:
        result = await _execute(conn, statement)
        return _map_photos(result)


async def list_photos_in_path(
    db: CatalogConnection,
    path: str | PathLike[str],
    sort_columns: Sequence[str],
    reverse: bool = False,
) -> list[Photo]:
    """Get the photos registered in ``path``, ordered by ``sort_columns``.

    Every column must be a Photo field; ``reverse`` turns all of them to
    descending order. With no sort columns the storage order is kept.
    """
    order_by = []
    for column in sort_columns:
        if column not in SORTABLE_COLUMNS:
            raise InvalidSortColumnError(column)
        order_by.append(photo_table.c[column].desc() if reverse else photo_table.c[column].asc())

    statement = select(photo_table).where(photo_table.c.path == os.fspath(path)).order_by(*order_by)
    async with db.acquire() as conn:
        result = await _execute(conn, statement)
        return _map_photos(result)


async def insert_photos(db: CatalogConnection, photos: Sequence[Photo]) -> None:
    """Insert new photos; only filename, path, uid and md5 are written.

    The batch is atomic: a duplicate uid raises DuplicateUidError and none
    of the photos of the call are kept.
    """
    if not photos:
        return

    statement = insert(photo_table)
    async with db.acquire() as conn:
        # One execute per photo so a conflict can be attributed to its uid.
        for photo in photos:
            parameters = {
                "filename": photo.filename,
                "path": photo.path,
                "uid": photo.uid,
                "md5": photo.md5,
            }
            await _execute(conn, statement, parameters, uid=photo.uid)
    logger.debug("Inserted %d photos", len(photos))


async def remove_photos(db: CatalogConnection, photos: Sequence[Photo]) -> None:
    """Remove photos by uid. Unknown uids are ignored."""
    if not photos:
        return

    statement = delete(photo_table).where(photo_table.c.uid == bindparam("target_uid"))
    async with db.acquire() as conn:
        await _execute(conn, statement, [{"target_uid": photo.uid} for photo in photos])
    logger.debug("Removed %d photos", len(photos))


async def move_photos(db: CatalogConnection, photo_pairs: Sequence[tuple[Photo, Photo]]) -> None:
    """Rename/move photos: each ``(old, new)`` pair gives the row of ``old.uid``
    the filename and path of ``new``. Unknown uids are ignored.
    """
    if not photo_pairs:
        return

    statement = (
        update(photo_table)
        .where(photo_table.c.uid == bindparam("target_uid"))
        .values(filename=bindparam("new_filename"), path=bindparam("new_path"))
    )
    parameters = [
        {"target_uid": old.uid, "new_filename": new.filename, "new_path": new.path}
        for old, new in photo_pairs
    ]
    async with db.acquire() as conn:
        await _execute(conn, statement, parameters)
    logger.debug("Moved %d photos", len(photo_pairs))


async def update_photos_metadata(db: CatalogConnection, photos: Sequence[Photo]) -> None:
    """Store extracted metadata for photos, matched by uid, and flag them as parsed."""
    if not photos:
        return

    values = {column: bindparam(f"new_{column}") for column in _ENRICHED_COLUMNS}
    statement = (
        update(photo_table)
        .where(photo_table.c.uid == bindparam("target_uid"))
        .values(metadata_parsed=True, **values)
    )
    parameters = [
        {
            "target_uid": photo.uid,
            **{f"new_{column}": _metadata_value(photo, column) for column in _ENRICHED_COLUMNS},
        }
        for photo in photos
    ]
    async with db.acquire() as conn:
        await _execute(conn, statement, parameters)
    logger.debug("Updated metadata of %d photos", len(photos))
