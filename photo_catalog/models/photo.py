from __future__ import annotations

from typing import Any, Sequence

from pydantic import BaseModel, ValidationError
from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table

from photo_catalog.core.errors import RowDecodeError

PHOTO_TABLE_NAME = "photo"

metadata = MetaData()

# Column order must match schema.sql; row_to_photo reads rows positionally.
photo_table = Table(
    PHOTO_TABLE_NAME,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("filename", String(255), nullable=False),
    Column("path", String(4096), nullable=False),
    Column("uid", String(16), nullable=False, unique=True),
    Column("md5", String(32), nullable=False),
    Column("sort_order", Integer, nullable=False),
    Column("hidden", Boolean, nullable=False),
    Column("metadata_parsed", Boolean, nullable=False),
    Column("width", Integer, nullable=True),
    Column("height", Integer, nullable=True),
    Column("color", String(16), nullable=False),
    Column("title", String(255), nullable=False),
    Column("place", String(255), nullable=False),
    Column("date_taken", String(16), nullable=False),
    Column("camera_model", String(255), nullable=False),
    Column("lens_mode", String(255), nullable=False),
    Column("focal_length", String(16), nullable=False),
    Column("aperture", String(16), nullable=False),
    Column("exposure_time", String(16), nullable=False),
    Column("sensitivity", String(16), nullable=False),
)

PHOTO_COLUMNS: tuple[str, ...] = tuple(photo_table.c.keys())
SORTABLE_COLUMNS = frozenset(PHOTO_COLUMNS)

# Columns written by the metadata extraction step, not by the scanner.
METADATA_COLUMNS: tuple[str, ...] = PHOTO_COLUMNS[PHOTO_COLUMNS.index("sort_order"):]


class Photo(BaseModel):
    id: int | None = None
    filename: str
    path: str
    uid: str
    md5: str = ""
    sort_order: int = 0
    hidden: bool = False
    metadata_parsed: bool = False
    width: int = 0
    height: int = 0
    color: str = "000000"
    title: str = ""
    place: str = ""
    date_taken: str = ""
    camera_model: str = ""
    lens_mode: str = ""
    focal_length: str = ""
    aperture: str = ""
    exposure_time: str = ""
    sensitivity: str = ""


def row_to_photo(row: Sequence[Any], index: int = 0) -> Photo:
    """Build a Photo from one ``photo`` row, in the column order of schema.sql.

    NULL columns take the field default of the Photo model. A row with the
    wrong number of columns, or a value that cannot be coerced to the field
    type, raises RowDecodeError for that row.
    """
    values = tuple(row)
    if len(values) != len(PHOTO_COLUMNS):
        raise RowDecodeError(
            index,
            values,
            f"expected {len(PHOTO_COLUMNS)} columns, got {len(values)}",
        )

    data: dict[str, Any] = {}
    for name, value in zip(PHOTO_COLUMNS, values):
        field = Photo.model_fields[name]
        if value is None and not field.is_required():
            value = field.get_default()
        data[name] = value

    try:
        return Photo.model_validate(data)
    except ValidationError as exc:
        raise RowDecodeError(index, values, str(exc)) from exc
