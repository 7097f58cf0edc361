from photo_catalog.core.database import CatalogConnection, open_or_initialize
from photo_catalog.core.errors import (
    BootstrapError,
    CatalogError,
    ConstraintViolation,
    DuplicateUidError,
    InvalidSortColumnError,
    RowDecodeError,
    StatementError,
)
from photo_catalog.models.photo import Photo

__all__ = [
    "CatalogConnection",
    "open_or_initialize",
    "Photo",
    "CatalogError",
    "BootstrapError",
    "StatementError",
    "InvalidSortColumnError",
    "ConstraintViolation",
    "DuplicateUidError",
    "RowDecodeError",
]
