from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator, Callable

import pytest

from photo_catalog.core.database import CatalogConnection, open_or_initialize
from photo_catalog.models.photo import Photo


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "photos.db"


@pytest.fixture
async def db(store_path: Path) -> AsyncIterator[CatalogConnection]:
    connection = await open_or_initialize(store_path)
    yield connection
    await connection.close()


@pytest.fixture
def make_photo() -> Callable[..., Photo]:
    def _make_photo(uid: str, path: str = "/photos", filename: str | None = None, md5: str = "") -> Photo:
        return Photo(
            filename=filename or f"{uid}.jpg",
            path=path,
            uid=uid,
            md5=md5 or f"md5-{uid}",
        )

    return _make_photo
