from __future__ import annotations

from pathlib import Path

from photo_catalog.core.config import DEFAULT_SCHEMA_PATH, Settings


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_PATH", raising=False)
    monkeypatch.delenv("SCHEMA_PATH", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    settings = Settings(_env_file=None)

    assert settings.DATABASE_PATH == "photos.db"
    assert Path(settings.SCHEMA_PATH) == DEFAULT_SCHEMA_PATH
    assert settings.LOG_LEVEL == "INFO"


def test_environment_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "gallery.db"))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings(_env_file=None)

    assert settings.DATABASE_PATH == str(tmp_path / "gallery.db")
    assert settings.LOG_LEVEL == "DEBUG"


def test_env_file(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("DATABASE_PATH", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("DATABASE_PATH=/srv/gallery/photos.db\n")

    settings = Settings(_env_file=env_file)

    assert settings.DATABASE_PATH == "/srv/gallery/photos.db"
