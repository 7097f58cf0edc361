import asyncio
import logging
import sys

from photo_catalog.core.config import settings
from photo_catalog.core.database import CatalogConnection, open_or_initialize
from photo_catalog.core.errors import BootstrapError

logger = logging.getLogger("photo_catalog")


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def startup() -> CatalogConnection:
    """Open the configured catalog, terminating the process if it cannot be initialized."""
    try:
        db = await open_or_initialize(settings.DATABASE_PATH, settings.SCHEMA_PATH)
    except BootstrapError as exc:
        logger.error("Error, unable to initialize the catalog: %s", exc)
        sys.exit(-1)
    logger.info("Catalog ready at %s", settings.DATABASE_PATH)
    return db


async def _bootstrap_only() -> None:
    db = await startup()
    await db.close()


def main() -> None:
    configure_logging()
    asyncio.run(_bootstrap_only())


if __name__ == "__main__":
    main()
