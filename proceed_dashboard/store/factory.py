# === proceed_dashboard/store/factory.py ===
import logging

from proceed_dashboard.core.config import Settings
from proceed_dashboard.store.base import VersionStore
from proceed_dashboard.store.memory import InMemoryVersionStore

logger = logging.getLogger(__name__)


async def build_store(settings: Settings) -> VersionStore:
    """In-memory store unless a DATABASE_URL is configured."""
    if not settings.DATABASE_URL:
        logger.info(f"Using in-memory version store (history limit {settings.VERSION_HISTORY_LIMIT})")
        return InMemoryVersionStore(history_limit=settings.VERSION_HISTORY_LIMIT)

    from proceed_dashboard.db.database import create_engine
    from proceed_dashboard.store.sql import SqlVersionStore

    engine = create_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    store = SqlVersionStore(engine, history_limit=settings.VERSION_HISTORY_LIMIT)
    await store.init()
    logger.info(f"Using database version store (history limit {settings.VERSION_HISTORY_LIMIT})")
    return store
