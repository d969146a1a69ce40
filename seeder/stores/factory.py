"""Store factory: returns the in-memory or database store based on config.

In memory mode, samples live for the life of the process.
In database mode, samples are written to the health_samples table.
Both implement the same HealthStore protocol.
"""

from seeder.stores.protocol import HealthStore
from shared.config import settings


def get_store() -> HealthStore:
    """Return the store selected by HKS_STORE_MODE."""
    if settings.store_mode == "database":
        return _get_database_store()
    return _get_memory_store()


def _get_memory_store() -> HealthStore:
    from seeder.stores.memory import InMemoryHealthStore

    return InMemoryHealthStore(
        available=settings.memory_store_available,
        authorizes=settings.memory_store_authorizes,
    )


def _get_database_store() -> HealthStore:
    from seeder.stores.sql import SqlHealthStore
    from shared.database import get_session_factory

    return SqlHealthStore(get_session_factory())
