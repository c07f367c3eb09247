"""
Store bundle handed to the services.

Routes never reach for a global collection; they receive a `Stores` through
the `get_stores` dependency, which tests override with in-memory stores.
"""

from dataclasses import dataclass, field

from fluxo.core.config import settings
from fluxo.db.mongo import get_db
from fluxo.models.obligation import ObligationKind
from fluxo.repositories.base import AccountDirectory, LedgerStore, ObligationStore
from fluxo.repositories.directory_repo import DirectoryRepository
from fluxo.repositories.ledger_repo import LedgerRepository
from fluxo.repositories.memory import (
    MemoryAccountDirectory,
    MemoryLedgerStore,
    MemoryObligationStore,
)
from fluxo.repositories.obligation_repo import ObligationRepository


@dataclass
class Stores:
    payables: ObligationStore
    receivables: ObligationStore
    ledger: LedgerStore
    directory: AccountDirectory

    def obligations(self, kind: ObligationKind) -> ObligationStore:
        if kind is ObligationKind.PAYABLE:
            return self.payables
        return self.receivables


def memory_stores() -> Stores:
    return Stores(
        payables=MemoryObligationStore(ObligationKind.PAYABLE),
        receivables=MemoryObligationStore(ObligationKind.RECEIVABLE),
        ledger=MemoryLedgerStore(),
        directory=MemoryAccountDirectory()
    )


def mongo_stores(db) -> Stores:
    return Stores(
        payables=ObligationRepository(db, ObligationKind.PAYABLE),
        receivables=ObligationRepository(db, ObligationKind.RECEIVABLE),
        ledger=LedgerRepository(db),
        directory=DirectoryRepository(db)
    )


@dataclass
class _MemoryBackend:
    stores: Stores = field(default_factory=memory_stores)

_memory_backend = _MemoryBackend()


def get_stores() -> Stores:
    """FastAPI dependency returning the configured store bundle."""
    if settings.STORAGE_BACKEND == "memory":
        return _memory_backend.stores
    return mongo_stores(get_db())
