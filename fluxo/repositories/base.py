"""
Store interfaces consumed by the services.

The obligation and ledger stores are independent: nothing here spans both,
so callers that touch the two must order their calls themselves.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from fluxo.models.directory import Account, Category, Counterparty
from fluxo.models.ledger import LedgerEntry, SourceType
from fluxo.models.obligation import Obligation, ObligationKind


class ObligationStore(ABC):
    """CRUD over the obligations of a single kind."""

    kind: ObligationKind

    @abstractmethod
    async def get(self, obligation_id: str) -> Optional[Obligation]:
        ...

    @abstractmethod
    async def list(self) -> List[Obligation]:
        ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Obligation:
        ...

    @abstractmethod
    async def update(self, obligation_id: str, fields: Dict[str, Any]) -> Optional[Obligation]:
        """Apply a partial update. Returns None if the obligation does not exist."""
        ...

    @abstractmethod
    async def delete(self, obligation_id: str) -> bool:
        """Returns False if there was nothing to delete."""
        ...


class LedgerStore(ABC):
    """CRUD over ledger entries. No uniqueness is enforced on source references."""

    @abstractmethod
    async def list(self) -> List[LedgerEntry]:
        ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> LedgerEntry:
        ...

    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        ...

    async def get(self, entry_id: str) -> Optional[LedgerEntry]:
        for entry in await self.list():
            if entry.id == entry_id:
                return entry
        return None

    async def find_by_source(self, source_type: SourceType, source_id: str) -> List[LedgerEntry]:
        """All entries carrying the given source reference (list + filter)."""
        return [
            entry for entry in await self.list()
            if entry.is_linked_to(source_type, source_id)
        ]


class AccountDirectory(ABC):
    """Read-only lookups for accounts, counterparties and categories."""

    @abstractmethod
    async def list_accounts(self) -> List[Account]:
        ...

    @abstractmethod
    async def list_counterparties(self) -> List[Counterparty]:
        ...

    @abstractmethod
    async def list_categories(self) -> List[Category]:
        ...

    async def get_account(self, account_id: str) -> Optional[Account]:
        for account in await self.list_accounts():
            if account.id == account_id:
                return account
        return None

    async def get_counterparty(self, counterparty_id: str) -> Optional[Counterparty]:
        for counterparty in await self.list_counterparties():
            if counterparty.id == counterparty_id:
                return counterparty
        return None

    async def get_category(self, category_id: str) -> Optional[Category]:
        for category in await self.list_categories():
            if category.id == category_id:
                return category
        return None
