"""In-memory stores, used by the test suite and the `memory` storage backend."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fluxo.models.base import new_id
from fluxo.models.directory import Account, Category, Counterparty
from fluxo.models.ledger import LedgerEntry
from fluxo.models.obligation import Obligation, ObligationKind
from fluxo.repositories.base import AccountDirectory, LedgerStore, ObligationStore


class MemoryObligationStore(ObligationStore):

    def __init__(self, kind: ObligationKind):
        self.kind = kind
        self._items: Dict[str, Obligation] = {}

    async def get(self, obligation_id: str) -> Optional[Obligation]:
        item = self._items.get(obligation_id)
        return item.model_copy(deep=True) if item else None

    async def list(self) -> List[Obligation]:
        return [item.model_copy(deep=True) for item in self._items.values()]

    async def create(self, data: Dict[str, Any]) -> Obligation:
        obligation = Obligation.model_validate({
            **data,
            "id": data.get("id") or new_id(),
            "kind": self.kind
        })
        self._items[obligation.id] = obligation
        return obligation.model_copy(deep=True)

    async def update(self, obligation_id: str, fields: Dict[str, Any]) -> Optional[Obligation]:
        existing = self._items.get(obligation_id)
        if existing is None:
            return None

        merged = existing.model_dump()
        merged.update(fields)
        merged["id"] = obligation_id
        merged["kind"] = self.kind
        merged["updated_at"] = datetime.now(timezone.utc)

        updated = Obligation.model_validate(merged)
        self._items[obligation_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, obligation_id: str) -> bool:
        return self._items.pop(obligation_id, None) is not None


class MemoryLedgerStore(LedgerStore):

    def __init__(self):
        self._items: Dict[str, LedgerEntry] = {}

    async def list(self) -> List[LedgerEntry]:
        return [item.model_copy(deep=True) for item in self._items.values()]

    async def create(self, data: Dict[str, Any]) -> LedgerEntry:
        entry = LedgerEntry.model_validate({**data, "id": data.get("id") or new_id()})
        self._items[entry.id] = entry
        return entry.model_copy(deep=True)

    async def delete(self, entry_id: str) -> bool:
        return self._items.pop(entry_id, None) is not None


class MemoryAccountDirectory(AccountDirectory):

    def __init__(
        self,
        accounts: Optional[List[Account]] = None,
        counterparties: Optional[List[Counterparty]] = None,
        categories: Optional[List[Category]] = None
    ):
        self.accounts: List[Account] = []
        self.counterparties: List[Counterparty] = []
        self.categories: List[Category] = []
        for account in accounts or []:
            self.add(account)
        for counterparty in counterparties or []:
            self.add(counterparty)
        for category in categories or []:
            self.add(category)

    def add(self, item):
        """Register an Account, Counterparty or Category, assigning an id if missing."""
        if item.id is None:
            item = item.model_copy(update={"id": new_id()})
        if isinstance(item, Account):
            self.accounts.append(item)
        elif isinstance(item, Counterparty):
            self.counterparties.append(item)
        elif isinstance(item, Category):
            self.categories.append(item)
        else:
            raise TypeError(f"Unsupported directory item: {type(item).__name__}")
        return item

    async def list_accounts(self) -> List[Account]:
        return list(self.accounts)

    async def list_counterparties(self) -> List[Counterparty]:
        return list(self.counterparties)

    async def list_categories(self) -> List[Category]:
        return list(self.categories)
