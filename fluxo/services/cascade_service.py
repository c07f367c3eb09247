"""
Cascade deleter - removes an obligation together with its linked ledger
entry. Ledger entries go first so no entry is ever left pointing at a
missing obligation. Sibling installments (parent_id) are never touched.
"""

from dataclasses import dataclass, field
from typing import List

import structlog

from fluxo.repositories.base import LedgerStore, ObligationStore
from fluxo.services.common import find_linked_entries, guarded

logger = structlog.get_logger(__name__)


@dataclass
class DeletionResult:
    obligation_id: str
    obligation_deleted: bool
    ledger_entries_deleted: List[str] = field(default_factory=list)


class CascadeDeleteService:

    def __init__(self, obligations: ObligationStore, ledger: LedgerStore):
        self.obligations = obligations
        self.ledger = ledger
        self.kind = obligations.kind

    async def delete_obligation(self, obligation_id: str) -> DeletionResult:
        """Delete an obligation and its linked ledger entries. Idempotent."""
        obligation = await guarded(
            self.obligations.get(obligation_id), "obligation_lookup", obligation_id
        )

        # Linked entries go whatever the settled flag says
        linked = await guarded(
            find_linked_entries(self.ledger, self.kind, obligation_id),
            "ledger_lookup",
            obligation_id
        )
        if obligation is not None and not obligation.settled and linked:
            logger.warning(
                "Unsettled obligation had linked ledger entries",
                kind=self.kind.value,
                obligation_id=obligation_id,
                entry_ids=[entry.id for entry in linked]
            )

        removed: List[str] = []
        for entry in linked:
            await guarded(
                self.ledger.delete(entry.id),
                "ledger_delete",
                obligation_id,
                partial=bool(removed)
            )
            removed.append(entry.id)

        if obligation is None:
            logger.info(
                "Obligation already deleted",
                kind=self.kind.value,
                obligation_id=obligation_id,
                removed_entries=len(removed)
            )
            return DeletionResult(obligation_id, False, removed)

        deleted = await guarded(
            self.obligations.delete(obligation_id),
            "obligation_delete",
            obligation_id,
            partial=bool(removed)
        )
        logger.info(
            "Obligation deleted",
            kind=self.kind.value,
            obligation_id=obligation_id,
            removed_entries=len(removed)
        )
        return DeletionResult(obligation_id, deleted, removed)
