"""
Settlement synchronizer - keeps an obligation's settled flag and its linked
ledger entry in step.

Settle:   obligation flag first, then ledger entry (skipped if one exists).
Unsettle: obligation flag first, then linked ledger entry removed.

The two stores share no transaction. A failure between the two calls leaves
the obligation updated without its ledger counterpart; the PersistenceError
says so (stage, partial=True) and re-running the same operation repairs it,
because both operations look up the linked entry before acting.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from fluxo.core.exceptions import (
    AccountSelectionRequired,
    DuplicateLedgerEntryError,
    NotFoundError,
    ValidationError,
)
from fluxo.models.obligation import Obligation
from fluxo.repositories.base import AccountDirectory, LedgerStore, ObligationStore
from fluxo.services.common import find_linked_entries, guarded

logger = structlog.get_logger(__name__)


class SettlementService:
    """Settle/unsettle for one obligation kind (payables or receivables)."""

    def __init__(
        self,
        obligations: ObligationStore,
        ledger: LedgerStore,
        directory: AccountDirectory
    ):
        self.obligations = obligations
        self.ledger = ledger
        self.directory = directory
        self.kind = obligations.kind

    async def settle(
        self,
        obligation_id: str,
        account_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Obligation:
        """
        Mark an obligation as paid/received and record its ledger entry.

        Raises:
        - NotFoundError if the obligation does not exist
        - AccountSelectionRequired if neither the obligation nor the caller
          provides an account
        - ValidationError if the supplied account is unknown
        - DuplicateLedgerEntryError if more than one linked entry exists
        - PersistenceError if a store call fails
        """
        obligation = await guarded(
            self.obligations.get(obligation_id), "obligation_lookup", obligation_id
        )
        if obligation is None:
            raise NotFoundError(self.kind.value, obligation_id)

        resolved_account = account_id or obligation.account_id
        if not resolved_account:
            accounts = await guarded(
                self.directory.list_accounts(), "account_lookup", obligation_id
            )
            logger.info(
                "Account selection required",
                kind=self.kind.value,
                obligation_id=obligation_id
            )
            raise AccountSelectionRequired(obligation_id, accounts)

        if account_id and account_id != obligation.account_id:
            account = await guarded(
                self.directory.get_account(account_id), "account_lookup", obligation_id
            )
            if account is None:
                raise ValidationError(f"Account {account_id} not found", field="account_id")

        linked = await guarded(
            find_linked_entries(self.ledger, self.kind, obligation_id),
            "ledger_lookup",
            obligation_id
        )
        if len(linked) > 1:
            entry_ids = [entry.id for entry in linked]
            logger.error(
                "Duplicate ledger entries for obligation",
                kind=self.kind.value,
                obligation_id=obligation_id,
                entry_ids=entry_ids
            )
            raise DuplicateLedgerEntryError(self.kind.value, obligation_id, entry_ids)

        settled_at = now or datetime.now(timezone.utc)
        fields: Dict[str, Any] = {"settled": True, "settled_date": settled_at}

        if linked:
            # Entry already recorded: refresh the flag only
            updated = await self._update(obligation_id, fields)
            logger.info(
                "Obligation settled, existing ledger entry kept",
                kind=self.kind.value,
                obligation_id=obligation_id,
                entry_id=linked[0].id
            )
            return updated

        if resolved_account != obligation.account_id:
            fields["account_id"] = resolved_account

        updated = await self._update(obligation_id, fields)

        entry = await guarded(
            self.ledger.create(self._ledger_entry_for(updated, resolved_account)),
            "ledger_create",
            obligation_id,
            partial=True
        )
        logger.info(
            "Obligation settled",
            kind=self.kind.value,
            obligation_id=obligation_id,
            entry_id=entry.id,
            value=str(updated.value)
        )
        return updated

    async def unsettle(self, obligation_id: str) -> Optional[Obligation]:
        """
        Clear the settled flag and remove the linked ledger entry.

        Safe to repeat: a missing obligation or a missing entry is not an
        error. Returns the updated obligation, or None if it does not exist.
        """
        obligation = await guarded(
            self.obligations.get(obligation_id), "obligation_lookup", obligation_id
        )

        updated = None
        if obligation is None:
            logger.info(
                "Unsettle on missing obligation",
                kind=self.kind.value,
                obligation_id=obligation_id
            )
        else:
            updated = await self._update(
                obligation_id, {"settled": False, "settled_date": None}
            )

        applied = updated is not None
        linked = await guarded(
            find_linked_entries(self.ledger, self.kind, obligation_id),
            "ledger_lookup",
            obligation_id,
            partial=applied
        )
        if len(linked) > 1:
            logger.warning(
                "Removing duplicate ledger entries",
                kind=self.kind.value,
                obligation_id=obligation_id,
                entry_ids=[entry.id for entry in linked]
            )

        for entry in linked:
            await guarded(
                self.ledger.delete(entry.id), "ledger_delete", obligation_id, partial=applied
            )

        logger.info(
            "Obligation unsettled",
            kind=self.kind.value,
            obligation_id=obligation_id,
            removed_entries=len(linked)
        )
        return updated

    async def _update(self, obligation_id: str, fields: Dict[str, Any]) -> Obligation:
        updated = await guarded(
            self.obligations.update(obligation_id, fields), "obligation_update", obligation_id
        )
        if updated is None:
            raise NotFoundError(self.kind.value, obligation_id)
        return updated

    def _ledger_entry_for(self, obligation: Obligation, account_id: str) -> Dict[str, Any]:
        return {
            "kind": self.kind.ledger_kind,
            "counterparty_id": obligation.counterparty_id,
            "category_id": obligation.category_id,
            "account_id": account_id,
            "value": obligation.value,
            "payment_date": obligation.settled_date,
            "observations": obligation.observations,
            "source_type": self.kind.source_type,
            "source_id": obligation.id,
        }
