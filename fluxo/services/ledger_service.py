from typing import List, Optional

import structlog

from fluxo.core.exceptions import NotFoundError, ValidationError
from fluxo.models.ledger import LedgerEntry, SourceType
from fluxo.repositories.base import AccountDirectory, LedgerStore
from fluxo.schemas.ledger import LedgerEntryCreate
from fluxo.utils.obligation_validation import (
    validate_account,
    validate_category,
    validate_value,
)

logger = structlog.get_logger(__name__)


class LedgerService:
    """Manual ledger entries. Linked entries belong to the settlement synchronizer."""

    def __init__(self, ledger: LedgerStore, directory: AccountDirectory):
        self.ledger = ledger
        self.directory = directory

    async def list(self, source_type: Optional[SourceType] = None) -> List[LedgerEntry]:
        entries = await self.ledger.list()
        if source_type is not None:
            entries = [entry for entry in entries if entry.source_type is source_type]
        return sorted(entries, key=lambda entry: entry.payment_date, reverse=True)

    async def create_manual(self, entry_in: LedgerEntryCreate) -> LedgerEntry:
        data = entry_in.model_dump()
        validate_value(data["value"])

        category = await self.directory.get_category(data["category_id"])
        validate_category(entry_in.kind, category, data["category_id"])
        if data.get("account_id"):
            validate_account(await self.directory.get_account(data["account_id"]), data["account_id"])

        entry = await self.ledger.create({
            **data,
            "source_type": SourceType.MANUAL,
            "source_id": None
        })
        logger.info("Manual ledger entry created", entry_id=entry.id, kind=entry.kind.value)
        return entry

    async def delete_manual(self, entry_id: str) -> None:
        entry = await self.ledger.get(entry_id)
        if entry is None:
            raise NotFoundError("ledger entry", entry_id)
        if entry.source_type is not SourceType.MANUAL:
            raise ValidationError(
                f"Ledger entry {entry_id} belongs to {entry.source_type.value} {entry.source_id}; "
                "unsettle or delete the obligation instead",
                field="entry_id"
            )
        await self.ledger.delete(entry_id)
        logger.info("Manual ledger entry deleted", entry_id=entry_id)
