"""
Error taxonomy for the obligation/ledger core.

- ValidationError: caller must supply missing or corrected input and retry.
- NotFoundError: benign for delete/unsettle, an error for settle.
- PersistenceError: a store call failed; `stage` says which half of a
  two-step operation failed and `partial` whether the first half was applied.
- DuplicateLedgerEntryError: more than one ledger entry carries the same
  source reference. Never resolved automatically.
"""

from typing import List, Optional


class FinanceError(Exception):
    """Base class for all domain errors."""
    pass


class ValidationError(FinanceError):
    """Missing or invalid input."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AccountSelectionRequired(ValidationError):
    """Settlement needs an account and none is known for the obligation."""

    def __init__(self, obligation_id: str, accounts: Optional[list] = None):
        super().__init__(
            f"Obligation {obligation_id} has no account; select one to settle it",
            field="account_id"
        )
        self.obligation_id = obligation_id
        self.accounts = accounts or []


class NotFoundError(FinanceError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(FinanceError):
    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        stage: Optional[str] = None,
        partial: bool = False,
        obligation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.operation = operation
        self.stage = stage
        self.partial = partial
        self.obligation_id = obligation_id


class DuplicateLedgerEntryError(FinanceError):
    def __init__(self, source_type: str, source_id: str, entry_ids: List[str]):
        super().__init__(
            f"{len(entry_ids)} ledger entries linked to {source_type} {source_id}: "
            f"{', '.join(entry_ids)}"
        )
        self.source_type = source_type
        self.source_id = source_id
        self.entry_ids = entry_ids
