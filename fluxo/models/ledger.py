"""
Ledger entry model - a recorded cash movement.

Entries created from a settled obligation carry a source reference
(source_type, source_id) back to it. Manual entries have no source_id.
At most one entry exists per non-manual source reference; the settlement
synchronizer enforces this, the stores do not.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator

from fluxo.models.base import DomainModel, _utcnow
from fluxo.models.directory import CategoryType
from fluxo.utils.formatting import ensure_utc


class SourceType(str, Enum):
    MANUAL = "manual"
    PAYABLE = "payable"
    RECEIVABLE = "receivable"


class LedgerEntry(DomainModel):
    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="_id")

    kind: CategoryType  # revenue | expense
    counterparty_id: Optional[str] = None
    category_id: str
    account_id: Optional[str] = None

    value: Decimal
    payment_date: datetime
    observations: Optional[str] = None

    source_type: SourceType = SourceType.MANUAL
    source_id: Optional[str] = None

    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("payment_date")
    @classmethod
    def _aware_payment_date(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_source(self) -> "LedgerEntry":
        if (self.source_type is SourceType.MANUAL) != (self.source_id is None):
            raise ValueError("source_id must be present exactly when source_type is not manual")
        return self

    def is_linked_to(self, source_type: SourceType, source_id: str) -> bool:
        return self.source_type is source_type and self.source_id == source_id
