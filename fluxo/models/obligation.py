"""
Obligation model - money owed to (receivable) or by (payable) the business.

Invariants:
- settled is True iff settled_date is set
- installments only for installment plans, recurrence_* only for recurring ones
- value is a positive Decimal, never rounded
- due_date is a calendar date with no time-of-day or timezone
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator

from fluxo.models.base import DomainModel, _utcnow
from fluxo.models.directory import CategoryType, CounterpartyRole
from fluxo.models.ledger import SourceType
from fluxo.utils.formatting import coerce_date, ensure_utc


class ObligationKind(str, Enum):
    PAYABLE = "payable"
    RECEIVABLE = "receivable"

    @property
    def ledger_kind(self) -> CategoryType:
        """Kind of cash movement recorded when the obligation is settled."""
        if self is ObligationKind.RECEIVABLE:
            return CategoryType.REVENUE
        return CategoryType.EXPENSE

    @property
    def category_type(self) -> CategoryType:
        return self.ledger_kind

    @property
    def counterparty_role(self) -> CounterpartyRole:
        if self is ObligationKind.RECEIVABLE:
            return CounterpartyRole.CLIENT
        return CounterpartyRole.SUPPLIER

    @property
    def source_type(self) -> SourceType:
        return SourceType(self.value)


class InstallmentType(str, Enum):
    SINGLE = "single"
    INSTALLMENT = "installment"
    RECURRING = "recurring"


class RecurrenceType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class Obligation(DomainModel):
    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="_id")
    kind: ObligationKind

    # References
    counterparty_id: str  # client for receivables, supplier for payables
    category_id: str
    account_id: Optional[str] = None

    # Financial
    value: Decimal
    due_date: date

    # Settlement
    settled: bool = False
    settled_date: Optional[datetime] = None

    # Plan shape; generating the sibling instances happens elsewhere
    installment_type: InstallmentType = InstallmentType.SINGLE
    installments: Optional[int] = None
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_count: Optional[int] = None
    parent_id: Optional[str] = None  # lookup only, never an ownership link

    observations: Optional[str] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("due_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        return coerce_date(value)

    @field_validator("settled_date")
    @classmethod
    def _aware_settled_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @field_validator("value")
    @classmethod
    def _positive_value(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("value must be positive")
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "Obligation":
        if self.settled != (self.settled_date is not None):
            raise ValueError("settled_date must be present exactly when settled is true")

        if self.installment_type is not InstallmentType.INSTALLMENT and self.installments is not None:
            raise ValueError("installments only apply to installment plans")
        if self.installment_type is not InstallmentType.RECURRING and (
            self.recurrence_type is not None or self.recurrence_count is not None
        ):
            raise ValueError("recurrence fields only apply to recurring plans")
        return self

    @property
    def source_type(self) -> SourceType:
        return self.kind.source_type
