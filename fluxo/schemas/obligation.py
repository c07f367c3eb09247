from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from fluxo.models.obligation import InstallmentType, ObligationKind, RecurrenceType
from fluxo.services.status import ObligationStatus
from fluxo.utils.formatting import coerce_date

class ObligationBase(BaseModel):
    counterparty_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    account_id: Optional[str] = None
    value: Decimal = Field(..., gt=0)
    due_date: date
    installment_type: InstallmentType = InstallmentType.SINGLE
    installments: Optional[int] = Field(default=None, ge=1)
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_count: Optional[int] = Field(default=None, ge=1)
    parent_id: Optional[str] = None
    observations: Optional[str] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        return coerce_date(value)

class ObligationCreate(ObligationBase):
    pass

class ObligationUpdate(BaseModel):
    """Editable fields. Settlement state changes only through settle/unsettle."""
    counterparty_id: Optional[str] = Field(default=None, min_length=1)
    category_id: Optional[str] = Field(default=None, min_length=1)
    account_id: Optional[str] = None
    value: Optional[Decimal] = Field(default=None, gt=0)
    due_date: Optional[date] = None
    installment_type: Optional[InstallmentType] = None
    installments: Optional[int] = Field(default=None, ge=1)
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_count: Optional[int] = Field(default=None, ge=1)
    parent_id: Optional[str] = None
    observations: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("due_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        return None if value is None else coerce_date(value)

class ObligationResponse(ObligationBase):
    id: str
    kind: ObligationKind
    settled: bool
    settled_date: Optional[datetime] = None
    counterparty_name: str
    category_name: str
    value_text: str
    due_date_text: str
    status: ObligationStatus
    status_label: str
    installment_label: str

    @classmethod
    def from_row(cls, row) -> "ObligationResponse":
        return cls(
            **row.obligation.model_dump(exclude={"created_at", "updated_at"}),
            counterparty_name=row.counterparty_name,
            category_name=row.category_name,
            value_text=row.value_text,
            due_date_text=row.due_date_text,
            status=row.status,
            status_label=row.status_label,
            installment_label=row.installment_label,
        )

class SettleRequest(BaseModel):
    account_id: Optional[str] = None

class BulkDeleteRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)
    confirm: bool = False

class DeletionResponse(BaseModel):
    obligation_id: str
    obligation_deleted: bool
    ledger_entries_deleted: List[str] = []

class BulkDeleteResponse(BaseModel):
    confirmed: bool
    deleted: List[DeletionResponse] = []
    remaining_ids: List[str] = []
