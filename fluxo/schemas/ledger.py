from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from fluxo.models.directory import CategoryType
from fluxo.models.ledger import SourceType

class LedgerEntryCreate(BaseModel):
    kind: CategoryType
    counterparty_id: Optional[str] = None
    category_id: str = Field(..., min_length=1)
    account_id: Optional[str] = None
    value: Decimal = Field(..., gt=0)
    payment_date: datetime
    observations: Optional[str] = None

class LedgerEntryResponse(LedgerEntryCreate):
    id: str
    source_type: SourceType
    source_id: Optional[str] = None
    created_at: datetime
