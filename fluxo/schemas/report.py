from typing import List
from pydantic import BaseModel
from decimal import Decimal
from fluxo.services.status import ObligationStatus

class StatusBucket(BaseModel):
    status: ObligationStatus
    label: str
    count: int = 0
    total: Decimal = Decimal("0")

class CategoryTotal(BaseModel):
    category_id: str
    category_name: str
    total: Decimal
    settled: Decimal
    open: Decimal

class MonthTotal(BaseModel):
    month: str  # YYYY-MM
    count: int
    total: Decimal
    settled: Decimal
    open: Decimal

class StatusSummary(BaseModel):
    buckets: List[StatusBucket]
    count: int
    total: Decimal

class CashSummary(BaseModel):
    month: str

    # Cash actually moved in the month
    settled_expenses: Decimal
    settled_revenues: Decimal
    manual_expenses: Decimal
    manual_revenues: Decimal
    total_expenses: Decimal
    total_revenues: Decimal
    realized_balance: Decimal

    # Still open with a due date in the month
    open_expenses: Decimal
    open_revenues: Decimal
    projected_balance: Decimal

    # Overdue regardless of month
    overdue_payables: Decimal
    overdue_receivables: Decimal
