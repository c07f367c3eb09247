from enum import Enum
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fluxo.db.stores import Stores, get_stores
from fluxo.models.obligation import ObligationKind
from fluxo.schemas.report import CashSummary, CategoryTotal, MonthTotal, StatusSummary
from fluxo.services.report_service import ReportService

router = APIRouter()


class ReportKind(str, Enum):
    PAYABLES = "payables"
    RECEIVABLES = "receivables"

    @property
    def kind(self) -> ObligationKind:
        if self is ReportKind.PAYABLES:
            return ObligationKind.PAYABLE
        return ObligationKind.RECEIVABLE


def _service(stores: Stores) -> ReportService:
    return ReportService(stores.payables, stores.receivables, stores.ledger, stores.directory)

@router.get("/cash-summary", response_model=CashSummary)
async def get_cash_summary(
    month: str = Query(..., description="YYYY-MM"),
    stores: Stores = Depends(get_stores)
):
    """Cash moved and still open in a month"""
    return await _service(stores).cash(month)

@router.get("/{report_kind}/status", response_model=StatusSummary)
async def get_status_summary(
    report_kind: ReportKind,
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
    stores: Stores = Depends(get_stores)
):
    return await _service(stores).status(report_kind.kind, start_month, end_month)

@router.get("/{report_kind}/categories", response_model=List[CategoryTotal])
async def get_category_totals(
    report_kind: ReportKind,
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
    stores: Stores = Depends(get_stores)
):
    return await _service(stores).categories(report_kind.kind, start_month, end_month)

@router.get("/{report_kind}/monthly", response_model=List[MonthTotal])
async def get_monthly_totals(
    report_kind: ReportKind,
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
    stores: Stores = Depends(get_stores)
):
    return await _service(stores).monthly(report_kind.kind, start_month, end_month)
