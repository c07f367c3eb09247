"""
Reports over obligations and the ledger.

Month ranges are inclusive and keyed by due date ("YYYY-MM"). The cash
summary counts settled obligations by their settlement date and adds
manual ledger entries only; entries linked to an obligation are already
counted through the obligation.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import structlog

from fluxo.core.exceptions import ValidationError
from fluxo.models.directory import CategoryType
from fluxo.models.ledger import LedgerEntry, SourceType
from fluxo.models.obligation import Obligation, ObligationKind
from fluxo.repositories.base import AccountDirectory, LedgerStore, ObligationStore
from fluxo.schemas.report import (
    CashSummary,
    CategoryTotal,
    MonthTotal,
    StatusBucket,
    StatusSummary,
)
from fluxo.services.status import Now, ObligationStatus, derive_status, status_label
from fluxo.utils.formatting import coerce_date, month_bounds, month_key

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")


def _total(items: Iterable) -> Decimal:
    return sum((item.value for item in items), ZERO)


def _month_range(start_month: Optional[str], end_month: Optional[str]):
    try:
        start = month_bounds(start_month)[0] if start_month else None
        end = month_bounds(end_month)[1] if end_month else None
    except ValueError as e:
        raise ValidationError(str(e), field="month")
    if start and end and start > end:
        raise ValidationError(f"Month range is reversed: {start_month} > {end_month}", field="month")
    return start, end


def filter_by_due_month(
    obligations: Iterable[Obligation],
    start_month: Optional[str] = None,
    end_month: Optional[str] = None
) -> List[Obligation]:
    start, end = _month_range(start_month, end_month)
    return [
        o for o in obligations
        if (start is None or o.due_date >= start) and (end is None or o.due_date <= end)
    ]


def status_summary(
    obligations: Iterable[Obligation],
    kind: ObligationKind,
    now: Now = None,
    locale: Optional[str] = None
) -> StatusSummary:
    buckets = {
        status: StatusBucket(status=status, label=status_label(status, kind, locale))
        for status in ObligationStatus
    }
    for obligation in obligations:
        bucket = buckets[derive_status(obligation, now)]
        bucket.count += 1
        bucket.total += obligation.value

    return StatusSummary(
        buckets=list(buckets.values()),
        count=sum(b.count for b in buckets.values()),
        total=sum((b.total for b in buckets.values()), ZERO)
    )


def category_totals(
    obligations: Iterable[Obligation],
    category_names: Dict[str, str]
) -> List[CategoryTotal]:
    """Totals per category, largest first. Categories with nothing owed are left out."""
    grouped: Dict[str, List[Obligation]] = defaultdict(list)
    for obligation in obligations:
        grouped[obligation.category_id].append(obligation)

    totals = [
        CategoryTotal(
            category_id=category_id,
            category_name=category_names.get(category_id, category_id),
            total=_total(items),
            settled=_total(o for o in items if o.settled),
            open=_total(o for o in items if not o.settled)
        )
        for category_id, items in grouped.items()
    ]
    return sorted(totals, key=lambda t: (-t.total, t.category_name))


def monthly_totals(obligations: Iterable[Obligation]) -> List[MonthTotal]:
    grouped: Dict[str, List[Obligation]] = defaultdict(list)
    for obligation in obligations:
        grouped[month_key(obligation.due_date)].append(obligation)

    return [
        MonthTotal(
            month=month,
            count=len(items),
            total=_total(items),
            settled=_total(o for o in items if o.settled),
            open=_total(o for o in items if not o.settled)
        )
        for month, items in sorted(grouped.items())
    ]


def cash_summary(
    month: str,
    payables: List[Obligation],
    receivables: List[Obligation],
    entries: List[LedgerEntry],
    now: Now = None
) -> CashSummary:
    try:
        first, last = month_bounds(month)
    except ValueError as e:
        raise ValidationError(str(e), field="month")

    def in_month(day: date) -> bool:
        return first <= day <= last

    def settled_in_month(items: List[Obligation]) -> Decimal:
        return _total(o for o in items if o.settled and in_month(coerce_date(o.settled_date)))

    def open_in_month(items: List[Obligation]) -> Decimal:
        return _total(o for o in items if not o.settled and in_month(o.due_date))

    def overdue(items: List[Obligation]) -> Decimal:
        return _total(o for o in items if derive_status(o, now) is ObligationStatus.OVERDUE)

    def manual(kind: CategoryType) -> Decimal:
        return _total(
            e for e in entries
            if e.source_type is SourceType.MANUAL
            and e.kind is kind
            and in_month(coerce_date(e.payment_date))
        )

    settled_expenses = settled_in_month(payables)
    settled_revenues = settled_in_month(receivables)
    manual_expenses = manual(CategoryType.EXPENSE)
    manual_revenues = manual(CategoryType.REVENUE)
    total_expenses = settled_expenses + manual_expenses
    total_revenues = settled_revenues + manual_revenues
    open_expenses = open_in_month(payables)
    open_revenues = open_in_month(receivables)

    return CashSummary(
        month=month,
        settled_expenses=settled_expenses,
        settled_revenues=settled_revenues,
        manual_expenses=manual_expenses,
        manual_revenues=manual_revenues,
        total_expenses=total_expenses,
        total_revenues=total_revenues,
        realized_balance=total_revenues - total_expenses,
        open_expenses=open_expenses,
        open_revenues=open_revenues,
        projected_balance=open_revenues - open_expenses,
        overdue_payables=overdue(payables),
        overdue_receivables=overdue(receivables)
    )


class ReportService:
    """Loads the collections a report needs and hands them to the aggregates above."""

    def __init__(
        self,
        payables: ObligationStore,
        receivables: ObligationStore,
        ledger: LedgerStore,
        directory: AccountDirectory
    ):
        self.payables = payables
        self.receivables = receivables
        self.ledger = ledger
        self.directory = directory

    def _store(self, kind: ObligationKind) -> ObligationStore:
        return self.payables if kind is ObligationKind.PAYABLE else self.receivables

    async def _obligations(self, kind, start_month=None, end_month=None) -> List[Obligation]:
        return filter_by_due_month(await self._store(kind).list(), start_month, end_month)

    async def status(self, kind: ObligationKind, start_month=None, end_month=None, now: Now = None):
        return status_summary(await self._obligations(kind, start_month, end_month), kind, now)

    async def categories(self, kind: ObligationKind, start_month=None, end_month=None):
        categories = await self.directory.list_categories()
        names = {c.id: c.name for c in categories if c.type is kind.category_type}
        return category_totals(await self._obligations(kind, start_month, end_month), names)

    async def monthly(self, kind: ObligationKind, start_month=None, end_month=None):
        return monthly_totals(await self._obligations(kind, start_month, end_month))

    async def cash(self, month: str, now: Now = None) -> CashSummary:
        summary = cash_summary(
            month,
            await self.payables.list(),
            await self.receivables.list(),
            await self.ledger.list(),
            now
        )
        logger.info("Cash summary computed", month=month, realized_balance=str(summary.realized_balance))
        return summary
