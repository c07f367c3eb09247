import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from fluxo.core.exceptions import ValidationError
from fluxo.models.directory import CategoryType
from fluxo.models.obligation import ObligationKind
from fluxo.services.report_service import ReportService, filter_by_due_month
from fluxo.services.settlement_service import SettlementService
from fluxo.services.status import ObligationStatus

NOW = date(2024, 1, 3)


@pytest.fixture
def service(stores):
    return ReportService(stores.payables, stores.receivables, stores.ledger, stores.directory)


async def settle(stores, obligation, when):
    await SettlementService(stores.obligations(obligation.kind), stores.ledger, stores.directory).settle(
        obligation.id, now=when
    )


@pytest.mark.asyncio
async def test_filter_by_due_month(make_obligation):
    jan = await make_obligation(due_date=date(2024, 1, 31))
    feb = await make_obligation(due_date=date(2024, 2, 1))
    mar = await make_obligation(due_date=date(2024, 3, 1))

    result = filter_by_due_month([jan, feb, mar], "2024-01", "2024-02")

    assert [o.id for o in result] == [jan.id, feb.id]


def test_filter_rejects_bad_range():
    with pytest.raises(ValidationError):
        filter_by_due_month([], "2024-03", "2024-01")
    with pytest.raises(ValidationError):
        filter_by_due_month([], "janeiro")


@pytest.mark.asyncio
async def test_status_summary(stores, service, make_obligation):
    await make_obligation(due_date=date(2024, 1, 1), value=Decimal("10.00"))
    await make_obligation(due_date=date(2024, 1, 5), value=Decimal("20.00"))
    await make_obligation(due_date=date(2024, 2, 1), value=Decimal("30.00"))
    paid = await make_obligation(due_date=date(2024, 1, 2), value=Decimal("40.00"))
    await settle(stores, paid, datetime(2024, 1, 2, tzinfo=timezone.utc))

    summary = await service.status(ObligationKind.RECEIVABLE, now=NOW)

    totals = {b.status: (b.count, b.total, b.label) for b in summary.buckets}
    assert totals[ObligationStatus.SETTLED] == (1, Decimal("40.00"), "Recebido")
    assert totals[ObligationStatus.OVERDUE] == (1, Decimal("10.00"), "Vencido")
    assert totals[ObligationStatus.DUE_SOON] == (1, Decimal("20.00"), "Em breve")
    assert totals[ObligationStatus.PENDING] == (1, Decimal("30.00"), "Pendente")
    assert summary.count == 4
    assert summary.total == Decimal("100.00")


@pytest.mark.asyncio
async def test_category_and_monthly_totals(stores, service, make_obligation):
    await make_obligation(ObligationKind.PAYABLE, due_date=date(2024, 1, 10), value=Decimal("100.00"))
    paid = await make_obligation(ObligationKind.PAYABLE, due_date=date(2024, 2, 10), value=Decimal("50.00"))
    await settle(stores, paid, datetime(2024, 2, 9, tzinfo=timezone.utc))

    categories = await service.categories(ObligationKind.PAYABLE)
    assert len(categories) == 1
    assert categories[0].category_name == "Aluguel"
    assert categories[0].total == Decimal("150.00")
    assert categories[0].settled == Decimal("50.00")
    assert categories[0].open == Decimal("100.00")

    months = await service.monthly(ObligationKind.PAYABLE)
    assert [(m.month, m.total) for m in months] == [
        ("2024-01", Decimal("100.00")),
        ("2024-02", Decimal("50.00")),
    ]


@pytest.mark.asyncio
async def test_cash_summary_counts_linked_entries_once(stores, service, make_obligation):
    received = await make_obligation(due_date=date(2023, 12, 20), value=Decimal("500.00"))
    await settle(stores, received, datetime(2024, 1, 2, tzinfo=timezone.utc))
    paid = await make_obligation(ObligationKind.PAYABLE, due_date=date(2024, 1, 2), value=Decimal("120.00"))
    await settle(stores, paid, datetime(2024, 1, 2, tzinfo=timezone.utc))
    await make_obligation(ObligationKind.PAYABLE, due_date=date(2024, 1, 20), value=Decimal("80.00"))
    await make_obligation(due_date=date(2024, 1, 25), value=Decimal("300.00"))
    await make_obligation(ObligationKind.PAYABLE, due_date=date(2023, 12, 1), value=Decimal("45.00"))
    await stores.ledger.create({
        "kind": CategoryType.EXPENSE,
        "category_id": "cat-exp",
        "value": Decimal("30.00"),
        "payment_date": datetime(2024, 1, 15, tzinfo=timezone.utc),
    })

    summary = await service.cash("2024-01", now=NOW)

    assert summary.settled_revenues == Decimal("500.00")
    assert summary.settled_expenses == Decimal("120.00")
    assert summary.manual_expenses == Decimal("30.00")
    assert summary.manual_revenues == Decimal("0")
    assert summary.total_expenses == Decimal("150.00")
    assert summary.realized_balance == Decimal("350.00")
    assert summary.open_expenses == Decimal("80.00")
    assert summary.open_revenues == Decimal("300.00")
    assert summary.projected_balance == Decimal("220.00")
    assert summary.overdue_payables == Decimal("45.00")
    assert summary.overdue_receivables == Decimal("0")


@pytest.mark.asyncio
async def test_cash_summary_bad_month(service):
    with pytest.raises(ValidationError):
        await service.cash("2024-1x")
