import pytest
from unittest.mock import AsyncMock
from datetime import date, datetime, timezone
from decimal import Decimal
from fluxo.core.exceptions import PersistenceError
from fluxo.models.directory import CategoryType
from fluxo.models.ledger import SourceType
from fluxo.models.obligation import InstallmentType, ObligationKind
from fluxo.services.cascade_service import CascadeDeleteService
from fluxo.services.settlement_service import SettlementService

SETTLED_AT = datetime(2024, 1, 3, 14, 30, tzinfo=timezone.utc)


def deleter_for(stores, kind=ObligationKind.RECEIVABLE):
    return CascadeDeleteService(stores.obligations(kind), stores.ledger)


@pytest.mark.asyncio
async def test_delete_settled_obligation_removes_entry(stores, receivable):
    await SettlementService(stores.receivables, stores.ledger, stores.directory).settle(
        receivable.id, now=SETTLED_AT
    )
    entry = (await stores.ledger.list())[0]

    result = await deleter_for(stores).delete_obligation(receivable.id)

    assert result.obligation_deleted is True
    assert result.ledger_entries_deleted == [entry.id]
    assert await stores.receivables.get(receivable.id) is None
    assert await stores.ledger.list() == []


@pytest.mark.asyncio
async def test_delete_unsettled_obligation(stores, receivable):
    result = await deleter_for(stores).delete_obligation(receivable.id)

    assert result.obligation_deleted is True
    assert result.ledger_entries_deleted == []


@pytest.mark.asyncio
async def test_delete_is_idempotent(stores, receivable):
    deleter = deleter_for(stores)

    await deleter.delete_obligation(receivable.id)
    again = await deleter.delete_obligation(receivable.id)

    assert again.obligation_deleted is False
    assert again.ledger_entries_deleted == []


@pytest.mark.asyncio
async def test_orphaned_entry_is_cleaned_up(stores):
    orphan = await stores.ledger.create({
        "kind": CategoryType.REVENUE,
        "category_id": "cat-rev",
        "value": Decimal("10.00"),
        "payment_date": SETTLED_AT,
        "source_type": SourceType.RECEIVABLE,
        "source_id": "gone",
    })

    result = await deleter_for(stores).delete_obligation("gone")

    assert result.obligation_deleted is False
    assert result.ledger_entries_deleted == [orphan.id]
    assert await stores.ledger.list() == []


@pytest.mark.asyncio
async def test_siblings_are_not_deleted(stores, make_obligation):
    parent = await make_obligation(installment_type=InstallmentType.INSTALLMENT, installments=3)
    child = await make_obligation(
        installment_type=InstallmentType.INSTALLMENT,
        installments=3,
        parent_id=parent.id,
        due_date=date(2024, 2, 10)
    )

    await deleter_for(stores).delete_obligation(parent.id)

    assert await stores.receivables.get(child.id) is not None


@pytest.mark.asyncio
async def test_other_kind_entries_untouched(stores, receivable, make_obligation):
    payable = await make_obligation(ObligationKind.PAYABLE)
    await SettlementService(stores.payables, stores.ledger, stores.directory).settle(
        payable.id, now=SETTLED_AT
    )

    await deleter_for(stores).delete_obligation(receivable.id)

    assert len(await stores.ledger.find_by_source(SourceType.PAYABLE, payable.id)) == 1


@pytest.mark.asyncio
async def test_obligation_delete_failure_after_entry_removed(stores, receivable):
    await SettlementService(stores.receivables, stores.ledger, stores.directory).settle(
        receivable.id, now=SETTLED_AT
    )
    stores.receivables.delete = AsyncMock(side_effect=PersistenceError("down"))

    with pytest.raises(PersistenceError) as exc_info:
        await deleter_for(stores).delete_obligation(receivable.id)

    assert exc_info.value.stage == "obligation_delete"
    assert exc_info.value.partial is True
    assert await stores.ledger.list() == []
