import pytest
from datetime import datetime, timezone
from decimal import Decimal
from fluxo.core.exceptions import NotFoundError, ValidationError
from fluxo.models.directory import CategoryType
from fluxo.models.ledger import SourceType
from fluxo.schemas.ledger import LedgerEntryCreate
from fluxo.services.ledger_service import LedgerService
from fluxo.services.settlement_service import SettlementService

PAID_AT = datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(stores):
    return LedgerService(stores.ledger, stores.directory)


def expense_in(**fields):
    data = {
        "kind": CategoryType.EXPENSE,
        "category_id": "cat-exp",
        "account_id": "acc-1",
        "value": Decimal("80.00"),
        "payment_date": PAID_AT,
    }
    data.update(fields)
    return LedgerEntryCreate(**data)


@pytest.mark.asyncio
async def test_create_manual_entry(service):
    entry = await service.create_manual(expense_in())

    assert entry.source_type == SourceType.MANUAL
    assert entry.source_id is None
    assert entry.value == Decimal("80.00")


@pytest.mark.asyncio
async def test_manual_entry_category_must_match_kind(service):
    with pytest.raises(ValidationError):
        await service.create_manual(expense_in(category_id="cat-rev"))


@pytest.mark.asyncio
async def test_delete_manual_entry(stores, service):
    entry = await service.create_manual(expense_in())

    await service.delete_manual(entry.id)

    assert await stores.ledger.list() == []


@pytest.mark.asyncio
async def test_delete_missing_entry(service):
    with pytest.raises(NotFoundError):
        await service.delete_manual("missing")


@pytest.mark.asyncio
async def test_linked_entry_cannot_be_deleted_directly(stores, service, receivable):
    await SettlementService(stores.receivables, stores.ledger, stores.directory).settle(
        receivable.id, now=PAID_AT
    )
    linked = (await stores.ledger.list())[0]

    with pytest.raises(ValidationError):
        await service.delete_manual(linked.id)

    assert len(await stores.ledger.list()) == 1


@pytest.mark.asyncio
async def test_list_filters_by_source(stores, service, receivable):
    manual = await service.create_manual(expense_in())
    await SettlementService(stores.receivables, stores.ledger, stores.directory).settle(
        receivable.id, now=PAID_AT
    )

    entries = await service.list(SourceType.MANUAL)

    assert [e.id for e in entries] == [manual.id]
    assert len(await service.list()) == 2
