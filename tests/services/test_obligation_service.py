import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from pydantic import ValidationError as SchemaError
from fluxo.core.exceptions import NotFoundError, ValidationError
from fluxo.models.obligation import InstallmentType, ObligationKind, RecurrenceType
from fluxo.schemas.obligation import ObligationCreate, ObligationUpdate
from fluxo.services.obligation_service import ObligationService
from fluxo.services.settlement_service import SettlementService


def receivable_in(**fields):
    data = {
        "counterparty_id": "cli-1",
        "category_id": "cat-rev",
        "value": "250.00",
        "due_date": "2024-01-10",
    }
    data.update(fields)
    return ObligationCreate(**data)


@pytest.fixture
def service(stores):
    return ObligationService(stores.receivables, stores.directory)


@pytest.mark.asyncio
async def test_create_receivable(service):
    obligation = await service.create(receivable_in())

    assert obligation.id is not None
    assert obligation.kind == ObligationKind.RECEIVABLE
    assert obligation.value == Decimal("250.00")
    assert obligation.due_date == date(2024, 1, 10)
    assert obligation.settled is False


@pytest.mark.asyncio
async def test_create_rejects_expense_category(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.create(receivable_in(category_id="cat-exp"))
    assert exc_info.value.field == "category_id"


@pytest.mark.asyncio
async def test_create_rejects_supplier_on_receivable(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.create(receivable_in(counterparty_id="sup-1"))
    assert exc_info.value.field == "counterparty_id"


@pytest.mark.asyncio
async def test_create_rejects_unknown_account(service):
    with pytest.raises(ValidationError):
        await service.create(receivable_in(account_id="missing"))


@pytest.mark.asyncio
async def test_installment_plan_needs_count(service):
    with pytest.raises(ValidationError):
        await service.create(receivable_in(installment_type=InstallmentType.INSTALLMENT))

    obligation = await service.create(
        receivable_in(installment_type=InstallmentType.INSTALLMENT, installments=3)
    )
    assert obligation.installments == 3


@pytest.mark.asyncio
async def test_recurring_plan_needs_type_and_count(service):
    with pytest.raises(ValidationError):
        await service.create(
            receivable_in(installment_type=InstallmentType.RECURRING, recurrence_count=6)
        )

    obligation = await service.create(receivable_in(
        installment_type=InstallmentType.RECURRING,
        recurrence_type=RecurrenceType.MONTHLY,
        recurrence_count=6
    ))
    assert obligation.recurrence_type == RecurrenceType.MONTHLY


@pytest.mark.asyncio
async def test_update_fields(service):
    obligation = await service.create(receivable_in())

    updated = await service.update(
        obligation.id, ObligationUpdate(value=Decimal("300.10"), due_date="2024-02-01")
    )

    assert updated.value == Decimal("300.10")
    assert updated.due_date == date(2024, 2, 1)


@pytest.mark.asyncio
async def test_update_switching_plan_drops_old_fields(service):
    obligation = await service.create(
        receivable_in(installment_type=InstallmentType.INSTALLMENT, installments=3)
    )

    updated = await service.update(
        obligation.id, ObligationUpdate(installment_type=InstallmentType.SINGLE)
    )

    assert updated.installment_type == InstallmentType.SINGLE
    assert updated.installments is None


@pytest.mark.asyncio
async def test_update_keeps_settlement_state(stores, service):
    obligation = await service.create(receivable_in(account_id="acc-1"))
    settled_at = datetime(2024, 1, 3, tzinfo=timezone.utc)
    await SettlementService(stores.receivables, stores.ledger, stores.directory).settle(
        obligation.id, now=settled_at
    )

    updated = await service.update(obligation.id, ObligationUpdate(observations="nota 12"))

    assert updated.settled is True
    assert updated.settled_date == settled_at


def test_update_schema_rejects_settlement_fields():
    with pytest.raises(SchemaError):
        ObligationUpdate(settled=True)


@pytest.mark.asyncio
async def test_update_missing(service):
    with pytest.raises(NotFoundError):
        await service.update("missing", ObligationUpdate(observations="x"))


@pytest.mark.asyncio
async def test_update_cannot_blank_required_field(service):
    obligation = await service.create(receivable_in())

    with pytest.raises(ValidationError):
        await service.update(obligation.id, ObligationUpdate(category_id=None))
