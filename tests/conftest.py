import pytest
import pytest_asyncio
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from fluxo.core.config import settings
from fluxo.db.stores import Stores, get_stores, memory_stores
from fluxo.main import app
from fluxo.models.directory import Account, Category, CategoryType, Counterparty, CounterpartyRole
from fluxo.models.obligation import ObligationKind
from fluxo.repositories.memory import MemoryAccountDirectory


@pytest.fixture(autouse=True)
def display_settings(monkeypatch):
    """Pin locale and due-soon window regardless of the environment."""
    monkeypatch.setattr(settings, "DISPLAY_LOCALE", "pt_BR")
    monkeypatch.setattr(settings, "CURRENCY", "BRL")
    monkeypatch.setattr(settings, "DUE_SOON_DAYS", 7)


@pytest.fixture
def directory() -> MemoryAccountDirectory:
    """Directory with one account, a client, a supplier and one category of each type."""
    directory = MemoryAccountDirectory()
    directory.add(Account(id="acc-1", name="Conta Corrente"))
    directory.add(Counterparty(id="cli-1", name="Acme Ltda", role=CounterpartyRole.CLIENT))
    directory.add(Counterparty(id="cli-2", name="Ótica Central", role=CounterpartyRole.CLIENT))
    directory.add(Counterparty(id="sup-1", name="Fornecedora Beta", role=CounterpartyRole.SUPPLIER))
    directory.add(Category(id="cat-rev", name="Vendas", type=CategoryType.REVENUE))
    directory.add(Category(id="cat-exp", name="Aluguel", type=CategoryType.EXPENSE))
    return directory


@pytest.fixture
def stores(directory) -> Stores:
    stores = memory_stores()
    stores.directory = directory
    return stores


@pytest.fixture
def make_obligation(stores):
    """Factory inserting an obligation straight into the store."""
    async def _make(kind=ObligationKind.RECEIVABLE, **fields):
        data = {
            "counterparty_id": "cli-1" if kind is ObligationKind.RECEIVABLE else "sup-1",
            "category_id": "cat-rev" if kind is ObligationKind.RECEIVABLE else "cat-exp",
            "account_id": "acc-1",
            "value": Decimal("100.00"),
            "due_date": date(2024, 1, 10),
        }
        data.update(fields)
        return await stores.obligations(kind).create(data)
    return _make


@pytest_asyncio.fixture
async def receivable(make_obligation):
    return await make_obligation(value=Decimal("1234.56"), due_date=date(2024, 1, 1))


@pytest.fixture
def test_client(monkeypatch, stores):
    """FastAPI test client backed by in-memory stores."""
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "memory")
    app.dependency_overrides[get_stores] = lambda: stores

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
