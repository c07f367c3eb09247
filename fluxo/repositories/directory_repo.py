from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from fluxo.core.exceptions import PersistenceError
from fluxo.models.directory import Account, Category, Counterparty
from fluxo.repositories.base import AccountDirectory
from fluxo.repositories.codec import decode_document


class DirectoryRepository(AccountDirectory):
    """Accounts, clients/suppliers and categories, read-only."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def _load(self, collection: str) -> List[dict]:
        try:
            docs = await self.db[collection].find({}).sort("name", 1).to_list(None)
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation=f"{collection}_list") from exc
        return [decode_document(doc) for doc in docs]

    async def list_accounts(self) -> List[Account]:
        return [Account(**doc) for doc in await self._load("accounts")]

    async def list_counterparties(self) -> List[Counterparty]:
        return [Counterparty(**doc) for doc in await self._load("clients_suppliers")]

    async def list_categories(self) -> List[Category]:
        return [Category(**doc) for doc in await self._load("categories")]
