"""
LedgerRepository - cash movements, manual or linked to an obligation.

Linked entries are looked up by (source_type, source_id). The collection
has an index on that pair but it is not unique; uniqueness is the
settlement synchronizer's job.
"""

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from fluxo.core.exceptions import PersistenceError
from fluxo.models.ledger import LedgerEntry, SourceType
from fluxo.repositories.base import LedgerStore
from fluxo.repositories.codec import decode_document, encode_fields, to_object_id


class LedgerRepository(LedgerStore):
    """Repository for ledger entries."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["ledger_entries"]

    async def list(self) -> List[LedgerEntry]:
        try:
            docs = await self.collection.find({}).sort("payment_date", -1).to_list(None)
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="ledger_list") from exc
        return [LedgerEntry(**decode_document(doc)) for doc in docs]

    async def get(self, entry_id: str) -> Optional[LedgerEntry]:
        oid = to_object_id(entry_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="ledger_get") from exc
        if doc:
            return LedgerEntry(**decode_document(doc))
        return None

    async def find_by_source(self, source_type: SourceType, source_id: str) -> List[LedgerEntry]:
        try:
            docs = await self.collection.find({
                "source_type": source_type.value,
                "source_id": source_id
            }).to_list(None)
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="ledger_lookup") from exc
        return [LedgerEntry(**decode_document(doc)) for doc in docs]

    async def create(self, data: Dict[str, Any]) -> LedgerEntry:
        entry = LedgerEntry.model_validate({**data, "id": None})
        doc = encode_fields(entry.model_dump())

        try:
            result = await self.collection.insert_one(doc)
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="ledger_create") from exc

        doc["_id"] = result.inserted_id
        return LedgerEntry(**decode_document(doc))

    async def delete(self, entry_id: str) -> bool:
        oid = to_object_id(entry_id)
        if oid is None:
            return False
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="ledger_delete") from exc
        return result.deleted_count > 0
