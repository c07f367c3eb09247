from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from fluxo.core.exceptions import PersistenceError
from fluxo.models.obligation import Obligation, ObligationKind
from fluxo.repositories.base import ObligationStore
from fluxo.repositories.codec import decode_document, encode_fields, to_object_id

COLLECTIONS = {
    ObligationKind.PAYABLE: "payables",
    ObligationKind.RECEIVABLE: "receivables",
}


class ObligationRepository(ObligationStore):
    """Obligation database operations, one collection per kind."""

    def __init__(self, db: AsyncIOMotorDatabase, kind: ObligationKind):
        self.db = db
        self.kind = kind
        self.collection = db[COLLECTIONS[kind]]

    def _to_model(self, doc: Dict[str, Any]) -> Obligation:
        return Obligation(**decode_document(doc))

    async def get(self, obligation_id: str) -> Optional[Obligation]:
        """Get an obligation by id."""
        oid = to_object_id(obligation_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="obligation_get") from exc
        if doc:
            return self._to_model(doc)
        return None

    async def list(self) -> List[Obligation]:
        """List obligations ordered by due date."""
        try:
            docs = await self.collection.find({}).sort("due_date", 1).to_list(None)
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="obligation_list") from exc
        return [self._to_model(doc) for doc in docs]

    async def create(self, data: Dict[str, Any]) -> Obligation:
        """Validate and insert a new obligation."""
        obligation = Obligation.model_validate({**data, "id": None, "kind": self.kind})
        doc = encode_fields(obligation.model_dump())

        try:
            result = await self.collection.insert_one(doc)
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="obligation_create") from exc

        doc["_id"] = result.inserted_id
        return self._to_model(doc)

    async def update(self, obligation_id: str, fields: Dict[str, Any]) -> Optional[Obligation]:
        """Apply a partial update."""
        oid = to_object_id(obligation_id)
        if oid is None:
            return None

        updates = encode_fields(fields)
        updates.pop("kind", None)
        updates["updated_at"] = datetime.now(timezone.utc)

        try:
            result = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": updates},
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="obligation_update") from exc

        if result:
            return self._to_model(result)
        return None

    async def delete(self, obligation_id: str) -> bool:
        oid = to_object_id(obligation_id)
        if oid is None:
            return False
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError(str(exc), operation="obligation_delete") from exc
        return result.deleted_count > 0
