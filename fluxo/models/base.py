from datetime import datetime, timezone

from bson import ObjectId
from pydantic import BaseModel, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Fresh identifier, same shape in memory and in MongoDB."""
    return str(ObjectId())


class DomainModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        from_attributes=True
    )
