from typing import List, Optional
from fastapi import APIRouter, Depends
from fluxo.db.stores import Stores, get_stores
from fluxo.models.ledger import SourceType
from fluxo.schemas.ledger import LedgerEntryCreate, LedgerEntryResponse
from fluxo.services.ledger_service import LedgerService

router = APIRouter()

@router.get("", response_model=List[LedgerEntryResponse])
async def list_entries(
    source_type: Optional[SourceType] = None,
    stores: Stores = Depends(get_stores)
):
    """List ledger entries, newest payment first"""
    return await LedgerService(stores.ledger, stores.directory).list(source_type)

@router.post("", response_model=LedgerEntryResponse)
async def create_entry(
    entry_in: LedgerEntryCreate,
    stores: Stores = Depends(get_stores)
):
    """Record a manual cash movement"""
    return await LedgerService(stores.ledger, stores.directory).create_manual(entry_in)

@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    stores: Stores = Depends(get_stores)
):
    await LedgerService(stores.ledger, stores.directory).delete_manual(entry_id)
    return {"message": "Ledger entry deleted successfully"}
