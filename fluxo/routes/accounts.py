from typing import List
from fastapi import APIRouter, Depends
from fluxo.db.stores import Stores, get_stores
from fluxo.schemas.directory import AccountResponse

router = APIRouter()

@router.get("", response_model=List[AccountResponse])
async def list_accounts(stores: Stores = Depends(get_stores)):
    """Accounts a settlement can be recorded against"""
    accounts = await stores.directory.list_accounts()
    return [AccountResponse(**account.model_dump()) for account in accounts]
