from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fluxo.db.stores import Stores, get_stores
from fluxo.models.obligation import Obligation, ObligationKind
from fluxo.schemas.obligation import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    DeletionResponse,
    ObligationCreate,
    ObligationResponse,
    ObligationUpdate,
    SettleRequest,
)
from fluxo.services.cascade_service import CascadeDeleteService
from fluxo.services.obligation_service import ObligationService
from fluxo.services.query_service import (
    DisplayContext,
    FilterField,
    ObligationListQuery,
    SortDirection,
    SortField,
    query_rows,
)
from fluxo.services.settlement_service import SettlementService


async def _respond(stores: Stores, obligation: Obligation) -> ObligationResponse:
    context = await DisplayContext.from_directory(stores.directory)
    return ObligationResponse.from_row(context.render(obligation))


def build_router(kind: ObligationKind) -> APIRouter:
    """Routes for one obligation kind; payables and receivables share them."""
    router = APIRouter()

    @router.get("", response_model=List[ObligationResponse])
    async def list_obligations(
        counterparty: str = Query(""),
        category: str = Query(""),
        value: str = Query(""),
        due_date: str = Query(""),
        status_text: str = Query("", alias="status"),
        installment_type: str = Query(""),
        sort_field: SortField = Query(SortField.DUE_DATE),
        sort_direction: SortDirection = Query(SortDirection.ASC),
        stores: Stores = Depends(get_stores)
    ):
        """List obligations, filtered by the text shown in each column"""
        filters = {
            FilterField.COUNTERPARTY: counterparty,
            FilterField.CATEGORY: category,
            FilterField.VALUE: value,
            FilterField.DUE_DATE: due_date,
            FilterField.STATUS: status_text,
            FilterField.INSTALLMENT_TYPE: installment_type,
        }
        context = await DisplayContext.from_directory(stores.directory)
        obligations = await stores.obligations(kind).list()
        rows = query_rows([context.render(o) for o in obligations], filters, sort_field, sort_direction)
        return [ObligationResponse.from_row(row) for row in rows]

    @router.post("", response_model=ObligationResponse)
    async def create_obligation(
        obligation_in: ObligationCreate,
        stores: Stores = Depends(get_stores)
    ):
        service = ObligationService(stores.obligations(kind), stores.directory)
        obligation = await service.create(obligation_in)
        return await _respond(stores, obligation)

    @router.post("/bulk-delete", response_model=BulkDeleteResponse)
    async def bulk_delete(
        request: BulkDeleteRequest,
        stores: Stores = Depends(get_stores)
    ):
        """Delete the given obligations and their ledger entries, one by one"""
        context = await DisplayContext.from_directory(stores.directory)
        query = ObligationListQuery(context, await stores.obligations(kind).list())
        for obligation_id in dict.fromkeys(request.ids):
            query.toggle_one(obligation_id)

        deleter = CascadeDeleteService(stores.obligations(kind), stores.ledger)
        results = await query.delete_selected(deleter, request.confirm)
        return BulkDeleteResponse(
            confirmed=request.confirm,
            deleted=[DeletionResponse(**vars(result)) for result in results],
            remaining_ids=sorted(query.selected_ids)
        )

    @router.get("/{obligation_id}", response_model=ObligationResponse)
    async def get_obligation(
        obligation_id: str,
        stores: Stores = Depends(get_stores)
    ):
        service = ObligationService(stores.obligations(kind), stores.directory)
        return await _respond(stores, await service.get(obligation_id))

    @router.patch("/{obligation_id}", response_model=ObligationResponse)
    async def update_obligation(
        obligation_id: str,
        update_in: ObligationUpdate,
        stores: Stores = Depends(get_stores)
    ):
        service = ObligationService(stores.obligations(kind), stores.directory)
        obligation = await service.update(obligation_id, update_in)
        return await _respond(stores, obligation)

    @router.delete("/{obligation_id}", response_model=DeletionResponse)
    async def delete_obligation(
        obligation_id: str,
        stores: Stores = Depends(get_stores)
    ):
        """Delete an obligation together with its ledger entry"""
        deleter = CascadeDeleteService(stores.obligations(kind), stores.ledger)
        result = await deleter.delete_obligation(obligation_id)
        return DeletionResponse(**vars(result))

    @router.post("/{obligation_id}/settle", response_model=ObligationResponse)
    async def settle_obligation(
        obligation_id: str,
        request: Optional[SettleRequest] = None,
        stores: Stores = Depends(get_stores)
    ):
        """Mark as paid/received and record the ledger entry"""
        service = SettlementService(stores.obligations(kind), stores.ledger, stores.directory)
        account_id = request.account_id if request else None
        obligation = await service.settle(obligation_id, account_id)
        return await _respond(stores, obligation)

    @router.post("/{obligation_id}/unsettle", response_model=Optional[ObligationResponse])
    async def unsettle_obligation(
        obligation_id: str,
        stores: Stores = Depends(get_stores)
    ):
        """Reopen the obligation and remove its ledger entry. A missing obligation returns null"""
        service = SettlementService(stores.obligations(kind), stores.ledger, stores.directory)
        obligation = await service.unsettle(obligation_id)
        if obligation is None:
            return None
        return await _respond(stores, obligation)

    return router
