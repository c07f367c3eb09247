from fastapi import APIRouter
from fluxo.models.obligation import ObligationKind
from fluxo.routes import accounts, ledger, obligations, reports

api_router = APIRouter()

api_router.include_router(obligations.build_router(ObligationKind.PAYABLE), prefix="/payables", tags=["payables"])
api_router.include_router(obligations.build_router(ObligationKind.RECEIVABLE), prefix="/receivables", tags=["receivables"])
api_router.include_router(ledger.router, prefix="/ledger", tags=["ledger"])
api_router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
