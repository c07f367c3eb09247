"""Helpers shared by the services that touch both stores."""

from typing import Awaitable, List, Optional, TypeVar

import structlog

from fluxo.core.exceptions import PersistenceError
from fluxo.models.ledger import LedgerEntry
from fluxo.models.obligation import ObligationKind
from fluxo.repositories.base import LedgerStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def guarded(
    awaitable: Awaitable[T],
    stage: str,
    obligation_id: Optional[str] = None,
    partial: bool = False
) -> T:
    """Await a store call, re-raising store failures with the stage that failed."""
    try:
        return await awaitable
    except PersistenceError as exc:
        logger.error(
            "Store call failed",
            stage=stage,
            partial=partial,
            obligation_id=obligation_id,
            error=str(exc)
        )
        raise PersistenceError(
            f"{stage} failed for obligation {obligation_id}: {exc}",
            operation=exc.operation,
            stage=stage,
            partial=partial,
            obligation_id=obligation_id
        ) from exc


async def find_linked_entries(
    ledger: LedgerStore,
    kind: ObligationKind,
    obligation_id: str
) -> List[LedgerEntry]:
    """Ledger entries whose source reference points at the obligation."""
    return await ledger.find_by_source(kind.source_type, obligation_id)
