"""Create and edit obligations. Settlement fields are never edited here."""

from typing import Any, Dict, List

import structlog

from fluxo.core.exceptions import NotFoundError
from fluxo.models.obligation import InstallmentType, Obligation
from fluxo.repositories.base import AccountDirectory, ObligationStore
from fluxo.schemas.obligation import ObligationCreate, ObligationUpdate
from fluxo.utils.obligation_validation import (
    validate_account,
    validate_category,
    validate_counterparty,
    validate_plan,
    validate_required,
    validate_value,
)

logger = structlog.get_logger(__name__)

PLAN_FIELDS = ("installments", "recurrence_type", "recurrence_count")


class ObligationService:

    def __init__(self, obligations: ObligationStore, directory: AccountDirectory):
        self.obligations = obligations
        self.directory = directory
        self.kind = obligations.kind

    async def get(self, obligation_id: str) -> Obligation:
        obligation = await self.obligations.get(obligation_id)
        if obligation is None:
            raise NotFoundError(self.kind.value, obligation_id)
        return obligation

    async def list(self) -> List[Obligation]:
        return await self.obligations.list()

    async def create(self, obligation_in: ObligationCreate) -> Obligation:
        data = obligation_in.model_dump()
        await self._validate(data)

        obligation = await self.obligations.create({
            **data,
            "settled": False,
            "settled_date": None
        })
        logger.info(
            "Obligation created",
            kind=self.kind.value,
            obligation_id=obligation.id,
            value=str(obligation.value)
        )
        return obligation

    async def update(self, obligation_id: str, update_in: ObligationUpdate) -> Obligation:
        """Edit form fields. Changing the plan type drops fields of the old plan."""
        existing = await self.get(obligation_id)
        changes = update_in.model_dump(exclude_unset=True)
        if not changes:
            return existing

        if "installment_type" in changes:
            for field in PLAN_FIELDS:
                changes.setdefault(field, None)
            if changes["installment_type"] is None:
                changes["installment_type"] = InstallmentType.SINGLE

        merged = existing.model_dump()
        merged.update(changes)
        await self._validate(merged)

        updated = await self.obligations.update(obligation_id, changes)
        if updated is None:
            raise NotFoundError(self.kind.value, obligation_id)

        logger.info(
            "Obligation updated",
            kind=self.kind.value,
            obligation_id=obligation_id,
            fields=sorted(changes)
        )
        return updated

    async def _validate(self, data: Dict[str, Any]) -> None:
        validate_required(data)
        validate_value(data["value"])
        validate_plan(data)

        category = await self.directory.get_category(data["category_id"])
        validate_category(self.kind.category_type, category, data["category_id"])

        counterparty = await self.directory.get_counterparty(data["counterparty_id"])
        validate_counterparty(self.kind, counterparty, data["counterparty_id"])

        account_id = data.get("account_id")
        if account_id:
            validate_account(await self.directory.get_account(account_id), account_id)
