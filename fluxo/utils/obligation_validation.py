"""Obligation and ledger entry validation utilities."""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from fluxo.core.exceptions import ValidationError
from fluxo.models.directory import Account, Category, CategoryType, Counterparty
from fluxo.models.obligation import InstallmentType, ObligationKind

REQUIRED_FIELDS = ("counterparty_id", "category_id", "value", "due_date")


def validate_value(value: Any) -> Decimal:
    """Value must be a positive decimal amount."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid value: {value!r}", field="value")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Value must be positive: {value}", field="value")
    return amount


def validate_required(data: Dict[str, Any]) -> None:
    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"Field '{field}' is required", field=field)


def validate_category(kind_type: CategoryType, category: Optional[Category], category_id: str) -> None:
    """Category must exist and its type must match the obligation or entry kind."""
    if category is None:
        raise ValidationError(f"Category {category_id} not found", field="category_id")
    if category.type != kind_type:
        raise ValidationError(
            f"Category '{category.name}' is {category.type.value}, expected {kind_type.value}",
            field="category_id"
        )


def validate_counterparty(
    kind: ObligationKind,
    counterparty: Optional[Counterparty],
    counterparty_id: str
) -> None:
    """Receivables belong to clients, payables to suppliers."""
    if counterparty is None:
        raise ValidationError(f"Counterparty {counterparty_id} not found", field="counterparty_id")
    if counterparty.role != kind.counterparty_role:
        raise ValidationError(
            f"'{counterparty.name}' is a {counterparty.role.value}, "
            f"expected a {kind.counterparty_role.value}",
            field="counterparty_id"
        )


def validate_account(account: Optional[Account], account_id: Optional[str]) -> None:
    if account_id and account is None:
        raise ValidationError(f"Account {account_id} not found", field="account_id")


def validate_plan(data: Dict[str, Any]) -> None:
    """
    Installment plan shape.

    Rules:
    - single: no installments, no recurrence
    - installment: installments >= 1, no recurrence
    - recurring: recurrence_type and recurrence_count >= 1, no installments
    """
    plan = InstallmentType(data.get("installment_type") or InstallmentType.SINGLE)
    installments = data.get("installments")
    recurrence_type = data.get("recurrence_type")
    recurrence_count = data.get("recurrence_count")

    if plan is InstallmentType.INSTALLMENT:
        if installments is None or installments < 1:
            raise ValidationError("Installment plans need at least one installment", field="installments")
    elif installments is not None:
        raise ValidationError("Installments only apply to installment plans", field="installments")

    if plan is InstallmentType.RECURRING:
        if recurrence_type is None:
            raise ValidationError("Recurring plans need a recurrence type", field="recurrence_type")
        if recurrence_count is None or recurrence_count < 1:
            raise ValidationError("Recurring plans need at least one occurrence", field="recurrence_count")
    elif recurrence_type is not None or recurrence_count is not None:
        raise ValidationError("Recurrence only applies to recurring plans", field="recurrence_type")
