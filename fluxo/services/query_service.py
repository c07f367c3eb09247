"""
List query engine behind every payable/receivable list view.

Rows are rendered once (names resolved, value and due date formatted,
status derived) and filtering runs over those rendered strings, so a filter
matches what the user sees. Sorting compares raw values for due date and
value and collated display names for counterparty and category.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

import structlog

from fluxo.core.config import settings
from fluxo.models.obligation import Obligation, ObligationKind
from fluxo.repositories.base import AccountDirectory
from fluxo.services.cascade_service import CascadeDeleteService, DeletionResult
from fluxo.services.status import ObligationStatus, derive_status, status_label
from fluxo.utils.formatting import (
    collation_key,
    format_currency,
    format_date,
    installment_label,
)

logger = structlog.get_logger(__name__)


class FilterField(str, Enum):
    COUNTERPARTY = "counterparty"
    CATEGORY = "category"
    VALUE = "value"
    DUE_DATE = "due_date"
    STATUS = "status"
    INSTALLMENT_TYPE = "installment_type"


class SortField(str, Enum):
    DUE_DATE = "due_date"
    VALUE = "value"
    COUNTERPARTY = "counterparty"
    CATEGORY = "category"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


MISSING_NAMES = {
    "pt_BR": {
        ObligationKind.RECEIVABLE: "Cliente não encontrado",
        ObligationKind.PAYABLE: "Fornecedor não encontrado",
        "category": "Categoria não encontrada",
    },
    "en_US": {
        ObligationKind.RECEIVABLE: "Client not found",
        ObligationKind.PAYABLE: "Supplier not found",
        "category": "Category not found",
    },
}


@dataclass(frozen=True)
class ObligationRow:
    """An obligation together with everything a list view displays for it."""
    obligation: Obligation
    counterparty_name: str
    category_name: str
    value_text: str
    due_date_text: str
    status: ObligationStatus
    status_label: str
    installment_label: str

    @property
    def id(self) -> str:
        return self.obligation.id


class DisplayContext:
    """Name lookups, locale and the reference "now" used to render rows."""

    def __init__(
        self,
        counterparty_names: Optional[Mapping[str, str]] = None,
        category_names: Optional[Mapping[str, str]] = None,
        locale: Optional[str] = None,
        now: Union[date, datetime, None] = None,
        due_soon_days: Optional[int] = None,
        currency: Optional[str] = None
    ):
        self.counterparty_names = dict(counterparty_names or {})
        self.category_names = dict(category_names or {})
        self.locale = locale or settings.DISPLAY_LOCALE
        self.now = now
        self.due_soon_days = due_soon_days
        self.currency = currency

    @classmethod
    async def from_directory(cls, directory: AccountDirectory, **kwargs) -> "DisplayContext":
        counterparties = await directory.list_counterparties()
        categories = await directory.list_categories()
        return cls(
            counterparty_names={c.id: c.name for c in counterparties},
            category_names={c.id: c.name for c in categories},
            **kwargs
        )

    def _missing(self, key) -> str:
        return MISSING_NAMES.get(self.locale, MISSING_NAMES["en_US"])[key]

    def render(self, obligation: Obligation) -> ObligationRow:
        status = derive_status(obligation, self.now, self.due_soon_days)
        return ObligationRow(
            obligation=obligation,
            counterparty_name=self.counterparty_names.get(
                obligation.counterparty_id, self._missing(obligation.kind)
            ),
            category_name=self.category_names.get(
                obligation.category_id, self._missing("category")
            ),
            value_text=format_currency(obligation.value, self.locale, self.currency),
            due_date_text=format_date(obligation.due_date, self.locale),
            status=status,
            status_label=status_label(status, obligation.kind, self.locale),
            installment_label=installment_label(obligation.installment_type, self.locale),
        )


FILTER_ACCESSORS: Dict[FilterField, Callable[[ObligationRow], str]] = {
    FilterField.COUNTERPARTY: lambda row: row.counterparty_name,
    FilterField.CATEGORY: lambda row: row.category_name,
    FilterField.VALUE: lambda row: row.value_text,
    FilterField.DUE_DATE: lambda row: row.due_date_text,
    FilterField.STATUS: lambda row: row.status_label,
    FilterField.INSTALLMENT_TYPE: lambda row: row.installment_label,
}

SORT_KEYS: Dict[SortField, Callable[[ObligationRow], Any]] = {
    SortField.DUE_DATE: lambda row: row.obligation.due_date,
    SortField.VALUE: lambda row: row.obligation.value,
    SortField.COUNTERPARTY: lambda row: collation_key(row.counterparty_name),
    SortField.CATEGORY: lambda row: collation_key(row.category_name),
}


def matches(row: ObligationRow, filters: Mapping[FilterField, str]) -> bool:
    """True if every non-empty filter is a case-insensitive substring of its column."""
    for field, text in filters.items():
        if not text:
            continue
        if text.casefold() not in FILTER_ACCESSORS[FilterField(field)](row).casefold():
            return False
    return True


def sort_rows(
    rows: Iterable[ObligationRow],
    field: SortField = SortField.DUE_DATE,
    direction: SortDirection = SortDirection.ASC
) -> List[ObligationRow]:
    ordered = sorted(rows, key=SORT_KEYS[SortField(field)])
    if SortDirection(direction) is SortDirection.DESC:
        # Exact mirror of the ascending order, ties included
        ordered.reverse()
    return ordered


def query_rows(
    rows: Iterable[ObligationRow],
    filters: Optional[Mapping[FilterField, str]] = None,
    field: SortField = SortField.DUE_DATE,
    direction: SortDirection = SortDirection.ASC
) -> List[ObligationRow]:
    filters = filters or {}
    return sort_rows([row for row in rows if matches(row, filters)], field, direction)


class ObligationListQuery:
    """
    Filter/sort/selection state of one list view.

    Every change to filters, sort or the underlying collection recomputes
    the view and pushes it to `sink`. Selection survives filtering: a
    selected row hidden by a filter stays selected.
    """

    def __init__(
        self,
        context: DisplayContext,
        obligations: Iterable[Obligation] = (),
        sink: Optional[Callable[[List[ObligationRow]], None]] = None
    ):
        self.context = context
        self.sink = sink
        self.filters: Dict[FilterField, str] = {field: "" for field in FilterField}
        self.sort_field = SortField.DUE_DATE
        self.sort_direction = SortDirection.ASC
        self.selected_ids: Set[str] = set()
        self._obligations: List[Obligation] = list(obligations)
        self._view: List[ObligationRow] = []
        self._refresh()

    @property
    def view(self) -> List[ObligationRow]:
        return list(self._view)

    @property
    def visible_ids(self) -> List[str]:
        return [row.id for row in self._view]

    def set_collection(self, obligations: Iterable[Obligation]) -> None:
        self._obligations = list(obligations)
        self._refresh()

    def set_context(self, context: DisplayContext) -> None:
        self.context = context
        self._refresh()

    def set_filter(self, field: Union[FilterField, str], text: str) -> None:
        self.filters[FilterField(field)] = text or ""
        self._refresh()

    def clear_filters(self) -> None:
        self.filters = {field: "" for field in FilterField}
        self._refresh()

    def toggle_sort(self, field: Union[SortField, str]) -> None:
        """Same field flips direction; a new field sorts ascending."""
        field = SortField(field)
        if field is self.sort_field:
            self.sort_direction = (
                SortDirection.DESC
                if self.sort_direction is SortDirection.ASC
                else SortDirection.ASC
            )
        else:
            self.sort_field = field
            self.sort_direction = SortDirection.ASC
        self._refresh()

    def toggle_one(self, obligation_id: str) -> None:
        if obligation_id in self.selected_ids:
            self.selected_ids.discard(obligation_id)
        else:
            self.selected_ids.add(obligation_id)

    def toggle_all(self) -> None:
        """
        Select exactly the visible rows, or clear if they already are the selection.

        With nothing visible this is a no-op; hidden selections are kept.
        """
        visible = set(self.visible_ids)
        if not visible:
            return
        if self.selected_ids == visible:
            self.selected_ids = set()
        else:
            self.selected_ids = visible

    @property
    def all_selected(self) -> bool:
        visible = set(self.visible_ids)
        return bool(visible) and self.selected_ids == visible

    async def delete_selected(
        self,
        deleter: CascadeDeleteService,
        confirmed: bool
    ) -> List[DeletionResult]:
        """
        Cascade-delete every selected obligation, one at a time.

        Nothing happens without confirmation. A failure stops the batch:
        deletions already done stay done, the rest stay selected.
        """
        if not confirmed or not self.selected_ids:
            return []

        visible_order = [oid for oid in self.visible_ids if oid in self.selected_ids]
        hidden = sorted(self.selected_ids.difference(visible_order))
        results: List[DeletionResult] = []

        logger.info("Bulk delete started", count=len(visible_order) + len(hidden))
        try:
            for obligation_id in visible_order + hidden:
                results.append(await deleter.delete_obligation(obligation_id))
                self.selected_ids.discard(obligation_id)
        finally:
            done = {result.obligation_id for result in results}
            self._obligations = [o for o in self._obligations if o.id not in done]
            self._refresh()
            logger.info("Bulk delete finished", deleted=len(done), remaining=len(self.selected_ids))

        return results

    def _refresh(self) -> None:
        rows = [self.context.render(obligation) for obligation in self._obligations]
        self._view = query_rows(rows, self.filters, self.sort_field, self.sort_direction)
        if self.sink is not None:
            self.sink(list(self._view))
