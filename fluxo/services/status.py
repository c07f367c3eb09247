"""
Display status of an obligation, derived from its settlement flag and due
date relative to "now". Never stored.

Precedence: settled, then overdue (due date before today), then due soon
(due within DUE_SOON_DAYS days, inclusive), then pending. Comparison is by
calendar day only.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from fluxo.core.config import settings
from fluxo.models.obligation import Obligation, ObligationKind
from fluxo.utils.formatting import coerce_date

Now = Union[date, datetime, None]


class ObligationStatus(str, Enum):
    SETTLED = "settled"
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    PENDING = "pending"


STATUS_LABELS = {
    "pt_BR": {
        ObligationStatus.SETTLED: {
            ObligationKind.PAYABLE: "Pago",
            ObligationKind.RECEIVABLE: "Recebido",
        },
        ObligationStatus.OVERDUE: "Vencido",
        ObligationStatus.DUE_SOON: "Em breve",
        ObligationStatus.PENDING: "Pendente",
    },
    "en_US": {
        ObligationStatus.SETTLED: {
            ObligationKind.PAYABLE: "Paid",
            ObligationKind.RECEIVABLE: "Received",
        },
        ObligationStatus.OVERDUE: "Overdue",
        ObligationStatus.DUE_SOON: "Due soon",
        ObligationStatus.PENDING: "Pending",
    },
}


def today(now: Now = None) -> date:
    """Calendar day of `now`, defaulting to the current local day."""
    if now is None:
        return date.today()
    return coerce_date(now)


def derive_status(
    obligation: Obligation,
    now: Now = None,
    due_soon_days: Optional[int] = None
) -> ObligationStatus:
    if obligation.settled:
        return ObligationStatus.SETTLED

    if due_soon_days is None:
        due_soon_days = settings.DUE_SOON_DAYS

    days_left = (coerce_date(obligation.due_date) - today(now)).days
    if days_left < 0:
        return ObligationStatus.OVERDUE
    if days_left <= due_soon_days:
        return ObligationStatus.DUE_SOON
    return ObligationStatus.PENDING


def status_label(
    status: ObligationStatus,
    kind: ObligationKind,
    locale: Optional[str] = None
) -> str:
    locale = locale or settings.DISPLAY_LOCALE
    labels = STATUS_LABELS.get(locale, STATUS_LABELS["en_US"])
    label = labels[status]
    if isinstance(label, dict):
        return label[kind]
    return label
