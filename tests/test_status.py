"""Tests for derived obligation status."""
import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from fluxo.models.ledger import LedgerEntry
from fluxo.models.obligation import Obligation, ObligationKind
from fluxo.services.status import ObligationStatus, derive_status, status_label

NOW = date(2024, 1, 3)


def obligation(due_date, settled=False, kind=ObligationKind.PAYABLE):
    return Obligation(
        id="o-1",
        kind=kind,
        counterparty_id="sup-1",
        category_id="cat-exp",
        value=Decimal("10.00"),
        due_date=due_date,
        settled=settled,
        settled_date=datetime(2024, 1, 2, tzinfo=timezone.utc) if settled else None
    )


class TestDeriveStatus:

    def test_settled_wins_over_overdue(self):
        assert derive_status(obligation(date(2023, 12, 1), settled=True), NOW) == ObligationStatus.SETTLED

    def test_past_due_date_is_overdue(self):
        assert derive_status(obligation(date(2024, 1, 2)), NOW) == ObligationStatus.OVERDUE

    def test_due_today_is_due_soon(self):
        assert derive_status(obligation(NOW), NOW) == ObligationStatus.DUE_SOON

    def test_seven_days_ahead_is_due_soon(self):
        assert derive_status(obligation(NOW + timedelta(days=7)), NOW) == ObligationStatus.DUE_SOON

    def test_eight_days_ahead_is_pending(self):
        assert derive_status(obligation(NOW + timedelta(days=8)), NOW) == ObligationStatus.PENDING

    def test_time_of_day_is_ignored(self):
        late_evening = datetime(2024, 1, 3, 23, 59)
        assert derive_status(obligation(date(2024, 1, 3)), late_evening) == ObligationStatus.DUE_SOON
        assert derive_status(obligation(date(2024, 1, 2)), late_evening) == ObligationStatus.OVERDUE

    def test_custom_window(self):
        assert derive_status(obligation(NOW + timedelta(days=3)), NOW, due_soon_days=2) == ObligationStatus.PENDING

    def test_iso_datetime_due_date_keeps_calendar_day(self):
        ob = obligation("2024-01-03T23:30:00-03:00")
        assert ob.due_date == date(2024, 1, 3)
        assert derive_status(ob, NOW) == ObligationStatus.DUE_SOON


class TestStatusLabel:

    @pytest.mark.parametrize("status,kind,expected", [
        (ObligationStatus.SETTLED, ObligationKind.PAYABLE, "Pago"),
        (ObligationStatus.SETTLED, ObligationKind.RECEIVABLE, "Recebido"),
        (ObligationStatus.OVERDUE, ObligationKind.PAYABLE, "Vencido"),
        (ObligationStatus.DUE_SOON, ObligationKind.RECEIVABLE, "Em breve"),
        (ObligationStatus.PENDING, ObligationKind.RECEIVABLE, "Pendente"),
    ])
    def test_pt_br_labels(self, status, kind, expected):
        assert status_label(status, kind, "pt_BR") == expected

    def test_only_overdue_label_contains_venc(self):
        labels = [
            status_label(status, kind, "pt_BR")
            for status in ObligationStatus
            for kind in ObligationKind
        ]
        assert {label for label in labels if "venc" in label.lower()} == {"Vencido"}

    def test_en_us_labels(self):
        assert status_label(ObligationStatus.SETTLED, ObligationKind.RECEIVABLE, "en_US") == "Received"
        assert status_label(ObligationStatus.DUE_SOON, ObligationKind.PAYABLE, "en_US") == "Due soon"


class TestTimestamps:

    def test_naive_settled_date_is_read_as_utc(self):
        ob = Obligation(
            kind=ObligationKind.RECEIVABLE,
            counterparty_id="cli-1",
            category_id="cat-rev",
            value=Decimal("10.00"),
            due_date=date(2024, 1, 1),
            settled=True,
            settled_date=datetime(2024, 1, 3, 9, 0)
        )
        assert ob.settled_date == datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc)

    def test_naive_and_aware_payment_dates_sort_together(self):
        naive = LedgerEntry(
            kind="expense", category_id="cat-exp", value=Decimal("1.00"),
            payment_date="2024-01-05T10:00:00"
        )
        aware = LedgerEntry(
            kind="expense", category_id="cat-exp", value=Decimal("1.00"),
            payment_date=datetime(2024, 1, 5, 9, 0, tzinfo=timezone.utc)
        )

        assert naive.payment_date.tzinfo is not None
        assert sorted([naive, aware], key=lambda e: e.payment_date) == [aware, naive]
