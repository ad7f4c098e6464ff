"""Tests for the amortization engine."""

from datetime import date
from decimal import Decimal

from emitrack.domain import amortization
from emitrack.domain.entities import PaymentType


def test_add_months_keeps_day():
    assert amortization.add_months(date(2024, 1, 15), 1) == date(2024, 2, 15)
    assert amortization.add_months(date(2024, 1, 15), 12) == date(2025, 1, 15)


def test_add_months_clamps_to_month_end():
    assert amortization.add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert amortization.add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert amortization.add_months(date(2024, 3, 31), 1) == date(2024, 4, 30)


def test_rolling_month_by_month_keeps_clamped_day():
    due = date(2024, 1, 31)
    due = amortization.add_months(due, 1)
    due = amortization.add_months(due, 1)
    assert due == date(2024, 3, 29)


def test_total_amount():
    assert amortization.total_amount(PaymentType.EMI, Decimal("1000"), 12) == Decimal("12000")
    assert amortization.total_amount(PaymentType.FULL_PAYMENT, Decimal("5000"), 1) == Decimal("5000")
    assert amortization.total_amount(PaymentType.SUBSCRIPTION, Decimal("649"), None) == Decimal("0")


def test_remaining_amount_never_negative():
    assert amortization.remaining_amount(PaymentType.EMI, Decimal("1000"), 12, 3) == Decimal("9000")
    assert amortization.remaining_amount(PaymentType.EMI, Decimal("1000"), 12, 15) == Decimal("0")


def test_remaining_amount_zero_for_non_installment_types():
    assert amortization.remaining_amount(PaymentType.SUBSCRIPTION, Decimal("649"), None, 4) == 0
    assert amortization.remaining_amount(PaymentType.FULL_PAYMENT, Decimal("5000"), 1, 1) == 0


def test_is_complete():
    assert amortization.is_complete(PaymentType.EMI, 12, 12)
    assert not amortization.is_complete(PaymentType.EMI, 12, 11)
    assert not amortization.is_complete(PaymentType.SUBSCRIPTION, None, 500)
    assert not amortization.is_complete(PaymentType.EMI, None, 3)


class TestBuildSchedule:
    """Tests for computing a schedule from scratch."""

    def test_new_installment_loan(self):
        schedule = amortization.build_schedule(
            PaymentType.EMI, Decimal("1000"), 12, 0, date(2024, 1, 15)
        )
        assert schedule.end_date == date(2025, 1, 15)
        assert schedule.next_due_date == date(2024, 2, 15)
        assert schedule.remaining_amount == Decimal("12000")
        assert not schedule.completed

    def test_partially_paid_loan(self):
        schedule = amortization.build_schedule(
            PaymentType.EMI, Decimal("1000"), 12, 4, date(2024, 1, 15)
        )
        assert schedule.next_due_date == date(2024, 6, 15)
        assert schedule.remaining_amount == Decimal("8000")

    def test_fully_paid_loan_due_date_is_end_date(self):
        schedule = amortization.build_schedule(
            PaymentType.EMI, Decimal("1000"), 12, 12, date(2024, 1, 15)
        )
        assert schedule.completed
        assert schedule.remaining_amount == Decimal("0")
        assert schedule.next_due_date == schedule.end_date == date(2025, 1, 15)

    def test_full_payment_is_terminal(self):
        schedule = amortization.build_schedule(
            PaymentType.FULL_PAYMENT, Decimal("25000"), None, 0, date(2024, 3, 10)
        )
        assert schedule.total_installments == 1
        assert schedule.paid_installments == 1
        assert schedule.remaining_amount == Decimal("0")
        assert schedule.next_due_date == date(2024, 3, 10)
        assert schedule.end_date == date(2024, 3, 10)
        assert schedule.completed

    def test_subscription_has_no_end(self):
        schedule = amortization.build_schedule(
            PaymentType.SUBSCRIPTION, Decimal("649"), None, 0, date(2024, 1, 1)
        )
        assert schedule.end_date is None
        assert schedule.next_due_date == date(2024, 2, 1)
        assert schedule.remaining_amount == Decimal("0")
        assert not schedule.completed


class TestAdvanceSchedule:
    """Tests for applying a single installment."""

    def test_moves_due_date_one_month(self):
        schedule = amortization.advance_schedule(
            PaymentType.EMI,
            Decimal("1000"),
            12,
            0,
            start_date=date(2024, 1, 15),
            next_due_date=date(2024, 2, 15),
            end_date=date(2025, 1, 15),
        )
        assert schedule.paid_installments == 1
        assert schedule.remaining_amount == Decimal("11000")
        assert schedule.next_due_date == date(2024, 3, 15)
        assert not schedule.completed

    def test_month_end_counts_from_start_date(self):
        schedule = amortization.advance_schedule(
            PaymentType.EMI,
            Decimal("100"),
            6,
            1,
            start_date=date(2024, 1, 31),
            next_due_date=date(2024, 3, 31),
            end_date=date(2024, 7, 31),
        )
        assert schedule.next_due_date == date(2024, 4, 30)

        rebuilt = amortization.build_schedule(
            PaymentType.EMI, Decimal("100"), 6, 2, date(2024, 1, 31)
        )
        assert rebuilt.next_due_date == schedule.next_due_date

    def test_due_date_moved_by_bulk_update_keeps_increasing(self):
        schedule = amortization.advance_schedule(
            PaymentType.EMI,
            Decimal("1000"),
            12,
            5,
            start_date=date(2024, 1, 15),
            next_due_date=date(2024, 8, 20),
            end_date=date(2025, 1, 15),
        )
        assert schedule.next_due_date == date(2024, 9, 20)

    def test_last_installment_completes(self):
        schedule = amortization.advance_schedule(
            PaymentType.EMI,
            Decimal("1000"),
            12,
            11,
            start_date=date(2024, 1, 15),
            next_due_date=date(2025, 1, 15),
            end_date=date(2025, 1, 15),
        )
        assert schedule.completed
        assert schedule.remaining_amount == Decimal("0")
        assert schedule.next_due_date == date(2025, 1, 15)

    def test_subscription_keeps_rolling(self):
        schedule = amortization.advance_schedule(
            PaymentType.SUBSCRIPTION,
            Decimal("649"),
            None,
            30,
            start_date=date(2024, 1, 1),
            next_due_date=date(2026, 8, 1),
            end_date=None,
        )
        assert schedule.paid_installments == 31
        assert schedule.next_due_date == date(2026, 9, 1)
        assert not schedule.completed


class TestScheduleFromLastPayment:
    """Tests for deriving a schedule from an absolute paid count."""

    def test_next_due_follows_last_payment(self):
        schedule = amortization.schedule_from_last_payment(
            PaymentType.EMI,
            Decimal("1000"),
            12,
            5,
            last_payment_date=date(2024, 6, 20),
            end_date=date(2025, 1, 15),
        )
        assert schedule.remaining_amount == Decimal("7000")
        assert schedule.next_due_date == date(2024, 7, 20)
        assert not schedule.completed

    def test_all_paid_clamps_to_end_date(self):
        schedule = amortization.schedule_from_last_payment(
            PaymentType.EMI,
            Decimal("1000"),
            12,
            12,
            last_payment_date=date(2024, 12, 20),
            end_date=date(2025, 1, 15),
        )
        assert schedule.completed
        assert schedule.remaining_amount == Decimal("0")
        assert schedule.next_due_date == date(2025, 1, 15)
