"""Tests for matching ledger transactions to EMIs."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from conftest import TEST_USER
from emitrack.domain.entities import EmiStatus
from emitrack.domain.reconciler import (
    EmiReconciler,
    extract_match_key,
    is_reconcilable,
    select_candidate,
)


def _create_emi(emi_service, name, amount="1000", installments=12):
    return emi_service.create_emi(
        user_id=TEST_USER,
        name=name,
        emi_type="personal_loan",
        payment_type="emi",
        emi_amount=Decimal(amount),
        start_date=date(2024, 1, 10),
        total_installments=installments,
    )


def _expense(transaction_service, description, transaction_type="expense"):
    return transaction_service.create_transaction(
        user_id=TEST_USER,
        transaction_type=transaction_type,
        amount=Decimal("1000"),
        description=description,
        date=date(2024, 2, 10),
    )


class TestHelpers:
    """Tests for the pure matching helpers."""

    @pytest.mark.parametrize(
        "description",
        ["EMI Payment: Phone Loan", "Bike installment", "Cheetu for March", "Cashe repayment"],
    )
    def test_reconcilable(self, description):
        assert is_reconcilable(description)

    @pytest.mark.parametrize(
        "description", ["Groceries", "emi payment: phone loan", "Installment", "", None]
    )
    def test_not_reconcilable(self, description):
        assert not is_reconcilable(description)

    def test_custom_keywords(self):
        assert is_reconcilable("Gym dues", keywords=("dues",))
        assert not is_reconcilable("EMI Payment: Gym", keywords=("dues",))

    def test_extract_from_payment_description(self):
        assert extract_match_key("EMI Payment: Phone Loan") == "Phone Loan"
        assert extract_match_key("Paid EMI Payment:  Bike Loan  ") == "Bike Loan"

    def test_extract_strips_noise_words(self):
        assert extract_match_key("Phone Loan installment") == "Phone Loan"
        assert extract_match_key("Cheetu") == "Cheetu"

    def test_extract_empty_key(self):
        assert extract_match_key("EMI Payment:   ") is None
        assert extract_match_key("installment") is None

    def test_select_exact_name_wins(self, phone_loan):
        other = replace(phone_loan, id=99, name="Phone")
        assert select_candidate("phone", [phone_loan, other]) == other

    def test_select_single_candidate(self, phone_loan):
        assert select_candidate("phone", [phone_loan]) == phone_loan

    def test_select_ambiguous(self, phone_loan):
        other = replace(phone_loan, id=99, name="Phone Loan 2")
        assert select_candidate("phone", [phone_loan, other]) is None
        assert select_candidate("phone", []) is None


class TestReconcileOnCreate:
    """Tests for installments applied when transactions are created."""

    def test_payment_description_applies_installment(
        self, transaction_service, temp_db, phone_loan
    ):
        txn = _expense(transaction_service, "EMI Payment: Phone Loan")

        emi = temp_db.get_emi(phone_loan.id)
        assert emi.paid_installments == 1
        assert emi.remaining_amount == Decimal("11000")
        assert emi.next_due_date == date(2024, 3, 15)
        assert txn.emi_id == phone_loan.id

    def test_keyword_description_matches_by_substring(
        self, transaction_service, emi_service, temp_db
    ):
        chit = _create_emi(emi_service, "Cheetu Group", amount="5000", installments=20)
        _expense(transaction_service, "Cheetu")
        assert temp_db.get_emi(chit.id).paid_installments == 1

    def test_case_insensitive_name_match(self, transaction_service, temp_db, phone_loan):
        _expense(transaction_service, "EMI Payment: phone loan")
        assert temp_db.get_emi(phone_loan.id).paid_installments == 1

    def test_income_is_ignored(self, transaction_service, temp_db, phone_loan):
        txn = _expense(transaction_service, "EMI Payment: Phone Loan", transaction_type="income")
        assert temp_db.get_emi(phone_loan.id).paid_installments == 0
        assert txn.emi_id is None

    def test_unrelated_description_is_ignored(self, transaction_service, temp_db, phone_loan):
        _expense(transaction_service, "Phone Loan")
        assert temp_db.get_emi(phone_loan.id).paid_installments == 0

    def test_no_matching_emi(self, transaction_service, temp_db, phone_loan, caplog):
        with caplog.at_level(logging.WARNING, logger="emitrack.domain.reconciler"):
            txn = _expense(transaction_service, "EMI Payment: Car Loan")
        assert txn.emi_id is None
        assert temp_db.get_emi(phone_loan.id).paid_installments == 0
        assert "no active EMI matches" in caplog.text

    def test_ambiguous_match_applies_nothing(
        self, transaction_service, emi_service, temp_db, caplog
    ):
        first = _create_emi(emi_service, "Bike Loan")
        second = _create_emi(emi_service, "Home Loan")

        with caplog.at_level(logging.WARNING, logger="emitrack.domain.reconciler"):
            txn = _expense(transaction_service, "EMI Payment: Loan")

        assert txn.emi_id is None
        assert temp_db.get_emi(first.id).paid_installments == 0
        assert temp_db.get_emi(second.id).paid_installments == 0
        assert "matches 2 active EMIs" in caplog.text

    def test_exact_name_beats_substring(self, transaction_service, emi_service, temp_db):
        loan = _create_emi(emi_service, "Loan")
        bike = _create_emi(emi_service, "Bike Loan")

        _expense(transaction_service, "EMI Payment: Loan")

        assert temp_db.get_emi(loan.id).paid_installments == 1
        assert temp_db.get_emi(bike.id).paid_installments == 0

    def test_inactive_emi_not_matched(self, transaction_service, emi_service, temp_db, phone_loan):
        emi_service.update_emi(TEST_USER, phone_loan.id, status="defaulted")
        txn = _expense(transaction_service, "EMI Payment: Phone Loan")
        assert txn.emi_id is None
        assert temp_db.get_emi(phone_loan.id).paid_installments == 0

    def test_full_payment_not_matched(self, transaction_service, emi_service, temp_db):
        laptop = emi_service.create_emi(
            user_id=TEST_USER,
            name="Laptop",
            emi_type="laptop_emi",
            payment_type="full_payment",
            emi_amount=Decimal("55000"),
            start_date=date(2024, 1, 10),
        )

        txn = _expense(transaction_service, "EMI Payment: Laptop")

        assert txn.emi_id is None
        stored = temp_db.get_emi(laptop.id)
        assert (stored.paid_installments, stored.total_installments) == (1, 1)

    def test_other_users_emi_not_matched(self, transaction_service, temp_db, phone_loan):
        transaction_service.create_transaction(
            user_id="someone-else",
            transaction_type="expense",
            amount=Decimal("1000"),
            description="EMI Payment: Phone Loan",
            date=date(2024, 2, 10),
        )
        assert temp_db.get_emi(phone_loan.id).paid_installments == 0

    def test_last_installment_completes_emi(self, transaction_service, emi_service, temp_db):
        emi = _create_emi(emi_service, "Cashe Advance", amount="2000", installments=1)
        _expense(transaction_service, "Cashe Advance installment")
        stored = temp_db.get_emi(emi.id)
        assert stored.status == EmiStatus.COMPLETED
        assert stored.remaining_amount == Decimal("0")


class TestReconcileGuards:
    """Tests for transactions that must not be reconciled again."""

    def test_linked_transaction_is_skipped(self, emi_service, reconciler, temp_db, phone_loan):
        result = emi_service.record_payment(
            TEST_USER, phone_loan.id, amount=Decimal("1000"), payment_date=date(2024, 2, 15)
        )
        assert reconciler.reconcile(result.transaction) is None
        assert temp_db.get_emi(phone_loan.id).paid_installments == 1

    def test_failures_are_swallowed(self, temp_db, transaction_service, phone_loan, caplog):
        class BrokenEmiService:
            def apply_installment(self, emi):
                raise RuntimeError("database is locked")

        transaction_service.reconciler = EmiReconciler(temp_db, emi_service=BrokenEmiService())

        with caplog.at_level(logging.ERROR, logger="emitrack.domain.reconciler"):
            txn = _expense(transaction_service, "EMI Payment: Phone Loan")

        assert txn.id is not None
        assert txn.emi_id is None
        assert "Error updating EMI" in caplog.text


class TestReconcileOnUpdate:
    """Tests for installments applied when a description is edited."""

    def test_new_description_is_reconciled(self, transaction_service, temp_db, phone_loan):
        txn = _expense(transaction_service, "Phone bill")
        updated = transaction_service.update_transaction(
            TEST_USER, txn.id, description="EMI Payment: Phone Loan"
        )
        assert updated.emi_id == phone_loan.id
        assert temp_db.get_emi(phone_loan.id).paid_installments == 1

    def test_unchanged_description_is_not_reconciled_again(
        self, transaction_service, temp_db, phone_loan
    ):
        txn = _expense(transaction_service, "Phone bill")
        transaction_service.update_transaction(TEST_USER, txn.id, amount=Decimal("1200"))
        assert temp_db.get_emi(phone_loan.id).paid_installments == 0

    def test_already_linked_transaction_is_not_reconciled_again(
        self, transaction_service, temp_db, phone_loan
    ):
        txn = _expense(transaction_service, "EMI Payment: Phone Loan")
        transaction_service.update_transaction(
            TEST_USER, txn.id, description="EMI Payment: Phone Loan (Feb)"
        )
        assert temp_db.get_emi(phone_loan.id).paid_installments == 1
