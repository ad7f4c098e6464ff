"""Heuristic matching of ledger transactions to EMIs.

Payments recorded through the EMI service carry an explicit ``emi_id``.
Transactions entered by hand only have a free-text description, so this
module guesses the EMI from it and applies one installment. Matching is
best-effort: nothing here ever raises into the caller.
"""

import logging
import re
from typing import Optional, Sequence

from emitrack.database.base import Database
from emitrack.domain.emi import EmiService
from emitrack.domain.entities import Emi, EmiStatus, PaymentType, Transaction, TransactionType

logger = logging.getLogger(__name__)

RECONCILE_KEYWORDS = (
    "EMI Payment:",
    "installment",
    "Cheetu",
    "Cashe",
    "True Balance",
    "Sangam",
    "Suresh",
)

_PAYMENT_PATTERN = re.compile(r"EMI Payment: (.+)")
_NOISE_PATTERN = re.compile(r"installment|EMI|Payment", re.IGNORECASE)


def is_reconcilable(description: Optional[str], keywords: Sequence[str] = RECONCILE_KEYWORDS) -> bool:
    """Whether a description mentions any reconciliation keyword (case-sensitive)."""
    if not description:
        return False
    return any(keyword in description for keyword in keywords)


def extract_match_key(description: str) -> Optional[str]:
    """Pull the EMI name out of a transaction description.

    ``"EMI Payment: <name>"`` yields ``<name>``; anything else has the words
    installment/EMI/Payment removed and the rest trimmed.
    """
    if "EMI Payment:" in description:
        match = _PAYMENT_PATTERN.search(description)
        key = match.group(1).strip() if match else ""
    else:
        key = _NOISE_PATTERN.sub("", description).strip()
    return key or None


def select_candidate(key: str, candidates: list[Emi]) -> Optional[Emi]:
    """Pick the EMI a key refers to.

    An exact (case-insensitive) name match wins. Otherwise the key must
    identify exactly one EMI; ambiguous keys select nothing.
    """
    lowered = key.lower()
    exact = [emi for emi in candidates if emi.name.lower() == lowered]
    if len(exact) == 1:
        return exact[0]
    if len(candidates) == 1:
        return candidates[0]
    return None


class EmiReconciler:
    """Apply EMI payments implied by transaction descriptions."""

    def __init__(
        self,
        db: Database,
        emi_service: Optional[EmiService] = None,
        keywords: Sequence[str] = RECONCILE_KEYWORDS,
    ):
        self.db = db
        self.emi_service = emi_service or EmiService(db)
        self.keywords = tuple(keywords)

    def find_candidates(self, user_id: str, key: str) -> list[Emi]:
        """Active EMIs of the user whose name contains the key, ignoring case.

        Full payments are settled at creation and never take installments.
        """
        lowered = key.lower()
        return [
            emi
            for emi in self.db.list_emis(user_id, status=EmiStatus.ACTIVE)
            if emi.payment_type != PaymentType.FULL_PAYMENT and lowered in emi.name.lower()
        ]

    def match(self, transaction: Transaction) -> Optional[Emi]:
        """Find the EMI a transaction pays into, without applying anything."""
        if transaction.emi_id is not None:
            return None
        if transaction.type != TransactionType.EXPENSE:
            return None
        if not is_reconcilable(transaction.description, self.keywords):
            return None

        key = extract_match_key(transaction.description)
        if key is None:
            logger.warning(
                "No EMI name in description of transaction %s: %r",
                transaction.id,
                transaction.description,
            )
            return None

        candidates = self.find_candidates(transaction.user_id, key)
        emi = select_candidate(key, candidates)
        if emi is None:
            if candidates:
                logger.warning(
                    "Transaction %s matches %d active EMIs for '%s' (%s); not applying a payment",
                    transaction.id,
                    len(candidates),
                    key,
                    ", ".join(candidate.name for candidate in candidates),
                )
            else:
                logger.warning(
                    "Transaction %s mentions '%s' but no active EMI matches", transaction.id, key
                )
        return emi

    def reconcile(self, transaction: Transaction) -> Optional[Emi]:
        """Apply one installment to the EMI a transaction refers to.

        Links the transaction to the EMI on success. Returns the updated EMI,
        or None when nothing matched or anything went wrong.
        """
        try:
            emi = self.match(transaction)
            if emi is None:
                return None
            updated = self.emi_service.apply_installment(emi)
            self.db.link_transaction_to_emi(transaction.id, updated.id)
            logger.info(
                "Updated EMI '%s' (id=%s) after transaction %s",
                updated.name,
                updated.id,
                transaction.id,
            )
            return updated
        except Exception:
            logger.exception("Error updating EMI after transaction %s", transaction.id)
            return None
