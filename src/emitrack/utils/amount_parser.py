"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a non-negative amount string into a Decimal.

    Handles "1000", "1,000.50", "₹1,000" and "$12.99". Ledger amounts are
    never negative; the transaction type carries the direction.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed or is negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"[₹$€£¥,\s]", "", amount_str)
    if cleaned.lower().startswith("rs."):
        cleaned = cleaned[3:]

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: '{amount_str}'")
    return amount
