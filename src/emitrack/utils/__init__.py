"""Utility functions for emitrack."""

from emitrack.utils.date_parser import parse_date
from emitrack.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
