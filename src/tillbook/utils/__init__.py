"""Utility functions for tillbook."""

from tillbook.utils.date_parser import parse_date
from tillbook.utils.amount_parser import parse_amount, to_decimal, to_money

__all__ = ["parse_date", "parse_amount", "to_decimal", "to_money"]
