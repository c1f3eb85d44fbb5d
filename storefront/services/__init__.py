# Services Module
from .money import to_decimal, format_money

__all__ = ["to_decimal", "format_money"]
