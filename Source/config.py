"""
Centralized configuration for Patungan with environment
"""

import os
from decimal import Decimal, InvalidOperation


def read_minor_unit(raw: str) -> Decimal:
    """Smallest currency unit: a power of ten no larger than 1"""
    try:
        unit = Decimal(raw).normalize()
    except InvalidOperation:
        unit = Decimal("NaN")
    sign, digits, exponent = unit.as_tuple()
    if sign or digits != (1,) or not isinstance(exponent, int) or exponent > 0:
        raise ValueError(f"PATUNGAN_MINOR_UNIT must be a power of ten such as 1 or 0.01, got {raw!r}")
    return unit


# Money settings
CURRENCY_DEFAULT = os.getenv("PATUNGAN_DEFAULT_CURRENCY", "IDR")
MINOR_UNIT = read_minor_unit(os.getenv("PATUNGAN_MINOR_UNIT", "0.01"))

# Receipt text parsing
ITEM_PRICE_MAX = Decimal(os.getenv("PATUNGAN_ITEM_PRICE_MAX", "100000000"))
DUPLICATE_SIMILARITY_THRESHOLD = float(os.getenv("PATUNGAN_DUP_SIMILARITY", "0.95"))
PARSER_DEBUG = os.getenv("PATUNGAN_PARSER_DEBUG", "0").lower() in ("1", "true", "yes")

# Display
MAX_NAME_LENGTH = int(os.getenv("PATUNGAN_MAX_NAME_LENGTH", "100"))
