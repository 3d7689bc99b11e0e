"""
Utility functions for Patungan
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from config import MAX_NAME_LENGTH
from constants import DECIMAL_QUANTIZE


def normalize_amount_text(text: str) -> Optional[str]:
    """Rewrite a typed or printed amount as a plain decimal string.

    Accepts both '25.000' / '1.234,56' and '25,000' / '1,234.56'. When both
    separators appear the last one is the decimal point. With a single kind,
    groups of exactly three digits are thousands and one trailing group of at
    most two digits is the fraction. Anything else is ambiguous: None.
    """
    if ',' in text and '.' in text:
        if text.rfind(',') > text.rfind('.'):
            return text.replace('.', '').replace(',', '.')
        return text.replace(',', '')

    separator = ',' if ',' in text else '.' if '.' in text else None
    if separator is None:
        return text

    groups = text.split(separator)
    if groups[0][:1] not in ('', '0') and all(len(g) == 3 for g in groups[1:]):
        return ''.join(groups)
    if len(groups) == 2 and len(groups[1]) <= 2:
        return groups[0] + '.' + groups[1]
    return None


def to_money(value: Any) -> Optional[Decimal]:
    """Coerce a user or service supplied amount to a quantized Decimal.

    Returns None when the value is not a finite number or is too large to
    hold at the minor unit. Floats go through str() so 0.1 becomes
    Decimal('0.1') and not its binary expansion. Strings of digits and
    separators are read with normalize_amount_text().
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, float):
        value = str(value)
    elif isinstance(value, str):
        value = value.strip()
        if re.fullmatch(r'-?[\d,\.]+', value):
            sign, digits = ('-', value[1:]) if value.startswith('-') else ('', value)
            digits = normalize_amount_text(digits)
            if digits is None:
                return None
            value = sign + digits
        if not value:
            return None

    try:
        amount = Decimal(value)
        if not amount.is_finite():
            return None
        return amount.quantize(DECIMAL_QUANTIZE, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        return None


def to_quantity(value: Any) -> Optional[int]:
    """Coerce a unit count to int, None if it is not a whole number"""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None

    if not number.is_finite() or number != number.to_integral_value():
        return None

    return int(number)


def format_currency(amount: Decimal, currency: str = 'IDR') -> str:
    """Format currency amount with proper symbols"""
    if not isinstance(amount, (int, Decimal)):
        return "0"

    amount = Decimal(amount)
    sign = '-' if amount < 0 else ''
    amount = abs(amount)

    whole, _, fraction = f"{amount:.2f}".partition('.')

    if currency == 'IDR':
        # id-ID: dot for thousands, comma for decimals, no zero decimals
        whole = f"{int(whole):,}".replace(',', '.')
        text = whole if fraction == '00' else f"{whole},{fraction}"
        return f"{sign}Rp{text}"

    currency_symbols = {
        'USD': '$',
        'EUR': '€',
        'GBP': '£'
    }
    symbol = currency_symbols.get(currency)
    text = f"{int(whole):,}.{fraction}"

    if symbol:
        return f"{sign}{symbol}{text}"
    return f"{sign}{text} {currency}"


def try_parse_int(value: str) -> Optional[int]:
    """Safely parse integer from string"""
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def try_parse_decimal(value: str) -> Optional[Decimal]:
    """Safely parse a money amount from string"""
    if not isinstance(value, str):
        return None
    return to_money(value)


def validate_menu_choice(choice: str, valid_choices: list[str]) -> Optional[str]:
    """Validate a menu choice against allowed options"""
    if not isinstance(choice, str):
        return None
    choice = choice.strip()
    return choice if choice in set(valid_choices) else None


def clean_text_for_display(text: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Clean text for safe display in UI"""
    if not isinstance(text, str):
        return ""

    # Remove control characters
    text = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', text)

    # Normalize whitespace
    text = ' '.join(text.split())

    # If too long
    if len(text) > max_length:
        text = text[:max_length-3] + "..."

    return text
