"""Minor-unit money helpers"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Union

from app.core.exceptions import InvalidAmount

# Currencies whose minor unit is not 1/100
CURRENCY_EXPONENTS: Dict[str, int] = {
    "BIF": 0,
    "CLP": 0,
    "ISK": 0,
    "JPY": 0,
    "KRW": 0,
    "PYG": 0,
    "UGX": 0,
    "VND": 0,
    "XAF": 0,
    "XOF": 0,
    "BHD": 3,
    "IQD": 3,
    "JOD": 3,
    "KWD": 3,
    "LYD": 3,
    "OMR": 3,
    "TND": 3,
}

DEFAULT_EXPONENT = 2

# Largest amount a BigInteger column holds
MAX_AMOUNT_MINOR = 2**63 - 1

AmountInput = Union[Decimal, int, str, float]


def normalize_currency(code: str) -> str:
    """
    Normalize a currency code to upper case.

    Raises:
        ValueError: If code is not three ASCII letters
    """
    normalized = code.strip().upper()
    if len(normalized) != 3 or not normalized.isascii() or not normalized.isalpha():
        raise ValueError(f"Invalid currency code: {code!r}")
    return normalized


def currency_exponent(currency: str) -> int:
    """Number of decimal places of the currency's minor unit"""
    return CURRENCY_EXPONENTS.get(currency.upper(), DEFAULT_EXPONENT)


def to_minor_units(value: AmountInput, currency: str) -> int:
    """
    Convert a decimal amount to an integer count of minor units.

    The conversion is lossless: amounts with more fractional digits than
    the currency allows are rejected rather than rounded.

    Args:
        value: Amount as Decimal, int, decimal string or float
        currency: Currency code

    Returns:
        Amount in minor units

    Raises:
        InvalidAmount: If the value is not a finite number, is too precise
            for the currency or exceeds MAX_AMOUNT_MINOR
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be a number, got {value!r}")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Amount is not a number: {value!r}")

    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")

    exponent = currency_exponent(currency)
    _, digits, digit_exponent = amount.as_tuple()

    # Digits beyond the minor unit must all be zero
    excess = -digit_exponent - exponent
    if excess > 0 and any(digits[-excess:]):
        raise InvalidAmount(
            f"Amount {value!r} has more than {exponent} decimal places for {currency}"
        )

    if not amount:
        return 0

    # Bound the magnitude before scaling so huge exponents never reach int()
    if amount.adjusted() + exponent > 18:
        raise InvalidAmount(f"Amount {value!r} is too large")

    minor = int(amount.scaleb(exponent))
    if abs(minor) > MAX_AMOUNT_MINOR:
        raise InvalidAmount(f"Amount {value!r} is too large")

    return minor


def from_minor_units(minor: int, currency: str) -> Decimal:
    """
    Convert minor units back to a display decimal.

    Args:
        minor: Amount in minor units (may be negative)
        currency: Currency code

    Returns:
        Decimal quantized to the currency's exponent
    """
    exponent = currency_exponent(currency)
    return Decimal(minor).scaleb(-exponent).quantize(Decimal(10) ** -exponent)
