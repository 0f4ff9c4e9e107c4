"""Conversion between on-chain fixed-point integers and decimal amounts"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from typing import Union

from credit_relay.domain.exceptions import InvalidAmount

STABLE_TOKEN_DECIMALS = 6
SHARE_DECIMALS = 18

# Enough precision for any uint256 plus a full fractional part
_UINT256_DIGITS = 100

Amount = Union[Decimal, int, float, str]


def _as_decimal(value: Amount) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be a number, got {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr gives the shortest decimal that round-trips, so 0.1 stays 0.1
        value = repr(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmount(f"Amount must be a number, got {value!r}") from e


def to_chain_units(value: Amount, exponent: int) -> int:
    """
    Scale a decimal amount up to an on-chain integer.

    Digits beyond `exponent` fractional places are truncated, never rounded:
        to_chain_units("1.2345678", 6) == 1234567

    Raises:
        InvalidAmount: If value is negative, NaN, infinite or not a number
    """
    if exponent < 0:
        raise InvalidAmount(f"Exponent must be non-negative, got {exponent}")

    amount = _as_decimal(value)
    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmount(f"Amount must not be negative, got {value!r}")

    with localcontext() as ctx:
        # scaleb rounds to context precision; keep every input digit
        ctx.prec = max(_UINT256_DIGITS, len(amount.as_tuple().digits))
        return int(amount.scaleb(exponent).to_integral_value(rounding=ROUND_DOWN))


def to_decimal(value: int, exponent: int) -> Decimal:
    """Scale an on-chain integer down to its decimal amount (exact)"""
    with localcontext() as ctx:
        ctx.prec = _UINT256_DIGITS
        return Decimal(int(value)).scaleb(-exponent)
