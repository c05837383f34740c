"""
token_ledger.units — decimal <-> smallest-unit scaling.

The ledger itself only stores integers in its smallest unit. Hosts that accept
human amounts ("100", "0.25") scale them here before calling the ledger, the
same way wallets turn "1.5 tokens" into 1.5 * 10**18 base units.

No floats: `float` inputs are refused because they cannot represent most
decimal fractions exactly.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .errors import InvalidAmount
from .uint import U256_MAX, require_amount

DEFAULT_DECIMALS = 18

UnitsLike = Union[int, str, Decimal]

_U256_DIGITS = len(str(U256_MAX))


def _require_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise InvalidAmount("decimals must be a non-negative int", data={"decimals": str(decimals)})


def parse_units(value: UnitsLike, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert a human amount into smallest units.

    >>> parse_units(100)
    100000000000000000000
    >>> parse_units("0.5", decimals=2)
    50
    """
    _require_decimals(decimals)

    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount(f"unsupported amount type: {type(value).__name__}")

    if isinstance(value, int):
        require_amount(value, name="value")
        d = Decimal(value)
    elif isinstance(value, str):
        try:
            d = Decimal(value.strip().replace("_", ""))
        except InvalidOperation as e:
            raise InvalidAmount("amount is not a decimal number", data={"value": value[:64]}) from e
    elif isinstance(value, Decimal):
        d = value
    else:
        raise InvalidAmount(f"unsupported amount type: {type(value).__name__}")

    if not d.is_finite() or d < 0:
        raise InvalidAmount("amount must be finite and non-negative", data={"value": str(value)})

    # exact integer scaling; Decimal.scaleb would round past the context precision.
    # Bounds are checked on the digit tuple so huge exponents never materialize.
    _, digits, exponent = d.as_tuple()
    digits = digits[next((i for i, x in enumerate(digits) if x), len(digits)):]
    if not digits:
        return 0
    nonzero = len(digits)
    while digits[nonzero - 1] == 0:
        nonzero -= 1
    exponent += len(digits) - nonzero
    digits = digits[:nonzero]

    shift = exponent + decimals
    if shift < 0:
        raise InvalidAmount(
            f"amount has more than {decimals} fractional digits",
            data={"value": str(value)[:64]},
        )
    if len(digits) + shift > _U256_DIGITS:
        raise InvalidAmount("amount exceeds 2**256-1", data={"value": str(value)[:64]})
    out = int("".join(str(x) for x in digits)) * 10**shift
    if out > U256_MAX:
        raise InvalidAmount("amount exceeds 2**256-1", data={"value": str(value)[:64]})
    return out


def format_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """
    Render smallest units as a plain decimal string without trailing zeros.

    >>> format_units(999_900 * 10**18)
    '999900'
    >>> format_units(15, decimals=1)
    '1.5'
    """
    require_amount(amount)
    _require_decimals(decimals)
    if decimals == 0:
        return str(amount)
    whole, frac = divmod(amount, 10**decimals)
    if frac == 0:
        return str(whole)
    frac_s = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{frac_s}"


__all__ = ["DEFAULT_DECIMALS", "UnitsLike", "parse_units", "format_units"]
