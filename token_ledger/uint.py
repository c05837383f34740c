"""
token_ledger.uint
=================

Checked unsigned-integer helpers for ledger amounts.

Goals
-----
- **U256**-oriented arithmetic that never uses floats.
- Checked style only: raise on overflow/underflow instead of wrapping or
  clamping. A ledger never saturates a balance.
- Deterministic behavior with stable error codes (see `token_ledger.errors`).

Conventions
-----------
- Amounts are Python `int` in the closed interval [0, U256_MAX].
- `bool` is rejected even though it subclasses `int`.
"""

from __future__ import annotations

from typing import Final

from .errors import ArithmeticOverflow, ArithmeticUnderflow, InvalidAmount

U256_MAX: Final[int] = (1 << 256) - 1


def is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U256_MAX


def require_amount(x: object, *, name: str = "amount") -> int:
    """Return `x` if it is a valid amount, else raise InvalidAmount."""
    if not is_u256(x):
        raise InvalidAmount(
            f"{name} must be an int in [0, 2**256-1]",
            data={"field": name, "value": repr(x)[:80]},
        )
    return x  # type: ignore[return-value]


def u256_add(x: int, y: int) -> int:
    """Checked add: raise on overflow."""
    require_amount(x, name="x")
    require_amount(y, name="y")
    s = x + y
    if s > U256_MAX:
        raise ArithmeticOverflow(data={"op": "add"})
    return s


def u256_sub(x: int, y: int) -> int:
    """Checked sub: raise on underflow (y > x)."""
    require_amount(x, name="x")
    require_amount(y, name="y")
    if y > x:
        raise ArithmeticUnderflow(data={"op": "sub", "x": str(x), "y": str(y)})
    return x - y


def u256_mul(x: int, y: int) -> int:
    """Checked multiply: raise on overflow."""
    require_amount(x, name="x")
    require_amount(y, name="y")
    p = x * y
    if p > U256_MAX:
        raise ArithmeticOverflow(data={"op": "mul"})
    return p


__all__ = [
    "U256_MAX",
    "is_u256",
    "require_amount",
    "u256_add",
    "u256_sub",
    "u256_mul",
]
