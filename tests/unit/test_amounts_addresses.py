"""Address codec, checked u256 math and decimal unit scaling."""
from __future__ import annotations

import time
from decimal import Decimal

import pytest

from token_ledger import (ArithmeticOverflow, ArithmeticUnderflow,
                          InvalidAddress, InvalidAmount, U256_MAX,
                          format_units, parse_units)
from token_ledger.address import NULL_ADDRESS, is_null, to_address, to_hex
from token_ledger.uint import is_u256, u256_add, u256_mul, u256_sub

# --------------------------------- address ------------------------------------


def test_to_address_accepts_bytes_and_hex() -> None:
    raw = bytes(range(20))
    assert to_address(raw) == raw
    assert to_address(bytearray(raw)) == raw
    assert to_address(memoryview(raw)) == raw
    assert to_address(to_hex(raw)) == raw
    assert to_address(" 0X" + raw.hex().upper() + " ") == raw


@pytest.mark.parametrize("bad", ["0x1234", "0x" + "zz" * 20, b"\x01" * 32, 42, None])
def test_to_address_rejects_malformed(bad) -> None:
    with pytest.raises(InvalidAddress):
        to_address(bad)


def test_null_address() -> None:
    assert is_null("0x" + "00" * 20)
    assert not is_null(b"\x00" * 19 + b"\x01")
    assert to_hex(NULL_ADDRESS) == "0x" + "00" * 20


# ---------------------------------- uint --------------------------------------


def test_checked_math() -> None:
    assert u256_add(U256_MAX - 1, 1) == U256_MAX
    assert u256_sub(5, 5) == 0
    assert u256_mul(2**128 - 1, 2**128 + 1) == U256_MAX
    with pytest.raises(ArithmeticOverflow):
        u256_add(U256_MAX, 1)
    with pytest.raises(ArithmeticUnderflow):
        u256_sub(1, 2)
    with pytest.raises(ArithmeticOverflow):
        u256_mul(2**128, 2**128)


def test_is_u256() -> None:
    assert is_u256(0) and is_u256(U256_MAX)
    assert not is_u256(-1)
    assert not is_u256(U256_MAX + 1)
    assert not is_u256(True)
    assert not is_u256(1.0)


# ---------------------------------- units -------------------------------------


@pytest.mark.parametrize(
    "value,decimals,expected",
    [
        (100, 18, 100 * 10**18),
        ("1_000_000", 18, 10**24),
        ("0.5", 2, 50),
        (Decimal("1.25"), 2, 125),
        ("1e3", 0, 1000),
        ("0", 18, 0),
        ("12345678901234567890123456789012345.5", 1, 123456789012345678901234567890123455),
    ],
)
def test_parse_units(value, decimals, expected) -> None:
    assert parse_units(value, decimals) == expected


@pytest.mark.parametrize(
    "value,decimals",
    [
        ("0.001", 2),
        ("-1", 18),
        ("abc", 18),
        ("NaN", 18),
        (1.5, 18),
        (True, 18),
        (2**256, 0),
        ("1", -1),
    ],
)
def test_parse_units_rejects(value, decimals) -> None:
    with pytest.raises(InvalidAmount):
        parse_units(value, decimals)


def test_format_units() -> None:
    assert format_units(999_900 * 10**18) == "999900"
    assert format_units(15, decimals=1) == "1.5"
    assert format_units(1, decimals=3) == "0.001"
    assert format_units(1050, decimals=3) == "1.05"
    assert format_units(7, decimals=0) == "7"
    assert parse_units(format_units(123456789)) == 123456789


@pytest.mark.parametrize("value", ["1e30000000", "1" + "0" * 5000, Decimal("9E+999999")])
def test_parse_units_rejects_huge_magnitudes_quickly(value) -> None:
    started = time.perf_counter()
    with pytest.raises(InvalidAmount):
        parse_units(value)
    assert time.perf_counter() - started < 0.5


@pytest.mark.parametrize(
    "value,decimals,expected",
    [
        ("1e-30000000", 18, None),
        ("0e30000000", 18, 0),
        ("12.3400", 2, 1234),
        ("1" * 100 + "e-90", 0, None),
    ],
)
def test_parse_units_normalizes_digits_before_scaling(value, decimals, expected) -> None:
    if expected is None:
        with pytest.raises(InvalidAmount):
            parse_units(value, decimals)
    else:
        assert parse_units(value, decimals) == expected


@pytest.mark.parametrize("decimals", [-1, True, 1.5, "18"])
def test_format_units_rejects_bad_decimals(decimals) -> None:
    with pytest.raises(InvalidAmount):
        format_units(5, decimals=decimals)
