"""
tests.property package bootstrap.

Shared configuration for property-based tests (Hypothesis), kept intentionally
lightweight so importing this package has no external deps beyond Hypothesis.

What this does on import:
- Registers a few named Hypothesis profiles (dev/ci/fast/stress) with sane
  defaults for this repo.
- Selects the active profile using HYPOTHESIS_PROFILE, otherwise "ci" on CI
  (CI env var present/truthy) and "dev" locally.
- Exposes ledger-shaped strategies (addresses, amounts, operations).

Usage in tests:
    from tests.property import given, st, amounts

    @given(amounts())
    def test_something(n):
        ...

Environment knobs:
- HYPOTHESIS_PROFILE=dev|ci|fast|stress
- CI=true (auto-pick the 'ci' profile if HYPOTHESIS_PROFILE not set)
"""
from __future__ import annotations

import os
from typing import Final, Tuple

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

# ---- profile registry --------------------------------------------------------


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


# Deadlines off: ledger runs are fast but CI machines are not.
settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "stress",
    settings(
        max_examples=1000,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.data_too_large),
        verbosity=Verbosity.normal,
        derandomize=True,
    ),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or (
    "ci" if _env_truthy("CI") else "dev"
)
settings.load_profile(_active)


def is_ci() -> bool:
    return _env_truthy("CI")


def active_profile() -> str:
    """Return the name of the active Hypothesis profile."""
    return _active


# ---- ledger strategies -------------------------------------------------------

NULL = b"\x00" * 20

# A small population so random operations collide on the same accounts often.
POPULATION = tuple(bytes([b]) * 20 for b in (0x11, 0x22, 0x33, 0x44))


def addresses(*, with_null: bool = True):
    """An account from the fixed population, optionally including the null address."""
    pool = POPULATION + ((NULL,) if with_null else ())
    return st.sampled_from(pool)


def amounts(max_value: int = 10**24):
    return st.integers(min_value=0, max_value=max_value)


def operations(max_value: int = 10**24):
    """
    One ledger call as a tuple:
      ("transfer", sender, to, amount)
      ("approve", owner, spender, amount)
      ("transfer_from", spender, owner, to, amount)
    """
    return st.one_of(
        st.tuples(st.just("transfer"), addresses(with_null=False), addresses(), amounts(max_value)),
        st.tuples(st.just("approve"), addresses(with_null=False), addresses(), amounts(max_value)),
        st.tuples(
            st.just("transfer_from"),
            addresses(with_null=False),
            addresses(with_null=False),
            addresses(),
            amounts(max_value),
        ),
    )


__all__ = [
    "st",
    "given",
    "settings",
    "is_ci",
    "active_profile",
    "NULL",
    "POPULATION",
    "addresses",
    "amounts",
    "operations",
]
