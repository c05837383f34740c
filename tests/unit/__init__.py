"""
tests.unit
==========

Example-based tests for individual token_ledger modules. Shared fixtures live
in `tests/conftest.py`; property-based suites live in `tests/property`.
"""
