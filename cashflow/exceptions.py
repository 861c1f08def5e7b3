from __future__ import annotations


class CashflowError(Exception):
    """Base exception for the cash-flow engine."""


class InvalidInput(CashflowError, ValueError):
    """Raised when an event, debt state or query argument is malformed."""
