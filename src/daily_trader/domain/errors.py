"""Error taxonomy for the trading engine.

Every failure carries an ``ErrorKind`` and a message fit for display. The executor
converts these into failed ``TradeResult`` objects; query helpers raise them.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    POLICY_VIOLATION = "policy_violation"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_HOLDINGS = "insufficient_holdings"
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"


class TradingError(Exception):
    """Base class for expected, non-fatal engine failures."""

    kind: ErrorKind = ErrorKind.TRANSIENT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ── Validation ─────────────────────────────────────────────────


class InvalidQuantity(TradingError):
    kind = ErrorKind.VALIDATION


class InvalidPagination(TradingError):
    kind = ErrorKind.VALIDATION


class MissingCredentials(TradingError):
    kind = ErrorKind.VALIDATION


class NotAuthenticated(TradingError):
    kind = ErrorKind.VALIDATION


# ── Policy ─────────────────────────────────────────────────────


class LimitExceeded(TradingError):
    """The single purchase allowed per trading day has been used."""

    kind = ErrorKind.POLICY_VIOLATION


class TooManyStockTypes(TradingError):
    """Buying a new instrument would exceed the max number of distinct holdings."""

    kind = ErrorKind.POLICY_VIOLATION


# ── Funds & Holdings ───────────────────────────────────────────


class InsufficientBalance(TradingError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class InsufficientHoldings(TradingError):
    kind = ErrorKind.INSUFFICIENT_HOLDINGS


# ── Lookups ────────────────────────────────────────────────────


class InstrumentNotFound(TradingError):
    kind = ErrorKind.NOT_FOUND


class NotHeld(TradingError):
    kind = ErrorKind.NOT_FOUND
