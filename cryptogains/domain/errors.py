# cryptogains/domain/errors.py
"""
Exceptions raised by the ledger.

Validation errors (bad currency, quantity, date, price combination or an
oversized disposal) are raised before any ledger state is touched.
LedgerInvariantError and its subclasses signal that the balances and the lot
store disagree; they are never caught inside the engine and callers should
treat them as unrecoverable.
"""


class LedgerError(Exception):
    """Base class for every error raised by the ledger."""


class InvalidCurrencyError(LedgerError, ValueError):
    pass


class InvalidQuantityError(LedgerError, ValueError):
    pass


class InvalidDateError(LedgerError, ValueError):
    pass


class InsufficientBalanceError(LedgerError, ValueError):
    pass


class AmbiguousPriceError(LedgerError, ValueError):
    pass


class MissingPriceError(LedgerError, ValueError):
    pass


class LedgerInvariantError(LedgerError, RuntimeError):
    pass


class NoRemainingLotsError(LedgerInvariantError):
    pass


class MalformedInputError(ValueError):
    """The transaction log itself is unreadable: wrong headers, ragged rows, a row filling several sections."""
