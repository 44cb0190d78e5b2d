"""Mini README: Exception hierarchy raised by the revenue ledger.

Construction-time errors (``InvalidAddress``, ``InvalidShareSum``) mean no
ledger was created. Operation-time errors leave the ledger untouched and the
caller may retry or act differently.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for every error raised by the ledger."""


class InvalidAddress(LedgerError, ValueError):
    """A configured identity is missing or the null address."""


class InvalidShareSum(LedgerError, ValueError):
    """Shares are negative or do not add up to 100."""


class Unauthorized(LedgerError, PermissionError):
    """The caller does not hold the role the operation requires."""


class ZeroAmount(LedgerError, ValueError):
    """A funding call carried no value."""


class InvalidAmount(LedgerError, ValueError):
    """A funding amount was negative or not a whole number of units."""


class NothingToWithdraw(LedgerError):
    """The caller has no credit to withdraw."""


class PayoutFailed(LedgerError):
    """The payout sink refused the transfer; the withdrawal was rolled back."""
