"""Mini README: Ledger subsystem package initialiser.

Re-exports the ledger, its value types, events, payout gateways and errors so
callers can import everything from ``revshare.ledger``.
"""

from .core import LedgerInfo, RevenueLedger, Role, ShareConfig
from .errors import (
    InvalidAddress,
    InvalidAmount,
    InvalidShareSum,
    LedgerError,
    NothingToWithdraw,
    PayoutFailed,
    Unauthorized,
    ZeroAmount,
)
from .events import Constructed, Distributed, EventLog, Received, Withdrawn
from .identity import ZERO_ADDRESS, generate_address, is_null_address, normalise_address
from .payouts import InMemoryWallets, PayoutGateway

__all__ = [
    "Constructed",
    "Distributed",
    "EventLog",
    "InMemoryWallets",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidShareSum",
    "LedgerError",
    "LedgerInfo",
    "NothingToWithdraw",
    "PayoutFailed",
    "PayoutGateway",
    "Received",
    "RevenueLedger",
    "Role",
    "ShareConfig",
    "Unauthorized",
    "Withdrawn",
    "ZERO_ADDRESS",
    "ZeroAmount",
    "generate_address",
    "is_null_address",
    "normalise_address",
]
