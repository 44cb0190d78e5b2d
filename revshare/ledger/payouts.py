"""Mini README: Payout sinks used by the ledger when a payee withdraws.

Structure:
    * PayoutGateway - abstract interface the ledger pays out through.
    * InMemoryWallets - default gateway tracking external wallet balances.

The ledger zeroes the caller's credit before calling ``transfer``. Raising
from ``transfer`` aborts the withdrawal and the ledger restores the credit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, Optional, Set

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class PayoutGateway(ABC):
    """Destination for value leaving the ledger."""

    @abstractmethod
    def transfer(self, recipient: str, amount: int) -> None:
        """Move ``amount`` units to ``recipient`` or raise to refuse."""


class InMemoryWallets(PayoutGateway):
    """Track balances of external wallets receiving payouts."""

    def __init__(
        self,
        balances: Optional[Dict[str, int]] = None,
        *,
        rejecting: Optional[Iterable[str]] = None,
    ) -> None:
        self._balances: Dict[str, int] = defaultdict(int, balances or {})
        self._rejecting: Set[str] = set(rejecting or ())

    def reject(self, recipient: str) -> None:
        """Make future transfers to ``recipient`` fail."""

        self._rejecting.add(recipient)

    def balance_of(self, recipient: str) -> int:
        return self._balances.get(recipient, 0)

    def balances(self) -> Dict[str, int]:
        return dict(self._balances)

    def transfer(self, recipient: str, amount: int) -> None:
        if recipient in self._rejecting:
            raise RuntimeError(f"Wallet {recipient} cannot accept payments")
        self._balances[recipient] += amount
        LOGGER.debug("Wallet %s received %s", recipient, amount)
