"""Mini README: The revenue sharing ledger state machine.

Structure:
    * Role - the part an identity plays relative to a ledger.
    * ShareConfig - validated platform/creator percentage pair.
    * LedgerInfo - read-only view of configuration plus pool value.
    * RevenueLedger - owns credits and pool value and enforces access rules.

Funding splits an amount by floor division for the platform and gives the
remainder to the creator, so the two parts always add back up to the amount.
Withdrawals zero the caller's credit before paying out through a
``PayoutGateway``; a failed payout restores the credit. Every mutation and
every read happens under a single re-entrant lock per ledger, so readers never
observe a pool value that differs from the sum of credits. Events are handed
to listeners only after the lock is released.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import astuple, dataclass
from enum import Enum
from typing import Dict, Iterator, Mapping, Optional, Tuple

from ..logging_utils import get_logger
from .errors import (
    InvalidAddress,
    InvalidAmount,
    InvalidShareSum,
    NothingToWithdraw,
    PayoutFailed,
    Unauthorized,
    ZeroAmount,
)
from .events import Constructed, Distributed, EventLog, Received, Withdrawn
from .identity import generate_address, is_null_address, normalise_address
from .payouts import InMemoryWallets, PayoutGateway

LOGGER = get_logger(__name__)

SHARE_TOTAL = 100


class Role(str, Enum):
    """Roles an identity can hold; an unrelated identity is an observer."""

    COMPANY = "company"
    PLATFORM = "platform"
    CREATOR = "creator"
    OBSERVER = "observer"


def _is_whole_number(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class ShareConfig:
    """Percentages owed to the platform and the creator."""

    platform_share: int
    creator_share: int

    def __post_init__(self) -> None:
        for share in (self.platform_share, self.creator_share):
            if not _is_whole_number(share):
                raise InvalidShareSum("Shares must be whole percentages")
            if share < 0:
                raise InvalidShareSum("Shares must not be negative")
        if self.platform_share + self.creator_share != SHARE_TOTAL:
            raise InvalidShareSum("Shares must add up to 100")

    def split(self, amount: int) -> Tuple[int, int]:
        """Return ``(platform_amount, creator_amount)`` summing to ``amount``."""

        platform_amount = amount * self.platform_share // SHARE_TOTAL
        return platform_amount, amount - platform_amount


@dataclass(frozen=True, slots=True)
class LedgerInfo:
    """Configuration and pool value, unpackable in the legacy tuple order."""

    company: str
    platform: str
    creator: str
    platform_share: int
    creator_share: int
    pool_value: int

    def __iter__(self) -> Iterator[object]:
        return iter(astuple(self))

    def as_dict(self) -> Dict[str, object]:
        return {
            "company": self.company,
            "platform": self.platform,
            "creator": self.creator,
            "platform_share": self.platform_share,
            "creator_share": self.creator_share,
            "pool_value": self.pool_value,
        }


class RevenueLedger:
    """Split company deposits between a platform and a creator."""

    def __init__(
        self,
        company: str,
        platform: str,
        creator: str,
        platform_share: int,
        creator_share: int,
        *,
        payouts: Optional[PayoutGateway] = None,
        address: Optional[str] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        for label, identity in (
            ("platform", platform),
            ("creator", creator),
            ("company", company),
        ):
            if is_null_address(identity):
                raise InvalidAddress(f"Invalid {label} address")
        self._shares = ShareConfig(platform_share, creator_share)
        self._company = normalise_address(company, label="company")
        self._platform = normalise_address(platform, label="platform")
        self._creator = normalise_address(creator, label="creator")

        self._credits: Dict[str, int] = {}
        self._pool_value = 0
        self._lock = threading.RLock()
        self._payouts = payouts if payouts is not None else InMemoryWallets()
        self._events = events if events is not None else EventLog()
        self.address = (
            normalise_address(address, label="ledger")
            if address
            else generate_address(f"{self._company}:{uuid.uuid4()}")
        )

        constructed = Constructed(
            company=self._company,
            platform=self._platform,
            creator=self._creator,
            platform_share=self._shares.platform_share,
            creator_share=self._shares.creator_share,
        )
        self._events.record(constructed)
        LOGGER.info(
            "Ledger %s constructed: platform=%s (%s%%) creator=%s (%s%%)",
            self.address,
            self._platform,
            self._shares.platform_share,
            self._creator,
            self._shares.creator_share,
        )
        self._events.publish(constructed)

    @property
    def company(self) -> str:
        return self._company

    @property
    def platform(self) -> str:
        return self._platform

    @property
    def creator(self) -> str:
        return self._creator

    @property
    def shares(self) -> ShareConfig:
        return self._shares

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def payouts(self) -> PayoutGateway:
        return self._payouts

    @property
    def pool_value(self) -> int:
        with self._lock:
            return self._pool_value

    @staticmethod
    def _canonical(identity: object) -> str:
        """Normalise a caller identity; unusable values map to an empty string."""

        if not isinstance(identity, str) or not identity.strip():
            return ""
        return normalise_address(identity)

    def role_of(self, identity: str) -> Role:
        """Return the first matching role in company, platform, creator order."""

        canonical = self._canonical(identity)
        if canonical == self._company:
            return Role.COMPANY
        if canonical == self._platform:
            return Role.PLATFORM
        if canonical == self._creator:
            return Role.CREATOR
        return Role.OBSERVER

    def fund(self, caller: str, amount: int) -> Tuple[int, int]:
        """Accept ``amount`` from the company and credit both payees.

        Returns the ``(platform_amount, creator_amount)`` split that was
        credited. Raises ``Unauthorized`` for any caller other than the
        company, ``InvalidAmount`` for negative or fractional amounts and
        ``ZeroAmount`` when nothing is sent.
        """

        sender = self._canonical(caller)
        if sender != self._company:
            LOGGER.warning("Rejected funding from non-company caller %s", caller)
            raise Unauthorized("Only company can deposit")
        if not _is_whole_number(amount) or amount < 0:
            LOGGER.warning("Rejected funding with invalid amount %r", amount)
            raise InvalidAmount(f"Amount must be a non-negative whole number, got {amount!r}")
        if amount == 0:
            LOGGER.warning("Rejected zero-value funding from %s", sender)
            raise ZeroAmount("Must deposit funds")

        with self._lock:
            platform_amount, creator_amount = self._shares.split(amount)
            self._credits[self._platform] = self._credits.get(self._platform, 0) + platform_amount
            self._credits[self._creator] = self._credits.get(self._creator, 0) + creator_amount
            self._pool_value += amount
            emitted = (
                Received(sender=sender, amount=amount),
                Distributed(platform_amount=platform_amount, creator_amount=creator_amount),
            )
            self._events.record(*emitted)
        self._events.publish(*emitted)
        LOGGER.info(
            "Ledger %s funded with %s: platform=%s creator=%s",
            self.address,
            amount,
            platform_amount,
            creator_amount,
        )
        return platform_amount, creator_amount

    def withdraw(self, caller: str) -> int:
        """Pay the caller's full credit out and return the amount paid."""

        recipient = self._canonical(caller)
        if recipient not in (self._platform, self._creator):
            LOGGER.warning("Rejected withdrawal by non-payee %s", caller)
            raise Unauthorized("Only platform or creator can withdraw")

        with self._lock:
            amount = self._credits.get(recipient, 0)
            if amount == 0:
                raise NothingToWithdraw("No balance to withdraw")

            # Credit is cleared before the payout so a re-entrant call sees zero.
            self._credits[recipient] = 0
            self._pool_value -= amount
            try:
                self._payouts.transfer(recipient, amount)
            except Exception as error:
                self._credits[recipient] += amount
                self._pool_value += amount
                LOGGER.error(
                    "Payout of %s to %s failed, withdrawal rolled back: %s",
                    amount,
                    recipient,
                    error,
                )
                raise PayoutFailed(f"Transfer to {recipient} failed: {error}") from error
            withdrawn = Withdrawn(recipient=recipient, amount=amount)
            self._events.record(withdrawn)
        self._events.publish(withdrawn)
        LOGGER.info("Ledger %s paid %s to %s", self.address, amount, recipient)
        return amount

    def check_balance(self, identity: str) -> int:
        """Return the withdrawable credit of ``identity`` (0 when unknown)."""

        with self._lock:
            return self._credits.get(self._canonical(identity), 0)

    def credits(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._credits)

    def get_info(self) -> LedgerInfo:
        with self._lock:
            return LedgerInfo(
                company=self._company,
                platform=self._platform,
                creator=self._creator,
                platform_share=self._shares.platform_share,
                creator_share=self._shares.creator_share,
                pool_value=self._pool_value,
            )

    def snapshot(self) -> Dict[str, object]:
        """Export configuration and credits for persistence."""

        with self._lock:
            return {
                "address": self.address,
                "company": self._company,
                "platform": self._platform,
                "creator": self._creator,
                "platform_share": self._shares.platform_share,
                "creator_share": self._shares.creator_share,
                "credits": dict(self._credits),
                "pool_value": self._pool_value,
            }

    @classmethod
    def restore(
        cls,
        snapshot: Mapping[str, object],
        *,
        payouts: Optional[PayoutGateway] = None,
        events: Optional[EventLog] = None,
    ) -> "RevenueLedger":
        """Rebuild a ledger from ``snapshot``; pool value must equal the sum of credits."""

        credits: Dict[str, int] = {}
        for identity, amount in dict(snapshot.get("credits") or {}).items():
            if not _is_whole_number(amount) or amount < 0:
                raise ValueError(f"Credit for {identity} must be a non-negative integer")
            key = normalise_address(identity)
            credits[key] = credits.get(key, 0) + amount
        pool_value = sum(credits.values())
        recorded = snapshot.get("pool_value")
        if recorded is not None and recorded != pool_value:
            raise ValueError(f"Pool value {recorded} does not match credits totalling {pool_value}")

        ledger = cls(
            company=snapshot["company"],
            platform=snapshot["platform"],
            creator=snapshot["creator"],
            platform_share=snapshot["platform_share"],
            creator_share=snapshot["creator_share"],
            payouts=payouts,
            address=snapshot.get("address"),
            events=events,
        )
        with ledger._lock:
            ledger._credits = credits
            ledger._pool_value = pool_value
        LOGGER.debug("Restored ledger %s with pool value %s", ledger.address, ledger._pool_value)
        return ledger
