"""Mini README: Deployment records, persisted ledger state and lookup.

Structure:
    * DeploymentRecord - Pydantic model written to ``deployment-info.json``.
    * deploy_ledger - construct a ledger and describe it as a record.
    * save_deployment / load_deployment - JSON persistence of records.
    * save_ledger_state / load_ledger_state - JSON persistence of credits and
      payout wallet balances so CLI runs can pick up where the last one left.
    * LedgerRegistry - in-process lookup of ledgers by instance address.

Amounts are written as strings so arbitrarily large integers round-trip
through any JSON reader unchanged.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .ledger import InMemoryWallets, PayoutGateway, RevenueLedger, normalise_address
from .logging_utils import get_logger

LOGGER = get_logger(__name__)


class DeploymentRecord(BaseModel):
    """Where a ledger lives and how it was configured."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    contract_address: str = Field(alias="contractAddress")
    company_address: str = Field(alias="companyAddress")
    platform_address: str = Field(alias="platformAddress")
    creator_address: str = Field(alias="creatorAddress")
    platform_share: int = Field(alias="platformShare", ge=0, le=100)
    creator_share: int = Field(alias="creatorShare", ge=0, le=100)
    deployment_time: datetime = Field(
        alias="deploymentTime",
        default_factory=lambda: datetime.now(timezone.utc),
    )
    network: str = "localhost"

    @classmethod
    def from_ledger(cls, ledger: RevenueLedger, *, network: str = "localhost") -> "DeploymentRecord":
        info = ledger.get_info()
        return cls(
            contract_address=ledger.address,
            company_address=info.company,
            platform_address=info.platform,
            creator_address=info.creator,
            platform_share=info.platform_share,
            creator_share=info.creator_share,
            network=network,
        )


def deploy_ledger(
    company: str,
    platform: str,
    creator: str,
    platform_share: int,
    creator_share: int,
    *,
    network: str = "localhost",
    payouts: Optional[PayoutGateway] = None,
) -> Tuple[RevenueLedger, DeploymentRecord]:
    """Construct a ledger and return it together with its deployment record."""

    ledger = RevenueLedger(
        company,
        platform,
        creator,
        platform_share,
        creator_share,
        payouts=payouts,
    )
    record = DeploymentRecord.from_ledger(ledger, network=network)
    LOGGER.info("Deployed ledger %s on %s", record.contract_address, network)
    return ledger, record


def save_deployment(record: DeploymentRecord, path: Path) -> None:
    path.write_text(record.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    LOGGER.debug("Deployment record written to %s", path)


def load_deployment(path: Path) -> DeploymentRecord:
    if not path.exists():
        raise FileNotFoundError(f"Deployment file {path} not found; deploy a ledger first.")
    return DeploymentRecord.model_validate_json(path.read_text(encoding="utf-8"))


def _to_int_map(raw: Dict[str, str]) -> Dict[str, int]:
    return {key: int(value) for key, value in raw.items()}


def _to_str_map(raw: Dict[str, int]) -> Dict[str, str]:
    return {key: str(value) for key, value in raw.items()}


def save_ledger_state(ledger: RevenueLedger, path: Path) -> None:
    """Persist configuration, credits and, when available, wallet balances."""

    snapshot = ledger.snapshot()
    payload: Dict[str, object] = {
        **snapshot,
        "credits": _to_str_map(snapshot["credits"]),
        "pool_value": str(snapshot["pool_value"]),
    }
    if isinstance(ledger.payouts, InMemoryWallets):
        payload["wallets"] = _to_str_map(ledger.payouts.balances())
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    LOGGER.debug("Ledger state for %s written to %s", ledger.address, path)


def load_ledger_state(path: Path, *, payouts: Optional[PayoutGateway] = None) -> RevenueLedger:
    """Rebuild a ledger saved by ``save_ledger_state``."""

    if not path.exists():
        raise FileNotFoundError(f"Ledger state file {path} not found.")
    data = json.loads(path.read_text(encoding="utf-8"))
    if payouts is None:
        payouts = InMemoryWallets(_to_int_map(data.get("wallets", {})))
    snapshot = {**data, "credits": _to_int_map(data.get("credits", {}))}
    if "pool_value" in data:
        snapshot["pool_value"] = int(data["pool_value"])
    return RevenueLedger.restore(snapshot, payouts=payouts)


class LedgerRegistry:
    """Map instance addresses to live ledgers."""

    def __init__(self) -> None:
        self._ledgers: Dict[str, RevenueLedger] = {}

    def register(self, ledger: RevenueLedger) -> None:
        if ledger.address in self._ledgers:
            raise ValueError(f"Ledger {ledger.address} is already registered.")
        self._ledgers[ledger.address] = ledger
        LOGGER.debug("Registered ledger %s", ledger.address)

    def get(self, address: str) -> RevenueLedger:
        ledger = self._ledgers.get(normalise_address(address, label="ledger"))
        if ledger is None:
            raise KeyError(f"Unknown ledger '{address}'")
        return ledger

    def addresses(self) -> Iterable[str]:
        return sorted(self._ledgers)
