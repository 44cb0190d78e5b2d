"""Mini README: Shared fixtures for the ledger test suite.

Structure:
    * identities - fixed company/platform/creator/outsider addresses.
    * ledger - a 30/70 ledger paying out into in-memory wallets.
    * isolated_settings - points configuration at a temporary data directory.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from revshare.configuration import get_settings
from revshare.ledger import InMemoryWallets, RevenueLedger

COMPANY = "0x" + "c0" * 20
PLATFORM = "0x" + "a1" * 20
CREATOR = "0x" + "b2" * 20
OUTSIDER = "0x" + "d3" * 20


@pytest.fixture
def identities() -> SimpleNamespace:
    return SimpleNamespace(company=COMPANY, platform=PLATFORM, creator=CREATOR, outsider=OUTSIDER)


@pytest.fixture
def wallets() -> InMemoryWallets:
    return InMemoryWallets()


@pytest.fixture
def ledger(wallets: InMemoryWallets) -> RevenueLedger:
    return RevenueLedger(COMPANY, PLATFORM, CREATOR, 30, 70, payouts=wallets)


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("REVSHARE_DATA_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("REVSHARE_COMPANY_ADDRESS", COMPANY)
    monkeypatch.setenv("REVSHARE_PLATFORM_ADDRESS", PLATFORM)
    monkeypatch.setenv("REVSHARE_CREATOR_ADDRESS", CREATOR)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
