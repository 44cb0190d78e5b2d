"""Mini README: Tests for the revenue ledger state machine.

Structure:
    * test_construction_records_configuration - info reflects the constructor arguments.
    * test_construction_rejects_null_platform - null platform identities fail construction.
    * test_construction_rejects_null_creator - a zero creator address fails construction.
    * test_construction_rejects_null_company - a missing company fails construction.
    * test_construction_rejects_bad_shares - shares must be whole, non-negative and sum to 100.
    * test_fund_splits_by_share - a 30/70 ledger funded with 100 credits 30 and 70.
    * test_fund_never_leaks_rounding - both parts always add back up to the amount.
    * test_fund_accepts_differently_cased_company - hex identities compare case-insensitively.
    * test_fund_by_non_company_is_rejected - other callers leave state and events untouched.
    * test_fund_zero_is_rejected_without_events - zero deposits change nothing.
    * test_fund_rejects_non_unit_amounts - negative, fractional and non-int amounts fail.
    * test_fund_emits_receipt_and_distribution - funding emits Received then Distributed.
    * test_withdraw_pays_full_credit - the payee's whole credit is paid out.
    * test_second_withdraw_has_nothing_left - a repeated withdrawal fails.
    * test_withdraw_before_any_funding - payees without credit cannot withdraw.
    * test_withdraw_by_non_payee_is_rejected - company and outsiders cannot withdraw.
    * test_failed_payout_restores_credit - a refused transfer rolls the withdrawal back.
    * test_reentrant_withdraw_sees_cleared_credit - a nested withdrawal finds zero credit.
    * test_failing_listener_does_not_undo_funding - listener errors never fail a committed fund.
    * test_failing_listener_does_not_undo_withdrawal - listener errors never fail a committed payout.
    * test_same_identity_for_both_payees_receives_everything - one payee in both seats gets 100%.
    * test_pool_equals_credits_across_operations - the pool matches credits after every step.
    * test_concurrent_funding_is_serialised - parallel deposits are all counted.
    * test_readers_never_see_torn_state - readers see pool == credits while mutations run.
    * test_role_of_identities - identities map to company, platform, creator or observer.
    * test_snapshot_restore_keeps_credits - a restored ledger has the same state.
    * test_restore_rejects_negative_credit - corrupt snapshots are refused.
"""

from __future__ import annotations

import threading

import pytest

from revshare.ledger import (
    Distributed,
    EventLog,
    InMemoryWallets,
    InvalidAddress,
    InvalidAmount,
    InvalidShareSum,
    NothingToWithdraw,
    PayoutFailed,
    PayoutGateway,
    Received,
    RevenueLedger,
    Role,
    Unauthorized,
    Withdrawn,
    ZERO_ADDRESS,
    ZeroAmount,
)


def _assert_pool_matches_credits(ledger: RevenueLedger) -> None:
    info = ledger.get_info()
    total = sum(ledger.check_balance(identity) for identity in {info.platform, info.creator})
    assert info.pool_value == total == sum(ledger.credits().values())


def _mixed_case(address: str) -> str:
    return "0x" + address[2:].upper()


def test_construction_records_configuration(ledger: RevenueLedger, identities) -> None:
    """The info tuple should unpack to the configured parties and shares."""

    company, platform, creator, platform_share, creator_share, pool_value = ledger.get_info()

    assert (company, platform, creator) == (identities.company, identities.platform, identities.creator)
    assert (platform_share, creator_share) == (30, 70)
    assert pool_value == 0
    assert [event.name for event in ledger.events] == ["Constructed"]


@pytest.mark.parametrize("platform", [ZERO_ADDRESS, None, "", "   "])
def test_construction_rejects_null_platform(identities, platform) -> None:
    """Every spelling of the null identity is refused for the platform."""

    with pytest.raises(InvalidAddress, match="Invalid platform address"):
        RevenueLedger(identities.company, platform, identities.creator, 30, 70)


def test_construction_rejects_null_creator(identities) -> None:
    """The zero address is refused for the creator."""

    with pytest.raises(InvalidAddress, match="Invalid creator address"):
        RevenueLedger(identities.company, identities.platform, ZERO_ADDRESS, 30, 70)


@pytest.mark.parametrize("company", [ZERO_ADDRESS, None])
def test_construction_rejects_null_company(identities, company) -> None:
    """A ledger cannot be created without a depositor."""

    with pytest.raises(InvalidAddress, match="Invalid company address"):
        RevenueLedger(company, identities.platform, identities.creator, 30, 70)


@pytest.mark.parametrize("shares", [(40, 70), (0, 0), (50, 49), (-10, 110), (30.0, 70)])
def test_construction_rejects_bad_shares(identities, shares) -> None:
    """Shares that are not whole non-negative percentages summing to 100 fail."""

    with pytest.raises(InvalidShareSum):
        RevenueLedger(identities.company, identities.platform, identities.creator, *shares)


def test_fund_splits_by_share(ledger: RevenueLedger, identities) -> None:
    """A deposit of 100 on a 30/70 ledger credits 30 and 70."""

    assert ledger.fund(identities.company, 100) == (30, 70)

    assert ledger.check_balance(identities.platform) == 30
    assert ledger.check_balance(identities.creator) == 70
    assert ledger.check_balance(identities.company) == 0
    assert ledger.pool_value == 100


@pytest.mark.parametrize(
    "shares, amount, expected",
    [
        ((30, 70), 101, (30, 71)),
        ((33, 67), 1, (0, 1)),
        ((33, 67), 10**18 + 7, (330000000000000002, 670000000000000005)),
        ((100, 0), 9, (9, 0)),
        ((0, 100), 9, (0, 9)),
    ],
)
def test_fund_never_leaks_rounding(identities, shares, amount, expected) -> None:
    """The creator receives whatever the floored platform part leaves."""

    ledger = RevenueLedger(identities.company, identities.platform, identities.creator, *shares)

    platform_amount, creator_amount = ledger.fund(identities.company, amount)

    assert (platform_amount, creator_amount) == expected
    assert platform_amount + creator_amount == amount
    assert ledger.pool_value == amount


def test_fund_accepts_differently_cased_company(ledger: RevenueLedger, identities) -> None:
    """Checksummed spellings of the company address are still the company."""

    ledger.fund(_mixed_case(identities.company), 10)
    assert ledger.pool_value == 10


@pytest.mark.parametrize("role", ["platform", "creator", "outsider", None])
def test_fund_by_non_company_is_rejected(ledger: RevenueLedger, identities, role) -> None:
    """Only the company may fund; rejected calls change nothing."""

    caller = getattr(identities, role) if role else None
    ledger.fund(identities.company, 100)
    events_before = len(ledger.events)

    with pytest.raises(Unauthorized, match="Only company can deposit"):
        ledger.fund(caller, 100)

    assert ledger.pool_value == 100
    assert ledger.credits() == {identities.platform: 30, identities.creator: 70}
    assert len(ledger.events) == events_before


def test_fund_zero_is_rejected_without_events(ledger: RevenueLedger, identities) -> None:
    """A zero deposit raises and leaves no credits or events behind."""

    with pytest.raises(ZeroAmount, match="Must deposit funds"):
        ledger.fund(identities.company, 0)

    assert ledger.pool_value == 0
    assert ledger.credits() == {}
    assert [event.name for event in ledger.events] == ["Constructed"]


@pytest.mark.parametrize("amount", [-1, 1.5, True, "100"])
def test_fund_rejects_non_unit_amounts(ledger: RevenueLedger, identities, amount) -> None:
    """Amounts must be non-negative integers."""

    with pytest.raises(InvalidAmount):
        ledger.fund(identities.company, amount)
    assert ledger.pool_value == 0


def test_fund_emits_receipt_and_distribution(ledger: RevenueLedger, identities) -> None:
    """Funding records the receipt and the split once each."""

    ledger.fund(identities.company, 1000)

    assert ledger.events.list_events("Received") == [Received(sender=identities.company, amount=1000)]
    assert ledger.events.list_events("Distributed") == [
        Distributed(platform_amount=300, creator_amount=700)
    ]


def test_withdraw_pays_full_credit(ledger: RevenueLedger, wallets: InMemoryWallets, identities) -> None:
    """Withdrawing moves the entire credit into the payee's wallet."""

    ledger.fund(identities.company, 100)

    assert ledger.withdraw(identities.platform) == 30

    assert ledger.check_balance(identities.platform) == 0
    assert ledger.pool_value == 70
    assert wallets.balance_of(identities.platform) == 30
    assert ledger.events.list_events("Withdrawn") == [
        Withdrawn(recipient=identities.platform, amount=30)
    ]
    _assert_pool_matches_credits(ledger)


def test_second_withdraw_has_nothing_left(ledger: RevenueLedger, identities) -> None:
    """An immediate second withdrawal fails with NothingToWithdraw."""

    ledger.fund(identities.company, 100)
    ledger.withdraw(identities.creator)

    with pytest.raises(NothingToWithdraw, match="No balance to withdraw"):
        ledger.withdraw(identities.creator)
    assert ledger.pool_value == 30


def test_withdraw_before_any_funding(ledger: RevenueLedger, identities) -> None:
    """Payees with no credit get NothingToWithdraw."""

    with pytest.raises(NothingToWithdraw):
        ledger.withdraw(identities.platform)


@pytest.mark.parametrize("role", ["company", "outsider"])
def test_withdraw_by_non_payee_is_rejected(ledger: RevenueLedger, identities, role) -> None:
    """Only the platform and the creator may withdraw."""

    ledger.fund(identities.company, 100)

    with pytest.raises(Unauthorized):
        ledger.withdraw(getattr(identities, role))
    assert ledger.pool_value == 100
    assert ledger.events.list_events("Withdrawn") == []


def test_failed_payout_restores_credit(ledger: RevenueLedger, wallets: InMemoryWallets, identities) -> None:
    """A wallet that refuses payment leaves the credit and pool intact."""

    ledger.fund(identities.company, 100)
    wallets.reject(identities.platform)

    with pytest.raises(PayoutFailed):
        ledger.withdraw(identities.platform)

    assert ledger.check_balance(identities.platform) == 30
    assert ledger.pool_value == 100
    assert wallets.balance_of(identities.platform) == 0
    assert ledger.events.list_events("Withdrawn") == []


class _ReentrantGateway(PayoutGateway):
    """Tries to withdraw again while the first payout is in flight."""

    def __init__(self) -> None:
        self.ledger = None
        self.paid = []
        self.reentry_errors = []

    def transfer(self, recipient: str, amount: int) -> None:
        try:
            self.ledger.withdraw(recipient)
        except NothingToWithdraw as error:
            self.reentry_errors.append(error)
        self.paid.append((recipient, amount))


def test_reentrant_withdraw_sees_cleared_credit(identities) -> None:
    """The credit is zeroed before the transfer, so a nested call pays nothing."""

    gateway = _ReentrantGateway()
    ledger = RevenueLedger(
        identities.company, identities.platform, identities.creator, 30, 70, payouts=gateway
    )
    gateway.ledger = ledger
    ledger.fund(identities.company, 100)

    assert ledger.withdraw(identities.creator) == 70

    assert gateway.paid == [(identities.creator, 70)]
    assert len(gateway.reentry_errors) == 1
    assert ledger.pool_value == 30
    assert len(ledger.events.list_events("Withdrawn")) == 1


def _raise_on(name: str):
    def listener(event) -> None:
        if event.name == name:
            raise RuntimeError(f"listener broke on {name}")

    return listener


def test_failing_listener_does_not_undo_funding(identities) -> None:
    """A listener raising on Received neither fails the call nor drops Distributed."""

    log = EventLog()
    log.subscribe(_raise_on("Received"))
    ledger = RevenueLedger(
        identities.company, identities.platform, identities.creator, 30, 70, events=log
    )

    assert ledger.fund(identities.company, 100) == (30, 70)

    assert ledger.pool_value == 100
    assert ledger.credits() == {identities.platform: 30, identities.creator: 70}
    assert [event.name for event in log] == ["Constructed", "Received", "Distributed"]


def test_failing_listener_does_not_undo_withdrawal(identities, wallets: InMemoryWallets) -> None:
    """A listener raising on Withdrawn leaves the completed payout in place."""

    log = EventLog()
    log.subscribe(_raise_on("Withdrawn"))
    ledger = RevenueLedger(
        identities.company,
        identities.platform,
        identities.creator,
        30,
        70,
        payouts=wallets,
        events=log,
    )
    ledger.fund(identities.company, 100)

    assert ledger.withdraw(identities.creator) == 70

    assert wallets.balance_of(identities.creator) == 70
    assert ledger.check_balance(identities.creator) == 0
    assert len(log.list_events("Withdrawn")) == 1


def test_same_identity_for_both_payees_receives_everything(identities) -> None:
    """When platform and creator coincide, their credits simply add up."""

    ledger = RevenueLedger(identities.company, identities.platform, identities.platform, 40, 60)

    ledger.fund(identities.company, 101)

    assert ledger.check_balance(identities.platform) == 101
    assert ledger.withdraw(identities.platform) == 101
    assert ledger.pool_value == 0


def test_pool_equals_credits_across_operations(ledger: RevenueLedger, identities) -> None:
    """A mixed sequence of operations never breaks pool == sum of credits."""

    operations = [
        ("fund", 1001),
        ("withdraw", identities.platform),
        ("fund", 7),
        ("fund", 333),
        ("withdraw", identities.creator),
        ("fund", 10**18),
        ("withdraw", identities.platform),
        ("withdraw", identities.creator),
    ]
    for operation, argument in operations:
        if operation == "fund":
            ledger.fund(identities.company, argument)
        else:
            ledger.withdraw(argument)
        _assert_pool_matches_credits(ledger)
    assert ledger.pool_value == 0


def test_concurrent_funding_is_serialised(ledger: RevenueLedger, identities) -> None:
    """Deposits from many threads are all accounted for."""

    def worker() -> None:
        for _ in range(200):
            ledger.fund(identities.company, 3)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert ledger.pool_value == 8 * 200 * 3
    assert ledger.check_balance(identities.platform) == 0
    assert ledger.check_balance(identities.creator) == 8 * 200 * 3
    _assert_pool_matches_credits(ledger)


def test_readers_never_see_torn_state(ledger: RevenueLedger, wallets: InMemoryWallets, identities) -> None:
    """Readers running beside funders and withdrawers always see a consistent pool."""

    stop = threading.Event()
    mismatches = []

    def funder() -> None:
        for _ in range(300):
            ledger.fund(identities.company, 10)

    def withdrawer(payee: str) -> None:
        while not stop.is_set():
            try:
                ledger.withdraw(payee)
            except NothingToWithdraw:
                continue

    def reader() -> None:
        while not stop.is_set():
            snapshot = ledger.snapshot()
            if snapshot["pool_value"] != sum(snapshot["credits"].values()):
                mismatches.append(snapshot)

    funders = [threading.Thread(target=funder) for _ in range(2)]
    others = [
        threading.Thread(target=withdrawer, args=(identities.platform,)),
        threading.Thread(target=withdrawer, args=(identities.creator,)),
        threading.Thread(target=reader),
    ]
    for thread in funders + others:
        thread.start()
    for thread in funders:
        thread.join()
    stop.set()
    for thread in others:
        thread.join()

    assert mismatches == []
    withdrawn = wallets.balance_of(identities.platform) + wallets.balance_of(identities.creator)
    assert withdrawn + ledger.pool_value == 2 * 300 * 10
    _assert_pool_matches_credits(ledger)


def test_role_of_identities(ledger: RevenueLedger, identities) -> None:
    """Roles follow the configured parties; anyone else is an observer."""

    assert ledger.role_of(identities.company) is Role.COMPANY
    assert ledger.role_of(_mixed_case(identities.platform)) is Role.PLATFORM
    assert ledger.role_of(identities.creator) is Role.CREATOR
    assert ledger.role_of(identities.outsider) is Role.OBSERVER


def test_snapshot_restore_keeps_credits(ledger: RevenueLedger, identities) -> None:
    """Restoring a snapshot reproduces address, configuration and credits."""

    ledger.fund(identities.company, 100)
    ledger.withdraw(identities.platform)

    restored = RevenueLedger.restore(ledger.snapshot())

    assert restored.address == ledger.address
    assert restored.get_info() == ledger.get_info()
    assert restored.check_balance(identities.creator) == 70


def test_restore_rejects_negative_credit(ledger: RevenueLedger, identities) -> None:
    """Negative credits in a snapshot are refused."""

    snapshot = ledger.snapshot()
    snapshot["credits"] = {identities.platform: -5}

    with pytest.raises(ValueError):
        RevenueLedger.restore(snapshot)
