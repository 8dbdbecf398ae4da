import threading

import pytest

from apollo.core import keys
from apollo.core.errors import InvalidParameter, RecordNotFound, Unauthorized
from apollo.core.models import Stake
from apollo.ledger.tokens import InsufficientFunds

from conftest import APH


class TestStake:

    def test_deposits_accumulate(self, protocol, alice, clock):
        protocol.stake(alice, 100)
        clock.advance(60)
        key, stake = protocol.stake(alice, 50)

        assert key == keys.stake_key(alice)
        assert stake.owner == alice
        assert stake.amount == 150
        assert stake.start_time == clock.now
        assert protocol.balance_of(alice, APH) == 850
        assert protocol.pool_balances()["capital_pool"] == 150

    def test_zero_amount_rejected(self, protocol, alice):
        with pytest.raises(InvalidParameter):
            protocol.stake(alice, 0)
        with pytest.raises(RecordNotFound):
            protocol.get_stake(alice)

    def test_failed_transfer_creates_no_record(self, protocol, alice):
        with pytest.raises(InsufficientFunds):
            protocol.stake(alice, 1_001)
        with pytest.raises(RecordNotFound):
            protocol.get_stake(alice)
        assert protocol.pool_balances()["capital_pool"] == 0

    def test_record_owned_by_someone_else_is_rejected(self, protocol):
        protocol.mint("bob", APH, 100)
        protocol.host.store.put(keys.stake_key("bob"), Stake(owner="mallory", amount=5, start_time=0))

        with pytest.raises(Unauthorized):
            protocol.stake("bob", 10)

        assert protocol.balance_of("bob", APH) == 100
        assert protocol.pool_balances()["capital_pool"] == 0


class TestUnstake:

    def test_returns_entire_stake(self, protocol, alice):
        protocol.stake(alice, 100)
        protocol.stake(alice, 50)

        amount = protocol.unstake(alice)

        assert amount == 150
        assert protocol.get_stake(alice).amount == 0
        assert protocol.balance_of(alice, APH) == 1_000
        assert protocol.pool_balances()["capital_pool"] == 0

    def test_zero_stake_rejected(self, protocol, alice):
        protocol.stake(alice, 100)
        protocol.unstake(alice)

        with pytest.raises(InvalidParameter):
            protocol.unstake(alice)
        assert protocol.balance_of(alice, APH) == 1_000

    def test_no_stake_record_rejected(self, protocol, alice):
        with pytest.raises(InvalidParameter):
            protocol.unstake(alice)

    def test_unstake_only_touches_own_stake(self, protocol, alice):
        protocol.mint("bob", APH, 500)
        protocol.stake(alice, 100)
        protocol.stake("bob", 300)

        protocol.unstake(alice)

        assert protocol.get_stake("bob").amount == 300
        assert protocol.pool_balances()["capital_pool"] == 300

    def test_restake_after_unstake(self, protocol, alice):
        protocol.stake(alice, 100)
        protocol.unstake(alice)
        _, stake = protocol.stake(alice, 40)
        assert stake.amount == 40


class TestConcurrentStaking:

    def test_parallel_stakes_commit_once_each(self, protocol):
        owners = [f"staker-{i}" for i in range(20)]
        for owner in owners:
            protocol.mint(owner, APH, 50)
        audited = len(protocol.audit_log())

        def run(owner):
            for _ in range(50):
                protocol.stake(owner, 1)

        threads = [threading.Thread(target=run, args=(owner,)) for owner in owners]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert protocol.pool_balances()["capital_pool"] == 1_000
        assert all(protocol.get_stake(owner).amount == 50 for owner in owners)
        entries = protocol.audit_log()[audited:]
        assert len(entries) == 1_000
        for owner in owners:
            totals = [e.detail["total"] for e in entries if e.actor == owner]
            assert totals == list(range(1, 51))

    def test_audit_entries_follow_commit_order(self, protocol, alice):
        audited = len(protocol.audit_log())

        def run():
            for _ in range(20):
                protocol.stake(alice, 1)

        threads = [threading.Thread(target=run) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        totals = [e.detail["total"] for e in protocol.audit_log()[audited:]]
        assert totals == list(range(1, 201))
