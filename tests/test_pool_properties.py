"""Property-based tests for pool accounting invariants.

Uses Hypothesis to drive a pool through random sequences of staking,
withdrawals, exits, claims, funding, period changes and clock movement,
and checks the ledger invariants after every step. Allocations beyond the
unclaimed deposit and exits whose reward payment fails are mixed in and
must leave no trace.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from stakedrewards import InMemoryToken, ManualClock, PoolConfig, StakedRewardsPool
from stakedrewards.exceptions import (
    FundingMismatchError,
    InsufficientBalanceError,
    PeriodError,
    TokenTransferError,
)

OWNER = "acct:owner"
ACCOUNTS = ("acct:a", "acct:b", "acct:c")
NOW = 1_700_000_000


class RefusingToken(InMemoryToken):
    """Rewards token whose payouts can be switched off mid-run."""

    refuse_transfers = False

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        if self.refuse_transfers:
            return False
        return super().transfer(sender, to, amount)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

account = st.sampled_from(ACCOUNTS)
stake_amount = st.integers(min_value=1, max_value=10**21)
reward_amount = st.integers(min_value=1, max_value=10**22)

operation = st.one_of(
    st.tuples(st.just("stake"), account, stake_amount),
    st.tuples(st.just("withdraw"), account, stake_amount),
    st.tuples(st.just("claim"), account),
    st.tuples(st.just("exit"), account),
    st.tuples(st.just("exit_unpaid"), account),
    st.tuples(st.just("advance"), st.integers(min_value=0, max_value=5_000)),
    st.tuples(st.just("fund"), reward_amount),
    st.tuples(st.just("fund_unbacked"), reward_amount),
    st.tuples(
        st.just("new_period"),
        st.integers(min_value=0, max_value=1_000),
        st.integers(min_value=1, max_value=5_000),
    ),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _deploy() -> tuple[StakedRewardsPool, InMemoryToken, RefusingToken, ManualClock]:
    clock = ManualClock(NOW)
    staking = InMemoryToken("token:staking")
    rewards = RefusingToken("token:rewards", initial_holder=OWNER, initial_supply=10**30)
    config = PoolConfig(initial_period_start=0, initial_period_end=10)
    pool = StakedRewardsPool(staking, rewards, owner=OWNER, config=config, clock=clock)
    pool.set_new_period(OWNER, NOW + 60, NOW + 60 + 1_800)
    return pool, staking, rewards, clock


def _apply(op: tuple, pool, staking, rewards, clock) -> None:
    kind = op[0]
    try:
        if kind == "stake":
            _, who, amount = op
            staking.mint(who, amount)
            staking.approve(who, pool.address, amount)
            pool.stake(who, amount)
        elif kind == "withdraw":
            _, who, amount = op
            pool.withdraw(who, amount)
        elif kind == "claim":
            pool.get_reward(op[1])
        elif kind == "exit":
            pool.exit(op[1])
        elif kind == "exit_unpaid":
            _exit_with_refused_payout(op[1], pool, staking, rewards)
        elif kind == "advance":
            clock.advance(op[1])
        elif kind == "fund":
            rewards.transfer(OWNER, pool.address, op[1])
            pool.add_to_rewards_allocation(OWNER, op[1])
        elif kind == "fund_unbacked":
            # More than the deposit no allocation has claimed yet
            amount = max(pool.available_rewards(), 0) + op[1]
            funded = pool.total_funded
            with pytest.raises(FundingMismatchError):
                pool.add_to_rewards_allocation(OWNER, amount)
            assert pool.total_funded == funded
        elif kind == "new_period":
            _, offset, duration = op
            start = clock.now() + offset
            pool.set_new_period(OWNER, start, start + duration)
    except (InsufficientBalanceError, PeriodError):
        pass


def _exit_with_refused_payout(who, pool, staking, rewards) -> None:
    if pool.balance_of(who) == 0 or pool.earned(who) == 0:
        return
    staked = pool.balance_of(who)
    held = staking.balance_of(who)
    owed = pool.earned(who)
    rewards.refuse_transfers = True
    try:
        with pytest.raises(TokenTransferError):
            pool.exit(who)
    finally:
        rewards.refuse_transfers = False
    assert pool.balance_of(who) == staked
    assert staking.balance_of(who) == held
    assert pool.earned(who) == owed


def _check_invariants(pool, staking, rewards) -> None:
    balances = [pool.balance_of(who) for who in ACCOUNTS]
    assert sum(balances) == pool.total_supply
    assert staking.balance_of(pool.address) == pool.total_supply

    assert pool.total_paid <= pool.total_funded
    assert rewards.balance_of(pool.address) == pool.total_funded - pool.total_paid

    outstanding = sum(pool.earned(who) for who in ACCOUNTS)
    assert outstanding + pool.total_paid <= pool.total_funded
    assert outstanding <= pool.reserved_rewards
    assert pool.available_rewards() == pool.snapshot().total_released


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

class TestLedgerInvariants:
    """Conservation and solvency hold after every operation."""

    @given(ops=st.lists(operation, min_size=1, max_size=40))
    @settings(max_examples=100, deadline=None)
    def test_invariants_hold(self, ops):
        pool, staking, rewards, clock = _deploy()
        for op in ops:
            _apply(op, pool, staking, rewards, clock)
            _check_invariants(pool, staking, rewards)

    @given(ops=st.lists(operation, min_size=1, max_size=40))
    @settings(max_examples=100, deadline=None)
    def test_accumulator_never_decreases(self, ops):
        pool, staking, rewards, clock = _deploy()
        stored = pool.reward_per_token_stored
        accrued = pool.accrued_reward_per_token()
        for op in ops:
            _apply(op, pool, staking, rewards, clock)
            assert pool.reward_per_token_stored >= stored
            assert pool.accrued_reward_per_token() >= accrued
            assert pool.accrued_reward_per_token() >= pool.reward_per_token_stored
            stored = pool.reward_per_token_stored
            accrued = pool.accrued_reward_per_token()

    @given(ops=st.lists(operation, min_size=1, max_size=40))
    @settings(max_examples=100, deadline=None)
    def test_everyone_can_claim(self, ops):
        pool, staking, rewards, clock = _deploy()
        for op in ops:
            _apply(op, pool, staking, rewards, clock)
        clock.advance(10_000)

        for who in ACCOUNTS:
            owed = pool.earned(who)
            assert pool.get_reward(who) == owed
            assert pool.get_reward(who) == 0
        assert rewards.balance_of(pool.address) >= 0
        _check_invariants(pool, staking, rewards)

    @given(ops=st.lists(operation, min_size=1, max_size=40))
    @settings(max_examples=50, deadline=None)
    def test_earned_is_a_pure_view(self, ops):
        pool, staking, rewards, clock = _deploy()
        for op in ops:
            _apply(op, pool, staking, rewards, clock)
        before = pool.snapshot()
        for who in ACCOUNTS:
            pool.earned(who)
        assert pool.snapshot() == before
