"""Shared fixtures for StakedRewards tests."""

import pytest

from stakedrewards import (
    InMemoryEventBus,
    InMemoryToken,
    ManualClock,
    PoolConfig,
    StakedRewardsPool,
)

OWNER = "acct:owner"
ALICE = "acct:alice"
BOB = "acct:bob"

NOW = 1_700_000_000
OFFSET = 60
DURATION = 1800
START = NOW + OFFSET
END = START + DURATION

REWARD_SUPPLY = 10**9


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(NOW)


@pytest.fixture
def staking_token() -> InMemoryToken:
    return InMemoryToken("token:staking", symbol="STK")


@pytest.fixture
def rewards_token() -> InMemoryToken:
    return InMemoryToken(
        "token:rewards", symbol="RWD", initial_holder=OWNER, initial_supply=REWARD_SUPPLY
    )


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def pool(staking_token, rewards_token, clock, bus) -> StakedRewardsPool:
    # Deployed with a (0, 10) period that has already started and ended
    config = PoolConfig(initial_period_start=0, initial_period_end=10)
    return StakedRewardsPool(
        staking_token,
        rewards_token,
        owner=OWNER,
        config=config,
        clock=clock,
        event_bus=bus,
    )


@pytest.fixture
def stake_for(pool, staking_token):
    """Mint, approve and stake *amount* for *account*."""

    def _stake(account: str, amount: int) -> None:
        staking_token.mint(account, amount)
        staking_token.approve(account, pool.address, amount)
        pool.stake(account, amount)

    return _stake


@pytest.fixture
def fund(pool, rewards_token):
    """Send *amount* of rewards to the pool and allocate it."""

    def _fund(amount: int) -> int:
        rewards_token.transfer(OWNER, pool.address, amount)
        return pool.add_to_rewards_allocation(OWNER, amount)

    return _fund
