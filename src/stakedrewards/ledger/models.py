"""
Ledger records and read models.

``PoolState`` and ``AccountState`` are the mutable records owned by the
accrual engine. ``PoolSnapshot`` and ``AccountSnapshot`` are immutable
copies handed out to callers.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class PoolState:
    """Singleton pool record.

    ``reward_rate`` is stored multiplied by the accumulator scale, so one
    second of emission adds ``reward_rate // total_staked`` to
    ``reward_per_token_stored``.
    """

    total_staked: int = 0
    reward_per_token_stored: int = 0
    last_update_time: int = 0
    reward_rate: int = 0
    period_start_time: int = 0
    period_end_time: int = 0
    # Last endpoint reached by an earlier period; accrual never runs behind it
    last_period_end_time: int = 0
    total_funded: int = 0
    total_paid: int = 0
    # Funding that can no longer be earned by any staker
    total_released: int = 0


@dataclass
class AccountState:
    """Per-staker record, created on first touch and never removed."""

    staked_balance: int = 0
    reward_per_token_paid: int = 0
    rewards_owed: int = 0


class AccountSnapshot(BaseModel):
    """Point-in-time view of one account."""

    model_config = ConfigDict(frozen=True)

    account: str
    staked_balance: int = Field(ge=0)
    reward_per_token_paid: int = Field(ge=0)
    rewards_owed: int = Field(ge=0)
    earned: int = Field(ge=0, description="Owed plus not yet checkpointed reward")


class PoolSnapshot(BaseModel):
    """Point-in-time view of the pool."""

    model_config = ConfigDict(frozen=True)

    pool_address: str
    timestamp: int
    total_staked: int = Field(ge=0)
    reward_per_token_stored: int = Field(ge=0)
    accrued_reward_per_token: int = Field(ge=0)
    last_update_time: int = Field(ge=0)
    reward_rate: int = Field(ge=0)
    period_start_time: int = Field(ge=0)
    period_end_time: int = Field(ge=0)
    has_started: bool
    has_ended: bool
    paused: bool
    total_funded: int = Field(ge=0)
    total_paid: int = Field(ge=0)
    total_released: int = Field(ge=0)
    reserved_rewards: int = Field(ge=0)
    account_count: int = Field(ge=0)
