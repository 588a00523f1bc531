"""
Accrual Engine.

Keeps the global stake total, the cumulative reward-per-token accumulator
and one checkpoint per account, so that crediting rewards costs O(1) per
state change no matter how many accounts or periods exist.

Every mutating entry point runs the checkpoint step first:

    reward_per_token_stored += elapsed * reward_rate // total_staked
    last_update_time = last_time_reward_applicable()
    account.rewards_owed += staked_balance * (stored - paid) // scale
    account.reward_per_token_paid = stored

``reward_rate`` already carries the ``scale`` factor, so the accumulator is
a fixed-point number with ``scale`` precision. All divisions truncate,
which can only leave dust in the pool and never overpay a staker.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from dataclasses import fields, replace
from typing import Callable, Iterator, Optional, Protocol, TypeVar

from stakedrewards.exceptions import (
    InsufficientBalanceError,
    InsufficientRewardsError,
    InvalidAmountError,
)

from .models import AccountState, PoolState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RewardSchedule(Protocol):
    """Producer of the instant up to which rewards may accrue."""

    def last_time_reward_applicable(self) -> int: ...


def require_positive(amount: int, what: str = "amount") -> None:
    """Raise InvalidAmountError unless *amount* is a positive integer."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"{what} must be an integer, got {type(amount).__name__}")
    if amount <= 0:
        raise InvalidAmountError(f"{what} must be greater than zero")


def checkpointed(method: Callable[..., T]) -> Callable[..., T]:
    """Run the checkpoint step for the target account before *method*.

    The checkpoint and the wrapped mutation share one transaction, so a
    rejected mutation leaves no trace of its checkpoint either.
    """

    @functools.wraps(method)
    def wrapper(self: "AccrualEngine", account: str, *args, **kwargs) -> T:
        with self.transaction(account):
            self.checkpoint(account)
            return method(self, account, *args, **kwargs)

    return wrapper


class AccrualEngine:
    """Time-weighted reward accounting over a single staked pool.

    Args:
        scale: Fixed-point scale of the accumulator (e.g. ``10**18``).
        state: Pool record to operate on; a fresh one is created if omitted.
        schedule: Source of ``last_time_reward_applicable``. Usually bound
            later by the period manager.
    """

    def __init__(
        self,
        scale: int,
        state: Optional[PoolState] = None,
        schedule: Optional[RewardSchedule] = None,
    ) -> None:
        if scale <= 0:
            raise ValueError("scale must be positive")
        self.scale = scale
        self._state = state if state is not None else PoolState()
        self._accounts: dict[str, AccountState] = {}
        self._schedule = schedule

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def bind_schedule(self, schedule: RewardSchedule) -> None:
        """Attach the producer of reward-applicable time."""
        self._schedule = schedule

    @property
    def state(self) -> PoolState:
        return self._state

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def total_staked(self) -> int:
        return self._state.total_staked

    @property
    def account_count(self) -> int:
        return len(self._accounts)

    def get_account(self, account: str) -> Optional[AccountState]:
        """Return the record for *account* without creating it."""
        return self._accounts.get(account)

    def balance_of(self, account: str) -> int:
        record = self._accounts.get(account)
        return record.staked_balance if record is not None else 0

    def iter_accounts(self) -> Iterator[tuple[str, AccountState]]:
        """Iterate over every account ever touched."""
        return iter(self._accounts.items())

    def reward_per_token(self) -> int:
        """Accumulator value as of now, without storing it."""
        value, _, _ = self._advance()
        return value

    def earned(self, account: str) -> int:
        """Reward the checkpoint step would credit to *account* right now."""
        record = self._accounts.get(account)
        if record is None:
            return 0
        return record.rewards_owed + self._pending(record, self.reward_per_token())

    # ------------------------------------------------------------------
    # Checkpoint
    # ------------------------------------------------------------------

    def checkpoint(self, account: Optional[str] = None) -> Optional[AccountState]:
        """Bring the accumulator, and optionally *account*, up to date.

        Returns:
            The account record when *account* is given, else None.
        """
        state = self._state
        state.reward_per_token_stored, state.last_update_time, idle = self._advance()
        state.total_released += idle

        if account is None:
            return None

        record = self._touch(account)
        credit = self._pending(record, state.reward_per_token_stored)
        record.rewards_owed += credit
        record.reward_per_token_paid = state.reward_per_token_stored
        logger.debug(
            "Checkpoint %s: +%d owed (rpt=%d)", account, credit, state.reward_per_token_stored
        )
        return record

    def reschedule(
        self,
        *,
        reward_rate: Optional[int] = None,
        period_start_time: Optional[int] = None,
        period_end_time: Optional[int] = None,
        last_period_end_time: Optional[int] = None,
        funded: int = 0,
        released: int = 0,
    ) -> PoolState:
        """Flush accrual under the old schedule, then apply the new values.

        This is the only path through which the rate and period fields of
        the pool record change.
        """
        with self.transaction():
            self.checkpoint()
            state = self._state
            if reward_rate is not None:
                if reward_rate < 0:
                    raise ValueError("reward_rate must be non-negative")
                state.reward_rate = reward_rate
            if period_start_time is not None:
                state.period_start_time = period_start_time
            if period_end_time is not None:
                state.period_end_time = period_end_time
            if last_period_end_time is not None:
                state.last_period_end_time = max(state.last_period_end_time, last_period_end_time)
            state.total_funded += funded
            state.total_released += released
        return state

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @checkpointed
    def stake(self, account: str, amount: int) -> AccountState:
        """Add *amount* to *account*'s stake."""
        require_positive(amount)
        record = self._touch(account)
        self._state.total_staked += amount
        record.staked_balance += amount
        return record

    @checkpointed
    def withdraw(self, account: str, amount: int) -> AccountState:
        """Remove *amount* from *account*'s stake."""
        require_positive(amount)
        record = self._touch(account)
        if amount > record.staked_balance:
            raise InsufficientBalanceError(
                f"cannot withdraw {amount}, {account} has {record.staked_balance} staked"
            )
        self._state.total_staked -= amount
        record.staked_balance -= amount
        return record

    @checkpointed
    def take_reward(self, account: str, amount: Optional[int] = None) -> int:
        """Debit owed rewards from *account* and return the amount debited.

        With ``amount=None`` everything owed is taken (possibly zero).
        Otherwise exactly ``amount`` is taken.
        """
        record = self._touch(account)
        if amount is None:
            amount = record.rewards_owed
        else:
            require_positive(amount)
            if amount > record.rewards_owed:
                raise InsufficientRewardsError(
                    f"cannot claim {amount}, {account} is owed {record.rewards_owed}"
                )
        record.rewards_owed -= amount
        self._state.total_paid += amount
        return amount

    @checkpointed
    def update(self, account: str) -> AccountState:
        """Checkpoint *account* without any other change."""
        return self._touch(account)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self, *accounts: Optional[str]) -> Iterator[None]:
        """Restore the pool record and the named accounts if the block raises.

        Only the records named are saved, keeping rollback O(1).
        """
        saved_state = replace(self._state)
        saved_accounts: dict[str, Optional[AccountState]] = {}
        for account in accounts:
            if account is None or account in saved_accounts:
                continue
            record = self._accounts.get(account)
            saved_accounts[account] = replace(record) if record is not None else None
        try:
            yield
        except BaseException:
            for f in fields(PoolState):
                setattr(self._state, f.name, getattr(saved_state, f.name))
            for account, record in saved_accounts.items():
                if record is None:
                    self._accounts.pop(account, None)
                else:
                    self._accounts[account] = record
            raise

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _touch(self, account: str) -> AccountState:
        record = self._accounts.get(account)
        if record is None:
            record = AccountState(reward_per_token_paid=self._state.reward_per_token_stored)
            self._accounts[account] = record
        return record

    def _pending(self, record: AccountState, reward_per_token: int) -> int:
        return record.staked_balance * (reward_per_token - record.reward_per_token_paid) // self.scale

    def _advance(self) -> tuple[int, int, int]:
        """Return (accumulator, update time, idle emission) as of the applicable instant.

        Accrual covers ``[max(last_update, period_start), applicable]``;
        time before the current period starts never counts. Emission over
        a window with nothing staked is earned by nobody and is reported
        as idle so it can be released from the reward reserve.
        """
        state = self._state
        if self._schedule is None:
            return state.reward_per_token_stored, state.last_update_time, 0

        applicable = self._schedule.last_time_reward_applicable()
        window_start = max(state.last_update_time, state.period_start_time)
        elapsed = applicable - window_start

        value = state.reward_per_token_stored
        idle = 0
        if elapsed > 0:
            if state.total_staked > 0:
                value += elapsed * state.reward_rate // state.total_staked
            else:
                idle = elapsed * state.reward_rate // self.scale
        return value, max(state.last_update_time, applicable), idle
