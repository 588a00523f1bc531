"""
Staked Rewards Pool

Public entry points of a staking pool that distributes a reward token to
stakers in proportion to stake-time. Wires together:

- the accrual engine (stake, withdraw, claim bookkeeping),
- the timed-rate period manager (reward rate and periods),
- token custody for the staking and rewards tokens,
- owner authorization and the staking pause gate,
- event publication.

Each call is all-or-nothing: if any step fails, including a token
transfer, the ledger is restored, token movements already made are sent
back, and no events are published.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from stakedrewards.access import (
    Authorization,
    Ownable,
    Pausable,
    PauseGate,
    require_not_paused,
    require_owner,
)
from stakedrewards.clock import Clock, SystemClock
from stakedrewards.config import PoolConfig
from stakedrewards.constants import (
    EVENT_NEW_PERIOD_SET,
    EVENT_OWNERSHIP_TRANSFERRED,
    EVENT_PAUSED,
    EVENT_RECOVERED,
    EVENT_REWARD_ADDED,
    EVENT_REWARD_PAID,
    EVENT_STAKED,
    EVENT_UNPAUSED,
    EVENT_WITHDRAWN,
)
from stakedrewards.events import Event, EventBus, InMemoryEventBus
from stakedrewards.exceptions import (
    DisallowedAssetError,
    FundingMismatchError,
    InsufficientBalanceError,
    StakedRewardsError,
    TokenTransferError,
)
from stakedrewards.ledger import (
    AccountSnapshot,
    AccrualEngine,
    PoolSnapshot,
    PoolState,
    TimedRatePeriodManager,
    require_positive,
)
from stakedrewards.tokens import TokenLedger

logger = logging.getLogger(__name__)


class StakedRewardsPool:
    """
    Staking pool with time-weighted reward distribution.

    Stakers lock ``staking_token`` and earn ``rewards_token`` emitted at a
    rate derived from the owner's funding spread over the configured
    period.

    Example:
        >>> pool = StakedRewardsPool(staking, rewards, owner="alice", clock=clock)
        >>> pool.set_new_period("alice", start, end)
        >>> pool.add_to_rewards_allocation("alice", 10_000)
        >>> pool.stake("bob", 100)
    """

    def __init__(
        self,
        staking_token: TokenLedger,
        rewards_token: TokenLedger,
        owner: str,
        config: Optional[PoolConfig] = None,
        clock: Optional[Clock] = None,
        authorization: Optional[Authorization] = None,
        pause_gate: Optional[PauseGate] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._config = config or PoolConfig()
        self._clock = clock or SystemClock()
        self._staking_token = staking_token
        self._rewards_token = rewards_token
        self._authorization = authorization or Ownable(owner)
        self._pause_gate = pause_gate or Pausable()
        self._event_bus = event_bus or InMemoryEventBus()

        self._engine = AccrualEngine(scale=self._config.scale)
        self._periods = TimedRatePeriodManager(
            self._engine,
            self._clock,
            start_time=self._config.initial_period_start,
            end_time=self._config.initial_period_end,
            reject_allocation_after_end=self._config.reject_allocation_after_period_end,
        )
        logger.info(
            "Created pool %s (staking=%s, rewards=%s)",
            self.address,
            staking_token.address,
            rewards_token.address,
        )

    # ------------------------------------------------------------------
    # Pool views
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._config.pool_address

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def staking_token(self) -> TokenLedger:
        return self._staking_token

    @property
    def rewards_token(self) -> TokenLedger:
        return self._rewards_token

    @property
    def staking_token_decimals(self) -> int:
        return self._config.staking_token_decimals

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def owner(self) -> Optional[str]:
        return getattr(self._authorization, "owner", None)

    @property
    def paused(self) -> bool:
        return self._pause_gate.is_paused()

    @property
    def total_supply(self) -> int:
        return self._engine.total_staked

    @property
    def reward_rate(self) -> int:
        return self._periods.reward_rate

    @property
    def reward_per_token_stored(self) -> int:
        return self._engine.state.reward_per_token_stored

    @property
    def last_update_time(self) -> int:
        return self._engine.state.last_update_time

    @property
    def period_start_time(self) -> int:
        return self._periods.period_start_time

    @property
    def period_end_time(self) -> int:
        return self._periods.period_end_time

    @property
    def period_duration(self) -> int:
        return self._periods.period_duration

    @property
    def total_funded(self) -> int:
        return self._engine.state.total_funded

    @property
    def total_paid(self) -> int:
        return self._engine.state.total_paid

    @property
    def reserved_rewards(self) -> int:
        """Rewards committed by past allocations that may still be paid out.

        Funding that can no longer be earned (emitted while nothing was
        staked, allocated after a period ended, or dropped when a period
        was replaced before it started) is not reserved.
        """
        state = self._engine.state
        return state.total_funded - state.total_paid - state.total_released

    def available_rewards(self) -> int:
        """Rewards tokens held by the pool that no allocation has claimed yet."""
        held = self._rewards_token.balance_of(self.address)
        if self._rewards_token.address == self._staking_token.address:
            held -= self._engine.total_staked
        return held - self.reserved_rewards

    def balance_of(self, account: str) -> int:
        return self._engine.balance_of(account)

    def rewards_owed(self, account: str) -> int:
        """Checkpointed but unpaid rewards of *account*."""
        record = self._engine.get_account(account)
        return record.rewards_owed if record is not None else 0

    def earned(self, account: str) -> int:
        return self._engine.earned(account)

    def accrued_reward_per_token(self) -> int:
        return self._engine.reward_per_token()

    def has_started(self) -> bool:
        return self._periods.has_started()

    def has_ended(self) -> bool:
        return self._periods.has_ended()

    def last_time_reward_applicable(self) -> int:
        return self._periods.last_time_reward_applicable()

    def time_remaining_in_period(self) -> int:
        return self._periods.time_remaining_in_period()

    def accounts(self) -> list[str]:
        """Every account that has ever been checkpointed."""
        return [account for account, _ in self._engine.iter_accounts()]

    def snapshot(self) -> PoolSnapshot:
        state: PoolState = self._engine.state
        return PoolSnapshot(
            pool_address=self.address,
            timestamp=self._clock.now(),
            total_staked=state.total_staked,
            reward_per_token_stored=state.reward_per_token_stored,
            accrued_reward_per_token=self.accrued_reward_per_token(),
            last_update_time=state.last_update_time,
            reward_rate=state.reward_rate,
            period_start_time=state.period_start_time,
            period_end_time=state.period_end_time,
            has_started=self.has_started(),
            has_ended=self.has_ended(),
            paused=self.paused,
            total_funded=state.total_funded,
            total_paid=state.total_paid,
            total_released=state.total_released,
            reserved_rewards=self.reserved_rewards,
            account_count=self._engine.account_count,
        )

    def account_snapshot(self, account: str) -> AccountSnapshot:
        record = self._engine.get_account(account)
        return AccountSnapshot(
            account=account,
            staked_balance=record.staked_balance if record else 0,
            reward_per_token_paid=record.reward_per_token_paid if record else 0,
            rewards_owed=record.rewards_owed if record else 0,
            earned=self.earned(account),
        )

    # ------------------------------------------------------------------
    # Staker operations
    # ------------------------------------------------------------------

    def stake(self, caller: str, amount: int) -> None:
        """Lock *amount* of the staking token from *caller*.

        Raises:
            InvalidAmountError: ``amount`` is not positive.
            PausedError: staking is paused.
            TokenTransferError: the staking token could not be pulled.
        """
        require_positive(amount)
        require_not_paused(self._pause_gate)
        with self._operation(caller) as op:
            self._pull(op, self._staking_token, caller, amount)
            self._engine.stake(caller, amount)
            op.emit(EVENT_STAKED, {"account": caller, "amount": amount})
        logger.info("%s staked %d", caller, amount)

    def withdraw(self, caller: str, amount: int) -> None:
        """Return *amount* of staked principal to *caller*. Allowed while paused."""
        with self._operation(caller) as op:
            self._withdraw(op, caller, amount)

    def get_reward(self, caller: str) -> int:
        """Pay everything *caller* has earned. Returns the amount paid."""
        with self._operation(caller) as op:
            return self._claim(op, caller, None)

    def get_reward_exact(self, caller: str, amount: int) -> int:
        """Pay exactly *amount* of *caller*'s earned rewards."""
        with self._operation(caller) as op:
            return self._claim(op, caller, amount)

    def exit(self, caller: str) -> int:
        """Withdraw the full stake and claim all rewards.

        If the reward payment fails, the principal already sent is taken
        back and the stake stays in place.

        Returns:
            The reward amount paid.
        """
        with self._operation(caller) as op:
            balance = self._engine.balance_of(caller)
            if balance == 0:
                raise InsufficientBalanceError(f"{caller} has nothing staked")
            self._withdraw(op, caller, balance)
            return self._claim(op, caller, None)

    def update_reward(self, caller: str) -> int:
        """Checkpoint *caller* and return the rewards now owed."""
        return self.update_reward_for(caller)

    def update_reward_for(self, account: str) -> int:
        """Checkpoint any *account*, crediting its owed rewards without paying."""
        with self._operation(account):
            record = self._engine.update(account)
        return record.rewards_owed

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def set_new_period(self, caller: str, start_time: int, end_time: int) -> None:
        require_owner(self._authorization, caller)
        with self._operation() as op:
            self._periods.set_new_period(start_time, end_time)
            op.emit(EVENT_NEW_PERIOD_SET, {"start": start_time, "end": end_time})

    def add_to_rewards_allocation(self, caller: str, amount: int) -> int:
        """Fund the current period with *amount* of the rewards token.

        When ``require_funded_allocations`` is enabled the pool must
        already hold *amount* on top of the rewards it has committed to
        earlier allocations (see :meth:`available_rewards`).

        Returns:
            The new reward rate.
        """
        require_owner(self._authorization, caller)
        require_positive(amount)
        with self._operation() as op:
            self._check_funding(amount)
            rate = self._periods.add_to_rewards_allocation(amount)
            op.emit(EVENT_REWARD_ADDED, {"amount": amount})
        return rate

    def recover_unsupported_token(
        self, caller: str, token: TokenLedger, to: str, amount: int
    ) -> None:
        """Send tokens mistakenly held by the pool to *to*.

        Raises:
            DisallowedAssetError: *token* is the staking or rewards token.
        """
        require_owner(self._authorization, caller)
        if token.address == self._staking_token.address:
            raise DisallowedAssetError("cannot withdraw the staking token")
        if token.address == self._rewards_token.address:
            raise DisallowedAssetError("cannot withdraw the rewards token")
        require_positive(amount)
        with self._operation() as op:
            self._push(op, token, to, amount)
            op.emit(EVENT_RECOVERED, {"token": token.address, "to": to, "amount": amount})
        logger.info("Recovered %d of %s to %s", amount, token.address, to)

    def pause(self, caller: str) -> None:
        require_owner(self._authorization, caller)
        self._gate_call("pause")
        self._publish([(EVENT_PAUSED, {"account": caller})])
        logger.info("Staking paused by %s", caller)

    def unpause(self, caller: str) -> None:
        require_owner(self._authorization, caller)
        self._gate_call("unpause")
        self._publish([(EVENT_UNPAUSED, {"account": caller})])
        logger.info("Staking unpaused by %s", caller)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        require_owner(self._authorization, caller)
        transfer = getattr(self._authorization, "transfer_ownership", None)
        if transfer is None:
            raise StakedRewardsError("authorization does not support ownership transfer")
        previous = transfer(new_owner)
        self._publish(
            [(EVENT_OWNERSHIP_TRANSFERRED, {"previous_owner": previous, "new_owner": new_owner})]
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, *accounts: str) -> Iterator[_Operation]:
        """Run a block atomically.

        On failure the ledger is restored and every token movement the
        block completed is sent back. On success the queued events are
        published.
        """
        op = _Operation()
        try:
            with self._engine.transaction(*accounts):
                yield op
        except BaseException:
            self._reverse(op.transfers)
            raise
        self._publish(op.events)

    def _withdraw(self, op: _Operation, caller: str, amount: int) -> None:
        self._engine.withdraw(caller, amount)
        self._push(op, self._staking_token, caller, amount)
        op.emit(EVENT_WITHDRAWN, {"account": caller, "amount": amount})
        logger.info("%s withdrew %d", caller, amount)

    def _claim(self, op: _Operation, caller: str, amount: Optional[int]) -> int:
        paid = self._engine.take_reward(caller, amount)
        if paid > 0:
            self._push(op, self._rewards_token, caller, paid)
            op.emit(EVENT_REWARD_PAID, {"account": caller, "amount": paid})
            logger.info("Paid %d reward to %s", paid, caller)
        return paid

    def _check_funding(self, amount: int) -> None:
        if not self._config.require_funded_allocations:
            return
        available = self.available_rewards()
        if available < amount:
            raise FundingMismatchError(
                f"pool has {available} unallocated {self._rewards_token.address}, "
                f"cannot allocate {amount}"
            )

    def _pull(self, op: _Operation, token: TokenLedger, sender: str, amount: int) -> None:
        if not token.transfer_from(self.address, sender, self.address, amount):
            raise TokenTransferError(f"{token.address}: transfer from {sender} failed")
        op.transfers.append((token, sender, self.address, amount))

    def _push(self, op: _Operation, token: TokenLedger, to: str, amount: int) -> None:
        if not token.transfer(self.address, to, amount):
            raise TokenTransferError(f"{token.address}: transfer to {to} failed")
        op.transfers.append((token, self.address, to, amount))

    def _reverse(self, transfers: list[tuple[TokenLedger, str, str, int]]) -> None:
        failed = []
        for token, sender, to, amount in reversed(transfers):
            if token.transfer(to, sender, amount):
                logger.info("Reversed %d of %s from %s to %s", amount, token.address, to, sender)
            else:
                logger.error(
                    "Could not reverse %d of %s from %s to %s", amount, token.address, to, sender
                )
                failed.append(token.address)
        if failed:
            raise TokenTransferError(f"rollback left transfers in place: {', '.join(failed)}")

    def _gate_call(self, name: str) -> None:
        method = getattr(self._pause_gate, name, None)
        if method is None:
            raise StakedRewardsError(f"pause gate does not support {name}()")
        method()

    def _publish(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        for event_type, payload in events:
            self._event_bus.emit(
                Event(
                    event_type=event_type,
                    source=self.address,
                    payload=payload,
                    timestamp=self._clock.now(),
                )
            )


@dataclass
class _Operation:
    """Queued events and completed token movements of one pool call."""

    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    transfers: list[tuple[TokenLedger, str, str, int]] = field(default_factory=list)

    def emit(self, event_type: str, payload: dict[str, Any]) -> None:
        self.events.append((event_type, payload))
