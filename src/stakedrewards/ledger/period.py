"""
Timed-Rate Period Manager.

Turns reward funding into an emission rate spread over a configured
period, and allows a new period to be scheduled once the current one has
finished (or before it begins). The period phase is derived from the
clock on every call; there is no stored phase flag.

    not started   now <  start
    live          start <= now <= end
    ended         now >  end
"""

from __future__ import annotations

import logging

from stakedrewards.clock import Clock
from stakedrewards.exceptions import (
    InvalidEndTimeError,
    InvalidStartTimeError,
    PeriodEndedError,
    PeriodNotStartedError,
    PeriodOngoingError,
)

from .accrual import AccrualEngine, require_positive

logger = logging.getLogger(__name__)


class TimedRatePeriodManager:
    """Period scheduling and rate derivation on top of an AccrualEngine.

    The manager registers itself as the engine's reward schedule and only
    changes the rate and period through :meth:`AccrualEngine.reschedule`,
    which flushes accrual under the old values first.

    Args:
        engine: The accrual engine to drive.
        clock: Source of the current time.
        start_time: Initial period start (unix seconds).
        end_time: Initial period end; ``0`` leaves no period configured.
        reject_allocation_after_end: Fail allocations made after the period
            ended instead of letting them produce a zero rate.
    """

    def __init__(
        self,
        engine: AccrualEngine,
        clock: Clock,
        start_time: int = 0,
        end_time: int = 0,
        reject_allocation_after_end: bool = False,
    ) -> None:
        if end_time and end_time <= start_time:
            raise InvalidEndTimeError("endTime must be greater than startTime")
        self._engine = engine
        self._clock = clock
        self._reject_after_end = reject_allocation_after_end
        state = engine.state
        state.period_start_time = start_time
        state.period_end_time = end_time
        engine.bind_schedule(self)

    # ------------------------------------------------------------------
    # Phase queries
    # ------------------------------------------------------------------

    @property
    def period_start_time(self) -> int:
        return self._engine.state.period_start_time

    @property
    def period_end_time(self) -> int:
        return self._engine.state.period_end_time

    @property
    def period_duration(self) -> int:
        return self.period_end_time - self.period_start_time

    @property
    def reward_rate(self) -> int:
        return self._engine.state.reward_rate

    def has_started(self) -> bool:
        return self._clock.now() >= self.period_start_time

    def has_ended(self) -> bool:
        return self._clock.now() > self.period_end_time

    def last_time_reward_applicable(self) -> int:
        """Latest instant up to which rewards may accrue.

        During or after a period this is ``min(now, end)``. Before the
        current period starts it is the last endpoint an earlier period
        reached, so accrual never moves backwards.
        """
        if self.has_started():
            return min(self._clock.now(), self.period_end_time)
        return self._engine.state.last_period_end_time

    def time_remaining_in_period(self) -> int:
        if not self.has_started():
            raise PeriodNotStartedError("current rewards distribution period has not yet begun")
        if self.has_ended():
            return 0
        return self.period_end_time - self._clock.now()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def set_new_period(self, start_time: int, end_time: int) -> None:
        """Replace the configured period and reset the rate to zero.

        Unspent funding of the previous period is not carried over; it is
        released from the reward reserve and has
        to be allocated again with :meth:`add_to_rewards_allocation`.

        Raises:
            InvalidStartTimeError: ``start_time`` lies in the past.
            InvalidEndTimeError: ``end_time`` is not after ``start_time``.
            PeriodOngoingError: the current period is live.
        """
        now = self._clock.now()
        if start_time < now:
            raise InvalidStartTimeError("startTime must be greater than the current time")
        if end_time <= start_time:
            raise InvalidEndTimeError("endTime must be greater than startTime")
        if self.has_started() and not self.has_ended():
            raise PeriodOngoingError("cannot change an ongoing staking period")

        # Emission the old period had scheduled but not yet produced
        forfeited = self.reward_rate * self.remaining_emission_time() // self._engine.scale
        self._engine.reschedule(
            reward_rate=0,
            period_start_time=start_time,
            period_end_time=end_time,
            last_period_end_time=self.last_time_reward_applicable(),
            released=forfeited,
        )
        logger.info("New reward period set: %d -> %d", start_time, end_time)

    def remaining_emission_time(self) -> int:
        """Seconds over which newly allocated rewards would be emitted."""
        if not self.has_started():
            return self.period_duration
        if self.has_ended():
            return 0
        return self.period_end_time - self._clock.now()

    def add_to_rewards_allocation(self, amount: int) -> int:
        """Spread *amount* over the rest of the period and return the new rate.

        The unspent part of the current rate and the new amount are emitted
        together over the same remaining window:

            rate = (rate * remaining + amount * scale) // remaining

        Raises:
            InvalidAmountError: ``amount`` is not positive.
            PeriodEndedError: the period ended and the manager was built
                with ``reject_allocation_after_end``.
        """
        require_positive(amount)
        remaining = self.remaining_emission_time()

        released = 0
        if remaining > 0:
            rate = (self.reward_rate * remaining + amount * self._engine.scale) // remaining
        else:
            if self._reject_after_end:
                raise PeriodEndedError(
                    "rewards period has ended; set a new period before allocating rewards"
                )
            logger.warning(
                "Allocated %d after period end %d; no emission window remains",
                amount,
                self.period_end_time,
            )
            rate = 0
            released = amount

        self._engine.reschedule(reward_rate=rate, funded=amount, released=released)
        logger.info("Added %d to rewards allocation (rate=%d)", amount, rate)
        return rate
