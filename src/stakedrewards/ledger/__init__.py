"""
Reward ledger.

Accrual engine (stake-time accounting) and the timed-rate period manager
that feeds it.
"""

from .accrual import AccrualEngine, RewardSchedule, checkpointed, require_positive
from .models import AccountSnapshot, AccountState, PoolSnapshot, PoolState
from .period import TimedRatePeriodManager

__all__ = [
    "AccrualEngine",
    "RewardSchedule",
    "checkpointed",
    "require_positive",
    "AccountSnapshot",
    "AccountState",
    "PoolSnapshot",
    "PoolState",
    "TimedRatePeriodManager",
]
