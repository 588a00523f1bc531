"""
StakedRewards - Time-weighted staking reward ledger

Stake · Accrue · Claim

Distributes a reward token to stakers in proportion to stake-time across
owner-scheduled reward periods, with O(1) accounting per operation.

Version: 0.1.0
"""

__version__ = "0.1.0"

# Configuration
from .config import PoolConfig, load_config

# Clock
from .clock import Clock, ManualClock, SystemClock

# Ledger
from .ledger import (
    AccountSnapshot,
    AccountState,
    AccrualEngine,
    PoolSnapshot,
    PoolState,
    TimedRatePeriodManager,
)

# Pool
from .pool import StakedRewardsPool

# Collaborators
from .access import Authorization, Ownable, Pausable, PauseGate
from .tokens import InMemoryToken, TokenLedger
from .events import Event, EventBus, InMemoryEventBus

# Exceptions
from .exceptions import (
    StakedRewardsError,
    ConfigError,
    InvalidAmountError,
    InsufficientBalanceError,
    InsufficientRewardsError,
    AuthorizationError,
    NotOwnerError,
    PausedError,
    PeriodError,
    InvalidStartTimeError,
    InvalidEndTimeError,
    PeriodOngoingError,
    PeriodNotStartedError,
    PeriodEndedError,
    DisallowedAssetError,
    TokenError,
    TokenTransferError,
    FundingMismatchError,
)

__all__ = [
    # Version
    "__version__",

    # Configuration
    "PoolConfig",
    "load_config",

    # Clock
    "Clock",
    "ManualClock",
    "SystemClock",

    # Ledger
    "AccountSnapshot",
    "AccountState",
    "AccrualEngine",
    "PoolSnapshot",
    "PoolState",
    "TimedRatePeriodManager",

    # Pool
    "StakedRewardsPool",

    # Collaborators
    "Authorization",
    "Ownable",
    "Pausable",
    "PauseGate",
    "InMemoryToken",
    "TokenLedger",
    "Event",
    "EventBus",
    "InMemoryEventBus",

    # Exceptions
    "StakedRewardsError",
    "ConfigError",
    "InvalidAmountError",
    "InsufficientBalanceError",
    "InsufficientRewardsError",
    "AuthorizationError",
    "NotOwnerError",
    "PausedError",
    "PeriodError",
    "InvalidStartTimeError",
    "InvalidEndTimeError",
    "PeriodOngoingError",
    "PeriodNotStartedError",
    "PeriodEndedError",
    "DisallowedAssetError",
    "TokenError",
    "TokenTransferError",
    "FundingMismatchError",
]
