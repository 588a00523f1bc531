# Copyright (c) StakedRewards Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for StakedRewards.

All StakedRewards exceptions inherit from StakedRewardsError. Every error
raised by a pool operation is terminal for that call: the operation is
rolled back and no partial state is kept.
"""


class StakedRewardsError(Exception):
    """Base exception for all StakedRewards errors."""


class ConfigError(StakedRewardsError):
    """Invalid pool configuration."""


class InvalidAmountError(StakedRewardsError):
    """Amount is zero or negative where a positive amount is required."""


class InsufficientBalanceError(StakedRewardsError):
    """Withdrawal exceeds the account's staked balance."""


class InsufficientRewardsError(StakedRewardsError):
    """Exact reward claim exceeds the account's owed rewards."""


class AuthorizationError(StakedRewardsError):
    """Errors related to caller authorization."""


class NotOwnerError(AuthorizationError):
    """Privileged operation attempted by a caller that is not the owner."""


class PausedError(StakedRewardsError):
    """Staking attempted while the pool is paused."""


class PeriodError(StakedRewardsError):
    """Errors related to reward period scheduling."""


class InvalidStartTimeError(PeriodError):
    """New period start lies in the past."""


class InvalidEndTimeError(PeriodError):
    """New period end is not after its start."""


class PeriodOngoingError(PeriodError):
    """A live period cannot be replaced."""


class PeriodNotStartedError(PeriodError):
    """Remaining time queried before the period started."""


class PeriodEndedError(PeriodError):
    """Rewards allocated after the period ended with no new period scheduled."""


class DisallowedAssetError(StakedRewardsError):
    """Recovery attempted for the staking or rewards token."""


class TokenError(StakedRewardsError):
    """Errors raised at the token custody boundary."""


class TokenTransferError(TokenError):
    """A token transfer was rejected or reported failure."""


class FundingMismatchError(TokenError):
    """Rewards allocated without the backing tokens held by the pool."""


__all__ = [
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
