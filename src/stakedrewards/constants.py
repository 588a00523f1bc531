"""Shared constants for StakedRewards."""

# Fixed-point precision of the reward-per-token accumulator (10 ** decimals)
DEFAULT_STAKING_TOKEN_DECIMALS = 18
MAX_STAKING_TOKEN_DECIMALS = 36

DEFAULT_POOL_ADDRESS = "stakedrewards:pool"

# Event types published by StakedRewardsPool
EVENT_STAKED = "pool.staked"
EVENT_WITHDRAWN = "pool.withdrawn"
EVENT_REWARD_PAID = "pool.reward_paid"
EVENT_REWARD_ADDED = "pool.reward_added"
EVENT_NEW_PERIOD_SET = "pool.period_set"
EVENT_RECOVERED = "pool.recovered"
EVENT_PAUSED = "pool.paused"
EVENT_UNPAUSED = "pool.unpaused"
EVENT_OWNERSHIP_TRANSFERRED = "pool.ownership_transferred"

ALL_EVENT_TYPES = [
    EVENT_STAKED,
    EVENT_WITHDRAWN,
    EVENT_REWARD_PAID,
    EVENT_REWARD_ADDED,
    EVENT_NEW_PERIOD_SET,
    EVENT_RECOVERED,
    EVENT_PAUSED,
    EVENT_UNPAUSED,
    EVENT_OWNERSHIP_TRANSFERRED,
]
