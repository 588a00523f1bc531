"""
Token custody interfaces for StakedRewards.

Provides the abstract token contract and an in-memory implementation.
"""

from .base import TokenLedger
from .memory import InMemoryToken

__all__ = [
    "TokenLedger",
    "InMemoryToken",
]
