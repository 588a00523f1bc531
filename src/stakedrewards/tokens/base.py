# Copyright (c) StakedRewards Contributors. All rights reserved.
# Licensed under the MIT License.
"""Abstract token interface for StakedRewards custody.

Defines the contract a fungible token must implement for the pool to take
custody of stake and pay out rewards. Implementations are expected to
follow standard fungible-token semantics: fixed supply accounting, no fee
on transfer and no rebasing.
"""

from abc import ABC, abstractmethod


class TokenLedger(ABC):
    """Abstract base class for fungible token ledgers.

    Transfers either complete synchronously or fail. A ``False`` return
    or a raised exception aborts the calling pool operation.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Identity of the token contract."""

    @property
    @abstractmethod
    def decimals(self) -> int:
        """Number of decimals used by the token's base unit."""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        """Return the balance held by *account*."""

    @abstractmethod
    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move *amount* from *sender* to *to*."""

    @abstractmethod
    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Move *amount* from *owner* to *to* using *spender*'s allowance."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self.address!r})"
