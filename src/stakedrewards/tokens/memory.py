"""
In-memory fungible token.

Standard allowance-based token used to back pools in tests, simulations
and single-process deployments.
"""

from __future__ import annotations

import logging
from typing import Optional

from stakedrewards.exceptions import InvalidAmountError, TokenTransferError

from .base import TokenLedger

logger = logging.getLogger(__name__)


class InMemoryToken(TokenLedger):
    """Fungible token with balances and allowances held in dicts.

    Args:
        address: Token identity.
        symbol: Ticker symbol.
        decimals: Base-unit decimals.
        initial_holder: Account credited with ``initial_supply``.
        initial_supply: Amount minted at construction.
    """

    def __init__(
        self,
        address: str,
        symbol: str = "TKN",
        decimals: int = 18,
        initial_holder: Optional[str] = None,
        initial_supply: int = 0,
    ) -> None:
        self._address = address
        self.symbol = symbol
        self._decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self.total_supply = 0
        if initial_holder is not None and initial_supply:
            self.mint(initial_holder, initial_supply)

    @property
    def address(self) -> str:
        return self._address

    @property
    def decimals(self) -> int:
        return self._decimals

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def mint(self, to: str, amount: int) -> None:
        """Create *amount* new units for *to*."""
        if amount <= 0:
            raise InvalidAmountError("mint amount must be positive")
        self._balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Allow *spender* to move up to *amount* of *owner*'s balance."""
        if amount < 0:
            raise InvalidAmountError("allowance must be non-negative")
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            raise TokenTransferError(
                f"{self.symbol}: transfer amount exceeds allowance ({amount} > {allowed})"
            )
        self._move(owner, to, amount)
        self._allowances[(owner, spender)] = allowed - amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError("transfer amount must be non-negative")
        balance = self.balance_of(sender)
        if amount > balance:
            raise TokenTransferError(
                f"{self.symbol}: transfer amount exceeds balance ({amount} > {balance})"
            )
        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
        logger.debug("%s transfer %d from %s to %s", self.symbol, amount, sender, to)
