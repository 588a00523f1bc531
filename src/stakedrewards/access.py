"""
Authorization and pausability gates.

The pool consults an :class:`Authorization` for every owner-only entry point
and a :class:`PauseGate` before accepting new stake. ``Ownable`` and
``Pausable`` are the default in-process implementations; any object with
the same methods can be supplied instead.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from stakedrewards.exceptions import NotOwnerError, PausedError

logger = logging.getLogger(__name__)


@runtime_checkable
class Authorization(Protocol):
    """Answers whether a caller may use privileged entry points."""

    def is_owner(self, caller: str) -> bool: ...


@runtime_checkable
class PauseGate(Protocol):
    """Reports whether staking is currently halted."""

    def is_paused(self) -> bool: ...


class Ownable:
    """Single-owner authorization.

    Args:
        owner: Account identity recorded as owner.
    """

    def __init__(self, owner: str) -> None:
        if not owner:
            raise ValueError("owner must not be empty")
        self._owner = owner

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, caller: str) -> bool:
        return caller == self._owner

    def transfer_ownership(self, new_owner: str) -> str:
        """Record *new_owner* and return the previous owner."""
        if not new_owner:
            raise ValueError("new owner must not be empty")
        previous, self._owner = self._owner, new_owner
        logger.info("Ownership transferred from %s to %s", previous, new_owner)
        return previous


class Pausable:
    """In-process pause flag."""

    def __init__(self, paused: bool = False) -> None:
        self._paused = paused

    def is_paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        self._paused = True

    def unpause(self) -> None:
        self._paused = False


def require_owner(authorization: Authorization, caller: str) -> None:
    """Raise NotOwnerError unless *caller* is the owner."""
    if not authorization.is_owner(caller):
        raise NotOwnerError(f"caller {caller!r} is not the owner")


def require_not_paused(gate: PauseGate) -> None:
    """Raise PausedError while the gate reports paused."""
    if gate.is_paused():
        raise PausedError("staking is paused")
