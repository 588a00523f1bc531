"""
Pool Configuration

Declarative configuration for a StakedRewardsPool, loadable from YAML or
JSON (e.g. ``pool.yaml``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from stakedrewards.constants import (
    DEFAULT_POOL_ADDRESS,
    DEFAULT_STAKING_TOKEN_DECIMALS,
    MAX_STAKING_TOKEN_DECIMALS,
)
from stakedrewards.exceptions import ConfigError

logger = logging.getLogger(__name__)


class PoolConfig(BaseModel):
    """Configuration for a staked rewards pool.

    Example:
        >>> config = PoolConfig(initial_period_start=0, initial_period_end=10)
        >>> config.scale
        1000000000000000000
    """

    pool_address: str = Field(
        default=DEFAULT_POOL_ADDRESS,
        description="Account identity under which the pool holds tokens",
    )
    staking_token_decimals: int = Field(
        default=DEFAULT_STAKING_TOKEN_DECIMALS,
        ge=0,
        le=MAX_STAKING_TOKEN_DECIMALS,
        description="Decimals of the staking token; sets the accumulator scale",
    )
    initial_period_start: int = Field(default=0, ge=0, description="Unix seconds")
    initial_period_end: int = Field(default=0, ge=0, description="Unix seconds")
    require_funded_allocations: bool = Field(
        default=True,
        description="Reject allocations not backed by reward tokens held by the pool",
    )
    reject_allocation_after_period_end: bool = Field(
        default=False,
        description="Fail allocations made after the period ended instead of stranding them",
    )

    @field_validator("pool_address")
    @classmethod
    def validate_pool_address(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("pool_address must not be empty")
        return v

    @model_validator(mode="after")
    def validate_initial_period(self) -> "PoolConfig":
        """An initial period, when given, must end after it starts."""
        if self.initial_period_end and self.initial_period_end <= self.initial_period_start:
            raise ValueError("initial_period_end must be greater than initial_period_start")
        return self

    @property
    def scale(self) -> int:
        """Fixed-point scale of the reward-per-token accumulator."""
        return 10 ** self.staking_token_decimals

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PoolConfig":
        """Build a config, converting validation failures into ConfigError."""
        try:
            return cls(**(data or {}))
        except ValidationError as exc:
            raise ConfigError(f"Invalid pool configuration: {exc}") from exc

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "PoolConfig":
        """Load config from YAML."""
        data = yaml.safe_load(yaml_content)
        if data is not None and not isinstance(data, dict):
            raise ConfigError("Pool configuration must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_json(cls, json_content: str) -> "PoolConfig":
        """Load config from JSON."""
        try:
            data = json.loads(json_content)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON configuration: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Pool configuration must be a mapping")
        return cls.from_dict(data)

    def to_yaml(self) -> str:
        """Export config as YAML."""
        return yaml.dump(self.model_dump(), default_flow_style=False)


def load_config(path: Path | str) -> PoolConfig:
    """Load a pool config from a ``.yaml``/``.yml`` or ``.json`` file.

    Raises:
        ConfigError: If the file is missing, has an unknown suffix, or
            fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    content = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        config = PoolConfig.from_yaml(content)
    elif path.suffix == ".json":
        config = PoolConfig.from_json(content)
    else:
        raise ConfigError(f"Unsupported config format: {path.suffix}")

    logger.info("Loaded pool config from %s", path)
    return config
