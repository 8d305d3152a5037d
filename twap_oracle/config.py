"""Oracle configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from twap_oracle.constants import PERIOD, PERIOD_ENV_VAR
from twap_oracle.uint import UINT32_MAX


@dataclass(frozen=True)
class OracleConfig:
    """Configuration for fixed-window oracles.

    Attributes:
        period: Minimum number of seconds between two successful updates
            (default: 24 hours). The average spans at least this long, and
            longer if update() is called late. Must fit in a uint32 because
            elapsed time is measured on the pair's uint32 clock.
    """

    period: int = PERIOD

    def __post_init__(self) -> None:
        if isinstance(self.period, bool) or not isinstance(self.period, int):
            raise TypeError(f"period must be int, got {type(self.period).__name__}")
        if not 0 < self.period <= UINT32_MAX:
            raise ValueError(f"period must be in (0, 2^32), got {self.period}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> OracleConfig:
        """Build a config from environment variables.

        - TWAP_ORACLE_PERIOD: averaging period in seconds (default: 86400)

        Raises:
            ValueError: If the variable is set but not a valid period
        """
        env = os.environ if environ is None else environ
        raw = env.get(PERIOD_ENV_VAR)
        if raw is None or raw.strip() == "":
            return cls()
        try:
            period = int(raw)
        except ValueError as err:
            raise ValueError(f"{PERIOD_ENV_VAR} must be an integer: '{raw}'") from err
        return cls(period=period)


# Default configuration instance
DEFAULT_ORACLE_CONFIG = OracleConfig()
