"""Oracle constants.

Centralizes the fixed widths of the pair's accounting fields and the default
averaging period.
"""

# Default averaging window: the oracle refuses to update more often than this
PERIOD = 24 * 60 * 60  # 24 hours, in seconds

# Bit widths of the pair's accounting fields (UniswapV2Pair storage layout)
RESERVE_BITS = 112
TIMESTAMP_BITS = 32
CUMULATIVE_BITS = 256

# Width of the stored average price (UQ112x112 backing integer)
AVERAGE_BITS = 224

# Environment variable overriding PERIOD (see OracleConfig.from_env)
PERIOD_ENV_VAR = "TWAP_ORACLE_PERIOD"
