"""Pydantic model for persisting oracle state.

The oracle's mutable fields are written verbatim, so a restored oracle
resumes exactly where the saved one stopped.
"""

from pydantic import BaseModel, Field

from twap_oracle.models.types import Address, Uint32, Uint224, Uint256
from twap_oracle.uint import UINT32_MAX


class OracleState(BaseModel):
    """Serialized state of a fixed-window oracle."""

    pair: Address = Field(description="Address of the pair the oracle reads.")
    token0: Address
    token1: Address
    period: int = Field(gt=0, le=UINT32_MAX, description="Averaging period in seconds.")
    price0_cumulative_last: Uint256 = Field(alias="price0CumulativeLast")
    price1_cumulative_last: Uint256 = Field(alias="price1CumulativeLast")
    block_timestamp_last: Uint32 = Field(alias="blockTimestampLast")
    price0_average: Uint224 = Field(
        default="0",
        alias="price0Average",
        description="Raw UQ112x112 average price of token0 in token1.",
    )
    price1_average: Uint224 = Field(
        default="0",
        alias="price1Average",
        description="Raw UQ112x112 average price of token1 in token0.",
    )

    model_config = {"populate_by_name": True}
