"""Configuration for the auction house."""

from datetime import date
from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings


class AuctionHouseSettings(BaseSettings):
    """Settings for the auction house.

    Every value can be overridden through an ``AUCTION_HOUSE_`` prefixed
    environment variable or a local ``.env`` file.
    """

    # Settlement
    bid_tolerance: float = 1.0  # Max distance between a bid and the winning bid

    # Broker assignment (None = nondeterministic)
    random_seed: Optional[int] = None

    # Natural-person bid scaling uses this year (None = today)
    current_year: Optional[int] = None

    # Commission schedule (percentages)
    natural_commission_new: int = 20
    natural_commission_regular: int = 15
    natural_regular_after: int = 5
    legal_commission_new: int = 25
    legal_commission_regular: int = 10
    legal_regular_after: int = 25

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "AUCTION_HOUSE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def check_ranges(self) -> "AuctionHouseSettings":
        """Reject a negative tolerance and thresholds."""
        if self.bid_tolerance < 0:
            raise ValueError("bid_tolerance must be non-negative")
        if self.natural_regular_after < 0 or self.legal_regular_after < 0:
            raise ValueError("participation thresholds must be non-negative")
        return self

    @property
    def as_of_year(self) -> int:
        """Year used for natural-person bid scaling."""
        return self.current_year or date.today().year


@lru_cache
def get_settings() -> AuctionHouseSettings:
    """Get cached settings instance."""
    return AuctionHouseSettings()
