"""
Broker commission schedule.

Brokers keep a percentage of the winning bid. The percentage depends on the
client's legal form and on how many auctions the client has already taken
part in: newcomers pay more, regulars less.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from .config import AuctionHouseSettings
from .models.clients import ClientAgent, ClientKind

logger = structlog.get_logger()


# Default tiers (percent of the winning bid)
NATURAL_NEW_PCT = 20
NATURAL_REGULAR_PCT = 15
NATURAL_REGULAR_AFTER = 5
LEGAL_NEW_PCT = 25
LEGAL_REGULAR_PCT = 10
LEGAL_REGULAR_AFTER = 25


@dataclass(frozen=True)
class CommissionTier:
    """Commission for one kind of client."""

    new_pct: int
    regular_pct: int
    regular_after: int  # Participations needed to count as a regular

    def percent_for(self, participation_count: int) -> int:
        if participation_count < self.regular_after:
            return self.new_pct
        return self.regular_pct


@dataclass
class CommissionSchedule:
    """Commission tiers per client kind."""

    natural: CommissionTier = CommissionTier(
        NATURAL_NEW_PCT, NATURAL_REGULAR_PCT, NATURAL_REGULAR_AFTER
    )
    legal: CommissionTier = CommissionTier(
        LEGAL_NEW_PCT, LEGAL_REGULAR_PCT, LEGAL_REGULAR_AFTER
    )

    def __post_init__(self):
        """Validate commission percentages."""
        for tier in (self.natural, self.legal):
            for pct in (tier.new_pct, tier.regular_pct):
                if not 0 <= pct <= 100:
                    raise ValueError(f"Invalid commission percentage: {pct}")
            if tier.regular_after < 0:
                raise ValueError(
                    f"Invalid participation threshold: {tier.regular_after}"
                )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[AuctionHouseSettings] = None,
    ) -> "CommissionSchedule":
        """Build the schedule from settings (defaults if not given)."""
        if settings is None:
            return cls()
        return cls(
            natural=CommissionTier(
                settings.natural_commission_new,
                settings.natural_commission_regular,
                settings.natural_regular_after,
            ),
            legal=CommissionTier(
                settings.legal_commission_new,
                settings.legal_commission_regular,
                settings.legal_regular_after,
            ),
        )

    def percent_for(self, client: ClientAgent) -> int:
        """
        Commission percentage for a client.

        Args:
            client: Client about to be settled (participation not yet counted)

        Returns:
            Whole percentage, e.g. 20 for 20%
        """
        tier = self.natural if client.kind == ClientKind.NATURAL else self.legal
        pct = tier.percent_for(client.participation_count)

        logger.debug(
            "commission.calculated",
            client_id=client.id,
            client_kind=client.kind.value,
            participation_count=client.participation_count,
            commission_pct=pct,
        )
        return pct


def calculate_commission(winning_bid: float, commission_pct: int) -> float:
    """
    Amount a broker earns from a sale.

    Args:
        winning_bid: Final selling price
        commission_pct: Whole percentage, e.g. 15

    Returns:
        Commission in currency units
    """
    return winning_bid * commission_pct / 100
