"""
Auction records.

An ``AuctionState`` lives from seeding until its product is settled:

    PENDING ──(participants == required)──► RUNNING ──(rounds done)──► SETTLED

Settled auctions are discarded by the coordinator; what remains is the
``AuctionOutcome`` with the per-round bid detail.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .models.products import Product


class AuctionStatus(str, Enum):
    """Lifecycle of an auction."""

    PENDING = "pending"
    RUNNING = "running"
    SETTLED = "settled"


@dataclass
class AuctionState:
    """Registration progress of one product's auction."""
    product_id: int
    max_rounds: int
    required_participants: int
    current_participants: int = 0
    auction_id: int = 0
    status: AuctionStatus = AuctionStatus.PENDING

    def __post_init__(self):
        if self.max_rounds < 0:
            raise ValueError(f"max_rounds must be non-negative, got {self.max_rounds}")
        if self.required_participants < 1:
            raise ValueError(
                f"required_participants must be positive, got {self.required_participants}"
            )

    def add_participant(self) -> None:
        self.current_participants += 1

    @property
    def can_start(self) -> bool:
        return (
            self.status == AuctionStatus.PENDING
            and self.current_participants == self.required_participants
        )


@dataclass
class AuctionOutcome:
    """Result of running an auction."""
    auction_number: int
    product: Product
    rounds: list[list[float]]  # Bids collected in each round, broker order
    final_bid: float
    sold: bool
    description: str = ""  # Sale line(s) produced by the settling broker
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def round_count(self) -> int:
        return len(self.rounds)

    @property
    def bid_count(self) -> int:
        return sum(len(bids) for bids in self.rounds)
