"""Negotiation record exchanged between a broker and one of its clients."""

from dataclasses import dataclass
from typing import Optional

from .products import Product


@dataclass
class NegotiationRecord:
    """
    Per (broker, client, product) negotiation state.

    The broker writes the auction-wide maximum and commission; the client's
    bids are stored back into ``current_bid`` every round.
    """
    demanded_product: Optional[Product] = None
    max_affordable_bid: float = 0.0
    current_bid: float = 0.0
    max_auction_bid_so_far: float = 0.0
    commission_percent: int = 0
    prior_win_count: int = 0
    is_winner: bool = False
    client_name: str = ""

    @property
    def is_blank(self) -> bool:
        return self.demanded_product is None

    def demands(self, product: Product) -> bool:
        return self.demanded_product is not None and self.demanded_product.id == product.id

    @classmethod
    def blank(cls, client_name: str = "") -> "NegotiationRecord":
        """A record with no demanded product."""
        return cls(client_name=client_name)
