"""
Auction House - multi-round sealed-bid auctions brokered between clients
and a shared product catalog.
"""

from .coordinator import AuctionCoordinator
from .registry import ProductRegistry

__version__ = "0.1.0"
__all__ = ["AuctionCoordinator", "ProductRegistry"]
