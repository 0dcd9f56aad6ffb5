"""
Auction house staff: the employee record and the administrator.

The administrator is an explicitly constructed object bound to one
coordinator, rather than a process-wide instance.
"""

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from .models.clients import ClientAgent
from .models.products import Product

if TYPE_CHECKING:
    from .auction import AuctionState
    from .brokers import BrokerAgent
    from .coordinator import AuctionCoordinator

logger = structlog.get_logger()


@dataclass
class Employee:
    """Someone working for the auction house."""
    name: str
    years_of_experience: int = 0
    rating: float = 0.0


class Administrator(Employee):
    """
    Seeds and resets an auction house.

    Products are inserted through detached worker threads, like any other
    catalog mutation.
    """

    def __init__(
        self,
        house: "AuctionCoordinator",
        name: str = "administrator",
        years_of_experience: int = 0,
        rating: float = 0.0,
    ):
        super().__init__(name, years_of_experience, rating)
        self.house = house

    def add_product(self, product: Product) -> threading.Thread:
        """Dispatch the insertion of a product; returns the worker thread."""
        return self.house.registry.dispatch_add(product)

    def add_client(self, client: ClientAgent) -> ClientAgent:
        return self.house.add_client(client)

    def add_broker(self, broker: "BrokerAgent") -> "BrokerAgent":
        return self.house.add_broker(broker)

    def add_auction(self, auction: "AuctionState") -> "AuctionState":
        return self.house.add_auction(auction)

    def reset_all(self) -> None:
        """Forget every product, client, broker and auction."""
        logger.info("administrator.reset_all", administrator=self.name)
        self.house.reset()
