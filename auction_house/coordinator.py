"""
Auction coordinator.

Routes registration requests to brokers and, once an auction has gathered
its participants, drives it on the calling thread:

1. Every broker pushes the current record to its participating clients
2. For each round, every broker's bids are collected before the round
   maximum is broadcast back (a round barrier)
3. After the last round the maximum is compared with the minimum price and,
   if high enough, every broker is asked to settle; at most one of them
   recognises the winning bid as one of its clients'
4. The auction record is discarded and brokers blank their records

A request for a product with no pending auction (none was seeded, or its
auction already ran without a sale) is still accepted and kept in the
broker's roster. Nothing ever runs or blanks it, so a repeat of the same
(client, product) request is rejected as a duplicate.
"""

import random
from typing import Optional

import structlog

from .auction import AuctionOutcome, AuctionState, AuctionStatus
from .brokers import BrokerAgent
from .commission import CommissionSchedule
from .config import AuctionHouseSettings, get_settings
from .exceptions import (
    DuplicateRequestError,
    InvalidRequestError,
    UnknownEntityError,
)
from .models.clients import ClientAgent
from .models.products import Product
from .registry import ProductRegistry
from .staff import Administrator
from .transcript import render_transcript

logger = structlog.get_logger()


class AuctionCoordinator:
    """
    The auction house: catalog, client roster, brokers and auctions.

    One instance per process is expected, but nothing enforces it; tests
    build as many as they need.

    Example:
        house = AuctionCoordinator()
        house.administrator.add_product(vase).join()
        house.add_broker(BrokerAgent("Ana", 4, 4.5))
        house.add_auction(AuctionState(product_id=vase.id, max_rounds=3,
                                       required_participants=2))
        house.register(alice, vase.id, 500.0)
        outcome = house.register(bob, vase.id, 650.0)
    """

    def __init__(
        self,
        settings: Optional[AuctionHouseSettings] = None,
        registry: Optional[ProductRegistry] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the auction house.

        Args:
            settings: House settings (default: cached environment settings)
            registry: Product registry (default: a new empty one)
            rng: Random source for broker assignment
                (default: seeded from settings.random_seed)
        """
        self.settings = settings or get_settings()
        self.registry = registry or ProductRegistry()
        self.commission = CommissionSchedule.from_settings(self.settings)
        self.administrator = Administrator(self)

        self._rng = rng or random.Random(self.settings.random_seed)
        self._organised_auctions = 0

        self.clients: list[ClientAgent] = []
        self.brokers: list[BrokerAgent] = []
        self.auctions: list[AuctionState] = []
        self.sold_products: list[Product] = []
        self.outcomes: list[AuctionOutcome] = []

    # -------------------------------------------------------------------------
    # Enrolment
    # -------------------------------------------------------------------------

    def add_client(self, client: ClientAgent) -> ClientAgent:
        """Enrol a client, assigning the next sequential id if new."""
        if any(known is client for known in self.clients):
            return client

        client.id = len(self.clients)
        client.house = self
        self.clients.append(client)

        logger.debug("coordinator.client_enrolled", client_id=client.id, name=client.name)
        return client

    def add_broker(self, broker: BrokerAgent) -> BrokerAgent:
        """Hire a broker; the house's commission and tolerance apply to it."""
        if broker.id is None:
            broker.id = len(self.brokers)
        broker.registry = self.registry
        broker.commission = self.commission
        broker.bid_tolerance = self.settings.bid_tolerance
        broker.as_of_year = self.settings.as_of_year
        self.brokers.append(broker)

        logger.debug("coordinator.broker_hired", broker_id=broker.id, name=broker.name)
        return broker

    def add_auction(self, auction: AuctionState) -> AuctionState:
        """Schedule an auction for a product."""
        auction.auction_id = len(self.auctions)
        self.auctions.append(auction)
        return auction

    def find_auction(self, product_id: int) -> Optional[AuctionState]:
        """Pending auction for a product, if any."""
        for auction in self.auctions:
            if auction.product_id == product_id and auction.status == AuctionStatus.PENDING:
                return auction
        return None

    def find_product(self, product_id: int, max_price: float) -> Product:
        """
        Resolve a requested product.

        Raises:
            UnknownEntityError: no such product in the catalog
            InvalidRequestError: max_price below the product's minimum
        """
        product = self.registry.get(product_id)
        if product is None:
            raise UnknownEntityError(f"Unknown product {product_id}", product_id=product_id)
        if max_price < product.min_price:
            raise InvalidRequestError(
                product_id=product_id, max_price=max_price, min_price=product.min_price
            )
        return product

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(
        self,
        client: ClientAgent,
        product_id: int,
        max_price: float,
    ) -> Optional[AuctionOutcome]:
        """
        Handle a client's request for a product.

        Completing an auction's participant count runs the whole auction
        before returning.

        Args:
            client: Requesting client (enrolled if new)
            product_id: Id of the demanded product
            max_price: Most the client is willing to pay

        Returns:
            AuctionOutcome if this request completed an auction, else None

        Raises:
            UnknownEntityError: unknown product, or no broker to take the request
            InvalidRequestError: max_price below the product's minimum
            DuplicateRequestError: (client, product) already pending
        """
        self.add_client(client)
        product = self.find_product(product_id, max_price)

        if any(broker.has_request(client, product) for broker in self.brokers):
            raise DuplicateRequestError(client_id=client.id, product_id=product_id)

        if not self.brokers:
            raise UnknownEntityError("No broker available", product_id=product_id)
        broker = self._rng.choice(self.brokers)
        broker.register(client, product, max_price)

        logger.info(
            "coordinator.request_accepted",
            client_id=client.id,
            product_id=product_id,
            max_price=max_price,
            broker=broker.name,
        )

        auction = self.find_auction(product_id)
        if auction is None:
            logger.warning("coordinator.no_pending_auction", product_id=product_id)
            return None

        auction.add_participant()
        if not auction.can_start:
            return None

        return self.run_auction(auction, product)

    # -------------------------------------------------------------------------
    # Auction
    # -------------------------------------------------------------------------

    def run_auction(self, auction: AuctionState, product: Product) -> AuctionOutcome:
        """
        Run every round of an auction, settle it, and clean up.

        Returns:
            AuctionOutcome with per-round bids and the sale description
        """
        auction.status = AuctionStatus.RUNNING
        self._organised_auctions += 1

        logger.info(
            "coordinator.auction_started",
            auction_number=self._organised_auctions,
            product_id=product.id,
            participants=auction.current_participants,
            max_rounds=auction.max_rounds,
        )

        for broker in self.brokers:
            broker.start_round(product)

        rounds: list[list[float]] = []
        biggest_bid = 0.0
        for _ in range(auction.max_rounds):
            round_bids: list[float] = []
            for broker in self.brokers:
                round_bids.extend(broker.collect_bids(product))
            biggest_bid = max(round_bids, default=0.0)
            for broker in self.brokers:
                broker.broadcast_max(biggest_bid, product)
            rounds.append(round_bids)

        description = ""
        if biggest_bid >= product.min_price:
            descriptions = [broker.settle(biggest_bid, product) for broker in self.brokers]
            description = "\n".join(d for d in descriptions if d)

        sold = bool(description)
        if sold:
            self.sold_products.append(product)

        outcome = AuctionOutcome(
            auction_number=self._organised_auctions,
            product=product,
            rounds=rounds,
            final_bid=biggest_bid,
            sold=sold,
            description=description,
        )
        self.outcomes.append(outcome)

        auction.status = AuctionStatus.SETTLED
        self.auctions.remove(auction)
        for broker in self.brokers:
            broker.reset(product)

        logger.info(
            "coordinator.auction_settled",
            auction_number=outcome.auction_number,
            product_id=product.id,
            final_bid=biggest_bid,
            min_price=product.min_price,
            sold=sold,
        )
        logger.debug("coordinator.transcript", text=render_transcript(outcome))
        return outcome

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def catalog(self) -> list[Product]:
        """Deduplicated snapshot of the products still offered."""
        return self.registry.snapshot()

    def get_client_stats(self) -> list[dict]:
        """Participation and wins per client."""
        return [
            {
                "client_id": client.id,
                "name": client.name,
                "kind": client.kind.value,
                "participation_count": client.participation_count,
                "win_count": client.win_count,
            }
            for client in self.clients
        ]

    def get_broker_stats(self) -> list[dict]:
        """Accumulated cash and wins per broker."""
        return [broker.get_stats() for broker in self.brokers]

    def reset(self) -> None:
        """Return the house to its empty state."""
        self.registry.reset()
        self.clients = []
        self.brokers = []
        self.auctions = []
        self.sold_products = []
        self.outcomes = []
        self._organised_auctions = 0
