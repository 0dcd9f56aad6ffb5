"""
Broker agents.

A broker keeps an ordered roster of (client, negotiation record) pairs and
relays the auction protocol to its own clients: it pushes the record at the
start of an auction, collects one bid per client every round, relays the
round maximum, and at settlement decides whether the winning bid belongs to
one of its clients.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from .commission import CommissionSchedule, calculate_commission
from .exceptions import DuplicateRequestError
from .models.clients import ClientAgent
from .models.negotiation import NegotiationRecord
from .models.products import Product
from .registry import ProductRegistry
from .staff import Employee

logger = structlog.get_logger()

DEFAULT_BID_TOLERANCE = 1.0


@dataclass
class RosterEntry:
    """One client's request as tracked by a broker."""
    client: ClientAgent
    record: NegotiationRecord


class BrokerAgent(Employee):
    """
    Intermediary between clients and the coordinator.

    Rosters carry no lock of their own: one auction's round loop is expected
    to run to completion on the coordinating thread before another starts.
    """

    def __init__(
        self,
        name: str,
        years_of_experience: int = 0,
        rating: float = 0.0,
        broker_id: Optional[int] = None,
        commission: Optional[CommissionSchedule] = None,
        bid_tolerance: float = DEFAULT_BID_TOLERANCE,
        as_of_year: Optional[int] = None,
    ):
        """
        Initialize broker.

        Args:
            name: Broker's name
            years_of_experience: Years in the trade
            rating: Rating given by previous clients
            broker_id: Identifier (assigned by the coordinator if None)
            commission: Commission schedule (default tiers if None)
            bid_tolerance: Max distance between a client's bid and the
                winning bid for the client to be considered its author
            as_of_year: Reference year passed to clients when bidding
        """
        super().__init__(name, years_of_experience, rating)
        self.id = broker_id
        self.commission = commission or CommissionSchedule()
        self.bid_tolerance = bid_tolerance
        self.as_of_year = as_of_year
        self.registry: Optional[ProductRegistry] = None

        self.roster: list[RosterEntry] = []
        self.cash_accumulated: float = 0.0
        self.win_count: int = 0

    @property
    def clients(self) -> list[ClientAgent]:
        return [entry.client for entry in self.roster]

    def has_request(self, client: ClientAgent, product: Product) -> bool:
        """Whether this broker holds a record for (client, product)."""
        return any(
            entry.client is client and entry.record.demands(product)
            for entry in self.roster
        )

    def register(
        self,
        client: ClientAgent,
        product: Product,
        max_price: float,
    ) -> NegotiationRecord:
        """
        Take on a client's request for a product.

        Raises:
            DuplicateRequestError: this roster already holds (client, product)
        """
        if self.has_request(client, product):
            raise DuplicateRequestError(
                client_id=client.id, product_id=product.id, broker_id=self.id
            )

        record = NegotiationRecord(
            demanded_product=product,
            max_affordable_bid=max_price,
            client_name=client.name,
        )

        # Recycle a roster slot the client left blank after an earlier auction
        for entry in self.roster:
            if entry.client is client and entry.record.is_blank:
                entry.record = record
                break
        else:
            self.roster.append(RosterEntry(client=client, record=record))

        logger.info(
            "broker.client_registered",
            broker=self.name,
            client_id=client.id,
            product_id=product.id,
            max_price=max_price,
        )
        return record

    def start_round(self, product: Product) -> None:
        """Let every client bidding for ``product`` observe its record."""
        for entry in self._entries_for(product):
            entry.client.receive_info(entry.record)

    def collect_bids(self, product: Product) -> list[float]:
        """
        Ask each client bidding for ``product`` for this round's bid.

        Returns:
            Bids in roster order
        """
        bids = []
        for entry in self._entries_for(product):
            amount, prior_wins = entry.client.bid(entry.record, self.as_of_year)
            entry.record.current_bid = amount
            entry.record.prior_win_count = prior_wins
            bids.append(amount)

        logger.debug(
            "broker.bids_collected",
            broker=self.name,
            product_id=product.id,
            bids=bids,
        )
        return bids

    def broadcast_max(self, bid: float, product: Product) -> None:
        """Relay the round maximum to every client bidding for ``product``."""
        for entry in self._entries_for(product):
            entry.record.max_auction_bid_so_far = bid
            entry.client.receive_info(entry.record)

    def settle(self, winning_bid: float, product: Product) -> str:
        """
        Close the auction for this broker's clients.

        Every participating client gets a commission tier and is told it
        took part (``receive_outcome(False)``). The winner is the client
        whose last bid lies within tolerance of ``winning_bid``; ties go to
        the client with the most prior wins, then to roster order. The
        winner is then told it won (``receive_outcome(True)``), so its
        participation count rises twice. If the product was already
        recorded as sold (another broker's client matched first), this
        broker has no winner.

        Returns:
            Sale description if the winner is one of this broker's clients,
            otherwise an empty string
        """
        winner: Optional[RosterEntry] = None
        most_wins = -1
        for entry in self._entries_for(product):
            entry.record.commission_percent = self.commission.percent_for(entry.client)
            entry.record.is_winner = False
            entry.client.receive_outcome(False)
            if abs(entry.record.current_bid - winning_bid) < self.bid_tolerance:
                if entry.record.prior_win_count > most_wins:
                    most_wins = entry.record.prior_win_count
                    winner = entry

        if winner is None:
            return ""

        if not product.mark_sold(winning_bid):
            logger.info(
                "broker.sale_already_recorded",
                broker=self.name,
                product_id=product.id,
                sell_price=product.sell_price,
            )
            return ""

        winner.record.is_winner = True
        winner.client.receive_outcome(True)

        commission = calculate_commission(winning_bid, winner.record.commission_percent)
        self.cash_accumulated += commission
        self.win_count += 1

        if self.registry is not None:
            self.registry.dispatch_remove(product)

        logger.info(
            "broker.settled",
            broker=self.name,
            product_id=product.id,
            winner=winner.record.client_name,
            winning_bid=winning_bid,
            commission_pct=winner.record.commission_percent,
            commission=commission,
        )

        return (
            f"{product.describe()} has been sold to "
            f"{winner.record.client_name} for {winning_bid} dollars."
        )

    def reset(self, product: Optional[Product] = None) -> None:
        """
        Blank the negotiation records after a settlement.

        Args:
            product: Only blank records for this product (all if None)
        """
        for entry in self.roster:
            if product is None or entry.record.demands(product):
                entry.record = NegotiationRecord.blank(entry.client.name)
                entry.client.receive_info(entry.record)

    def get_stats(self) -> dict:
        """Get broker statistics."""
        return {
            "broker_id": self.id,
            "name": self.name,
            "cash_accumulated": self.cash_accumulated,
            "win_count": self.win_count,
            "roster_size": len(self.roster),
        }

    def _entries_for(self, product: Product) -> list[RosterEntry]:
        return [entry for entry in self.roster if entry.record.demands(product)]
