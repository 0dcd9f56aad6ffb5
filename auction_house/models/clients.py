"""
Client agents taking part in auctions.

Clients never talk to the coordinator during an auction. Their broker
pushes the current negotiation record (``receive_info``), asks for a bid,
and finally reports the outcome (``receive_outcome``). The subtype only
changes how aggressively a client bids, through ``bid_multiplier``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

from ..exceptions import UnknownEntityError
from .negotiation import NegotiationRecord

if TYPE_CHECKING:
    from ..coordinator import AuctionCoordinator


class ClientKind(str, Enum):
    """Legal form of a client."""
    NATURAL = "natural"
    LEGAL = "legal"


class CompanyType(str, Enum):
    """Company form of a legal person."""
    SRL = "SRL"
    SA = "SA"


@dataclass(eq=False)
class ClientAgent(ABC):
    """
    A bidder. Identity is the object itself; ``id`` is assigned by the
    auction house on enrolment.
    """

    kind: ClassVar[ClientKind]

    name: str
    address: str = ""
    id: Optional[int] = None
    participation_count: int = 0
    win_count: int = 0
    info: NegotiationRecord = field(default_factory=NegotiationRecord, repr=False)
    house: Optional["AuctionCoordinator"] = field(default=None, repr=False)

    @abstractmethod
    def bid_multiplier(self, as_of_year: int) -> float:
        """Factor applied to the raw bid for this kind of client."""

    def bid(
        self,
        record: NegotiationRecord,
        as_of_year: Optional[int] = None,
    ) -> tuple[float, int]:
        """
        Compute this round's bid.

        The raw bid is the auction maximum so far plus a tenth of both the
        previous bid and the affordable maximum. It is scaled by the
        client's multiplier and never exceeds the affordable maximum.

        Args:
            record: Negotiation record for the auctioned product
            as_of_year: Reference year for age-based scaling (default: today)

        Returns:
            Tuple of (bid rounded to 2 decimals, win count before this auction)
        """
        amount = (
            record.max_auction_bid_so_far
            + record.current_bid / 10
            + record.max_affordable_bid / 10
        )
        amount *= self.bid_multiplier(as_of_year or date.today().year)
        amount = min(amount, record.max_affordable_bid)
        return round(amount, 2), self.win_count

    def settle(self, won: bool) -> None:
        """Count an auction this client took part in."""
        self.participation_count += 1
        if won:
            self.win_count += 1

    def receive_info(self, record: NegotiationRecord) -> None:
        """Observe the broker's current negotiation record."""
        self.info = record

    def receive_outcome(self, won: bool) -> None:
        """Observe the end of an auction."""
        self.settle(won)

    def register(self, product_id: int, max_price: float):
        """
        Sign up for a product through the auction house.

        Browses the catalog in the background while the request is
        processed.

        Args:
            product_id: Id of the demanded product
            max_price: Most this client is willing to pay

        Returns:
            AuctionOutcome if this request completed an auction, else None

        Raises:
            UnknownEntityError: client not enrolled, or unknown product
            DuplicateRequestError: already pending for this product
            InvalidRequestError: max_price below the product's minimum
        """
        if self.house is None:
            raise UnknownEntityError(
                f"Client {self.name!r} is not enrolled with an auction house"
            )
        self.house.registry.dispatch_read()
        return self.house.register(self, product_id, max_price)


@dataclass(eq=False)
class NaturalPerson(ClientAgent):
    """Private bidder. Older clients bid more."""

    kind: ClassVar[ClientKind] = ClientKind.NATURAL

    birth_year: int = 1970

    def bid_multiplier(self, as_of_year: int) -> float:
        return as_of_year / self.birth_year


@dataclass(eq=False)
class LegalPerson(ClientAgent):
    """Company bidder. Better-capitalised companies bid more."""

    kind: ClassVar[ClientKind] = ClientKind.LEGAL

    company: CompanyType = CompanyType.SRL
    capital: float = 0.0

    def bid_multiplier(self, as_of_year: int) -> float:
        return 1 + self.capital / 10000


CLIENT_KINDS: dict[str, type[ClientAgent]] = {
    ClientKind.NATURAL.value: NaturalPerson,
    ClientKind.LEGAL.value: LegalPerson,
}
