"""
Request stream replay.

Feeds registration requests into an auction house one at a time. Each
request stands alone: a rejected request is logged and counted, and the
next one proceeds.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

import structlog

from .auction import AuctionOutcome
from .coordinator import AuctionCoordinator
from .exceptions import AuctionHouseError, UnknownEntityError
from .seed import RegistrationRequest

logger = structlog.get_logger()


@dataclass
class ReplaySummary:
    """What happened to a request stream."""
    accepted: int = 0
    rejected: Counter = field(default_factory=Counter)  # error class name -> count
    outcomes: list[AuctionOutcome] = field(default_factory=list)

    @property
    def total_rejected(self) -> int:
        return sum(self.rejected.values())


def replay(
    house: AuctionCoordinator,
    requests: Iterable[RegistrationRequest],
) -> ReplaySummary:
    """
    Submit every request to the house in order.

    Args:
        house: Seeded auction house
        requests: Requests in arrival order

    Returns:
        ReplaySummary with counts and the outcomes of completed auctions
    """
    summary = ReplaySummary()

    for request in requests:
        try:
            if not 0 <= request.client_id < len(house.clients):
                raise UnknownEntityError(
                    f"Unknown client {request.client_id}", client_id=request.client_id
                )
            client = house.clients[request.client_id]
            outcome = client.register(request.product_id, request.max_price)
        except AuctionHouseError as e:
            summary.rejected[type(e).__name__] += 1
            logger.warning(
                "replay.request_rejected",
                client_id=request.client_id,
                product_id=request.product_id,
                max_price=request.max_price,
                error=type(e).__name__,
                reason=str(e),
            )
            continue

        summary.accepted += 1
        if outcome is not None:
            summary.outcomes.append(outcome)

    logger.info(
        "replay.completed",
        accepted=summary.accepted,
        rejected=summary.total_rejected,
        auctions=len(summary.outcomes),
    )
    return summary
