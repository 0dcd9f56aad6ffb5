"""Human-readable transcript of a finished auction."""

from .auction import AuctionOutcome


def render_transcript(outcome: AuctionOutcome) -> str:
    """
    Render one auction as indented text.

    Example output:

        Auction 1
            Auction for Water Lilies worth 100.0$:
                Round 0:
                    Bid 1: 120.5$
                    Bid 2: 80.0$
            Painting "Water Lilies" has been sold to Ana for 120.5 dollars.
    """
    product = outcome.product
    lines = [
        f"Auction {outcome.auction_number}",
        f"\tAuction for {product.name} worth {product.min_price}$:",
    ]

    for step, bids in enumerate(outcome.rounds):
        lines.append(f"\t\tRound {step}:")
        # Bids are numbered across the round, not per broker
        for number, bid in enumerate(bids, start=1):
            lines.append(f"\t\t\tBid {number}: {bid}$")

    if outcome.sold:
        lines.extend(f"\t{line}" for line in outcome.description.splitlines())
    else:
        lines.append(
            f"\t{product.describe()} was not sold! "
            f"Biggest bid: {outcome.final_bid}$, Min sell price: {product.min_price}$."
        )

    return "\n".join(lines)
