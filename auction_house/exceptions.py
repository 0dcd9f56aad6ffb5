"""
Request-scoped errors raised by the auction house.

None of these are fatal to the house: the coordinator aborts only the
offending registration, and the registry and any running auction are left
untouched.
"""

from typing import Any, Optional


class AuctionHouseError(Exception):
    """Base error for the auction house."""

    default_message = "Auction house error"

    def __init__(self, message: Optional[str] = None, **context: Any):
        super().__init__(message or self.default_message)
        self.context = context


class UnknownEntityError(AuctionHouseError):
    """A product, client or subtype lookup missed."""

    default_message = "Unknown entity"


class DuplicateRequestError(AuctionHouseError):
    """The (client, product) pair is already pending with some broker."""

    default_message = "Duplicate request for this client and product"


class InvalidRequestError(AuctionHouseError):
    """The offered maximum is below the product's minimum price."""

    default_message = "Maximum bid is too small for this product"


class MalformedInputError(AuctionHouseError):
    """Seed data is missing a required field for its declared subtype."""

    default_message = "Malformed seed data"
