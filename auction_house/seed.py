"""
Seed data loading.

Reads an auction house description from JSON:

    {
      "products":  [{"product_type": "painting", "name": ..., "min_price": ...,
                     "year": ..., "painter_name": ..., "color": "OIL"}, ...],
      "clients":   [{"client_type": "natural", "name": ..., "address": ...,
                     "birth_date": "7.03.1985"}, ...],
      "brokers":   [{"name": ..., "years_of_experience": ..., "rating": ...}],
      "administrator": {"name": ..., "years_of_experience": ..., "rating": ...},
      "auctions":  [{"product_id": 0, "no_max_steps": 3, "no_participants": 2}]
    }

and registration requests from CSV (``client_id,product_id,max_price``).
"""

import csv
import json
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .auction import AuctionState
from .brokers import BrokerAgent
from .config import AuctionHouseSettings
from .coordinator import AuctionCoordinator
from .exceptions import MalformedInputError, UnknownEntityError
from .models.clients import ClientAgent, CompanyType, LegalPerson, NaturalPerson
from .models.products import (
    Antique,
    Clothing,
    ColorType,
    Furniture,
    Jewelry,
    Painting,
    Product,
)

logger = structlog.get_logger()

BIRTH_DATE_FORMAT = "%d.%m.%Y"


# -------------------------------------------------------------------------
# Products
# -------------------------------------------------------------------------


class ProductSeed(BaseModel, ABC):
    """Fields shared by every product kind."""
    product_type: str
    name: str
    min_price: float
    year: int

    def base_fields(self, product_id: int) -> dict[str, Any]:
        return {
            "id": product_id,
            "name": self.name,
            "min_price": self.min_price,
            "year": self.year,
        }

    @abstractmethod
    def to_product(self, product_id: int) -> Product:
        """Build the catalog product for this entry."""


class PaintingSeed(ProductSeed):
    painter_name: str
    color: ColorType

    def to_product(self, product_id: int) -> Product:
        return Painting(
            **self.base_fields(product_id),
            painter_name=self.painter_name,
            colors=self.color,
        )


class FurnitureSeed(ProductSeed):
    type: str
    material: str

    def to_product(self, product_id: int) -> Product:
        return Furniture(
            **self.base_fields(product_id),
            furniture_type=self.type,
            material=self.material,
        )


class JewelrySeed(ProductSeed):
    material: str
    precious_stone: bool

    def to_product(self, product_id: int) -> Product:
        return Jewelry(
            **self.base_fields(product_id),
            material=self.material,
            precious_stone=self.precious_stone,
        )


class AntiqueSeed(ProductSeed):
    age: int
    origin: str

    def to_product(self, product_id: int) -> Product:
        return Antique(**self.base_fields(product_id), age=self.age, origin=self.origin)


class ClothingSeed(ProductSeed):
    designer: str
    material: str

    def to_product(self, product_id: int) -> Product:
        return Clothing(
            **self.base_fields(product_id),
            designer=self.designer,
            material=self.material,
        )


PRODUCT_SEEDS: dict[str, type[ProductSeed]] = {
    "painting": PaintingSeed,
    "furniture": FurnitureSeed,
    "jewelry": JewelrySeed,
    "antique": AntiqueSeed,
    "clothing": ClothingSeed,
}


# -------------------------------------------------------------------------
# Clients and staff
# -------------------------------------------------------------------------


class ClientSeed(BaseModel, ABC):
    client_type: str
    name: str
    address: str = ""

    @abstractmethod
    def to_client(self) -> ClientAgent:
        """Build the client for this entry."""


class NaturalPersonSeed(ClientSeed):
    birth_date: str

    @field_validator("birth_date")
    @classmethod
    def check_birth_date(cls, value: str) -> str:
        datetime.strptime(value, BIRTH_DATE_FORMAT)
        return value

    def to_client(self) -> ClientAgent:
        born = datetime.strptime(self.birth_date, BIRTH_DATE_FORMAT)
        return NaturalPerson(name=self.name, address=self.address, birth_year=born.year)


class LegalPersonSeed(ClientSeed):
    company: CompanyType
    capital: float

    def to_client(self) -> ClientAgent:
        return LegalPerson(
            name=self.name,
            address=self.address,
            company=self.company,
            capital=self.capital,
        )


CLIENT_SEEDS: dict[str, type[ClientSeed]] = {
    "natural": NaturalPersonSeed,
    "legal": LegalPersonSeed,
}


class EmployeeSeed(BaseModel):
    name: str
    years_of_experience: int = 0
    rating: float = 0.0


class AuctionSeed(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int
    max_rounds: int = Field(alias="no_max_steps", ge=0)
    required_participants: int = Field(alias="no_participants", ge=1)


class SeedDocument(BaseModel):
    """
    Top-level shape of a seed file.

    Product and client entries stay raw here; they are dispatched on their
    type tag by ``build_product`` and ``build_client``.
    """
    administrator: Optional[EmployeeSeed] = None
    products: list[Any] = []
    clients: list[Any] = []
    brokers: list[EmployeeSeed] = []
    auctions: list[AuctionSeed] = []


class RegistrationRequest(BaseModel):
    """One line of the request stream."""
    client_id: int
    product_id: int
    max_price: float

    @field_validator("max_price", mode="before")
    @classmethod
    def strip_currency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().rstrip("$").strip()
        return value


# -------------------------------------------------------------------------
# Builders
# -------------------------------------------------------------------------


def _validate(model: type[BaseModel], data: Any, what: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid {what}: {e}") from e


def _select(table: dict[str, type[BaseModel]], data: Any, tag: str, what: str):
    if not isinstance(data, dict) or tag not in data:
        raise MalformedInputError(f"{what} entry without {tag!r}: {data!r}")
    if not isinstance(data[tag], str):
        raise MalformedInputError(f"{what} {tag!r} must be a string: {data[tag]!r}")
    seed_cls = table.get(data[tag])
    if seed_cls is None:
        raise UnknownEntityError(f"Unknown {what} type {data[tag]!r}")
    return seed_cls


def build_product(data: dict, product_id: int) -> Product:
    """
    Build a product from its seed entry.

    Raises:
        UnknownEntityError: unknown ``product_type``
        MalformedInputError: missing or ill-typed field
    """
    seed_cls = _select(PRODUCT_SEEDS, data, "product_type", "product")
    return _validate(seed_cls, data, "product").to_product(product_id)


def build_client(data: dict) -> ClientAgent:
    """
    Build a client from its seed entry.

    Raises:
        UnknownEntityError: unknown ``client_type``
        MalformedInputError: missing or ill-typed field
    """
    seed_cls = _select(CLIENT_SEEDS, data, "client_type", "client")
    return _validate(seed_cls, data, "client").to_client()


def populate_house(house: AuctionCoordinator, data: dict) -> AuctionCoordinator:
    """
    Fill an auction house from an already parsed seed document.

    Products are inserted by detached worker threads; they are joined
    before auctions are scheduled so that requests can resolve them.
    """
    document = _validate(SeedDocument, data, "seed document")

    admin = house.administrator
    if document.administrator is not None:
        admin.name = document.administrator.name
        admin.years_of_experience = document.administrator.years_of_experience
        admin.rating = document.administrator.rating

    products = [
        build_product(entry, product_id)
        for product_id, entry in enumerate(document.products)
    ]
    workers = [admin.add_product(product) for product in products]

    for entry in document.clients:
        admin.add_client(build_client(entry))

    for employee in document.brokers:
        admin.add_broker(
            BrokerAgent(employee.name, employee.years_of_experience, employee.rating)
        )

    for worker in workers:
        worker.join()

    for seed in document.auctions:
        admin.add_auction(
            AuctionState(
                product_id=seed.product_id,
                max_rounds=seed.max_rounds,
                required_participants=seed.required_participants,
            )
        )

    logger.info(
        "seed.loaded",
        products=len(products),
        clients=len(house.clients),
        brokers=len(house.brokers),
        auctions=len(house.auctions),
    )
    return house


def load_house(
    path: Union[str, Path],
    settings: Optional[AuctionHouseSettings] = None,
) -> AuctionCoordinator:
    """
    Build an auction house from a JSON seed file.

    Raises:
        MalformedInputError: unreadable JSON or invalid entries
        UnknownEntityError: unknown product or client type
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Bad JSON in {path}: {e}") from e

    return populate_house(AuctionCoordinator(settings=settings), data)


def load_requests(path: Union[str, Path]) -> list[RegistrationRequest]:
    """
    Read the registration request stream from CSV.

    The first row is a header; a trailing ``$`` on prices is accepted.
    """
    requests = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        for row in reader:
            if not row or not any(cell.strip() for cell in row):
                continue
            if len(row) < 3:
                raise MalformedInputError(f"Request row needs 3 columns: {row!r}")
            requests.append(
                _validate(
                    RegistrationRequest,
                    {
                        "client_id": row[0].strip(),
                        "product_id": row[1].strip(),
                        "max_price": row[2],
                    },
                    "request",
                )
            )
    return requests
