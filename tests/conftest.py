"""Shared pytest fixtures and configuration."""

import json

import pytest

from auction_house.auction import AuctionState
from auction_house.brokers import BrokerAgent
from auction_house.config import AuctionHouseSettings
from auction_house.coordinator import AuctionCoordinator
from auction_house.models.clients import CompanyType, LegalPerson, NaturalPerson
from auction_house.models.products import ColorType, Painting, Furniture


@pytest.fixture
def settings():
    """Deterministic settings: fixed broker assignment and reference year."""
    return AuctionHouseSettings(random_seed=7, current_year=2024)


@pytest.fixture
def house(settings):
    """Empty auction house."""
    house = AuctionCoordinator(settings=settings)
    yield house
    house.registry.close()


@pytest.fixture
def painting():
    """Sample painting."""
    return Painting(
        id=0,
        name="Water Lilies",
        min_price=100.0,
        year=1919,
        painter_name="Monet",
        colors=ColorType.OIL,
    )


@pytest.fixture
def chair():
    """Sample furniture."""
    return Furniture(
        id=1,
        name="Windsor Chair",
        min_price=300.0,
        year=1890,
        furniture_type="chair",
        material="oak",
    )


@pytest.fixture
def rich_company():
    """Legal person bidding three times its raw bid."""
    return LegalPerson(name="Acme", address="1 Main St", company=CompanyType.SA, capital=20000)


@pytest.fixture
def plain_company():
    """Legal person with a neutral multiplier."""
    return LegalPerson(name="Plain Co", address="2 Main St", company=CompanyType.SRL, capital=0)


@pytest.fixture
def collector():
    """Natural person born 1980."""
    return NaturalPerson(name="Ana", address="3 Elm St", birth_year=1980)


@pytest.fixture
def stocked_house(house, painting, chair):
    """House with two products, two brokers and an auction per product."""
    house.administrator.add_product(painting).join()
    house.administrator.add_product(chair).join()
    house.add_broker(BrokerAgent("Broker One", 5, 4.5))
    house.add_broker(BrokerAgent("Broker Two", 2, 3.0))
    house.add_auction(AuctionState(product_id=painting.id, max_rounds=1, required_participants=2))
    house.add_auction(AuctionState(product_id=chair.id, max_rounds=3, required_participants=2))
    return house


@pytest.fixture
def seed_data():
    """Seed document in the on-disk format."""
    return {
        "administrator": {"name": "Admin", "years_of_experience": 10, "rating": 5},
        "products": [
            {
                "product_type": "painting",
                "name": "Water Lilies",
                "min_price": 100,
                "year": 1919,
                "painter_name": "Monet",
                "color": "OIL",
            },
            {
                "product_type": "furniture",
                "name": "Windsor Chair",
                "min_price": 300,
                "year": 1890,
                "type": "chair",
                "material": "oak",
            },
            {
                "product_type": "jewelry",
                "name": "Signet Ring",
                "min_price": 50,
                "year": 1950,
                "material": "gold",
                "precious_stone": True,
            },
        ],
        "clients": [
            {
                "client_type": "legal",
                "name": "Acme",
                "address": "1 Main St",
                "company": "SA",
                "capital": 20000,
            },
            {
                "client_type": "natural",
                "name": "Ana",
                "address": "3 Elm St",
                "birth_date": "7.03.1980",
            },
            {
                "client_type": "legal",
                "name": "Plain Co",
                "address": "2 Main St",
                "company": "SRL",
                "capital": 0,
            },
        ],
        "brokers": [
            {"name": "Broker One", "years_of_experience": 5, "rating": 4.5},
            {"name": "Broker Two", "years_of_experience": 2, "rating": 3},
        ],
        "auctions": [
            {"product_id": 0, "no_max_steps": 1, "no_participants": 2},
            {"product_id": 1, "no_max_steps": 3, "no_participants": 2},
        ],
    }


@pytest.fixture
def seed_file(tmp_path, seed_data):
    """Seed document written to disk."""
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(seed_data))
    return path


@pytest.fixture
def requests_file(tmp_path):
    """Request stream: two auctions complete, two requests are rejected."""
    path = tmp_path / "requests.csv"
    path.write_text(
        "client_id,product_id,max_price\n"
        "0,0,500$\n"
        "0,0,600$\n"     # duplicate of the previous request
        "1,0,120$\n"
        "2,2,10$\n"      # below minimum price
        "1,2,80$\n"      # accepted, no auction scheduled
        "0,1,1000$\n"
        "2,1,600$\n"
    )
    return path
