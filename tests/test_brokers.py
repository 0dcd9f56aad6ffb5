"""Tests for the broker round protocol and settlement."""

import time

import pytest

from auction_house.brokers import BrokerAgent
from auction_house.exceptions import DuplicateRequestError
from auction_house.models.clients import LegalPerson, NaturalPerson
from auction_house.registry import ProductRegistry


@pytest.fixture
def registry(painting):
    registry = ProductRegistry()
    registry.add(painting)
    yield registry
    registry.close()


@pytest.fixture
def broker(registry):
    broker = BrokerAgent("Broker One", 5, 4.5, broker_id=0, as_of_year=2024)
    broker.registry = registry
    return broker


def run_rounds(broker, product, rounds):
    """Drive one broker through ``rounds`` rounds on its own."""
    broker.start_round(product)
    biggest = 0.0
    for _ in range(rounds):
        biggest = max(broker.collect_bids(product), default=0.0)
        broker.broadcast_max(biggest, product)
    return biggest


class TestRegister:
    """Roster bookkeeping."""

    def test_register_creates_record(self, broker, plain_company, painting):
        record = broker.register(plain_company, painting, 500.0)
        assert record.demanded_product is painting
        assert record.max_affordable_bid == 500.0
        assert record.client_name == "Plain Co"
        assert broker.has_request(plain_company, painting)
        assert broker.clients == [plain_company]

    def test_duplicate_rejected(self, broker, plain_company, painting):
        broker.register(plain_company, painting, 500.0)
        with pytest.raises(DuplicateRequestError):
            broker.register(plain_company, painting, 700.0)

    def test_same_client_other_product(self, broker, plain_company, painting, chair):
        broker.register(plain_company, painting, 500.0)
        broker.register(plain_company, chair, 500.0)
        assert len(broker.roster) == 2

    def test_blank_slot_is_reused(self, broker, plain_company, painting, chair):
        broker.register(plain_company, painting, 500.0)
        broker.reset(painting)
        broker.register(plain_company, chair, 400.0)
        assert len(broker.roster) == 1
        assert broker.roster[0].record.demands(chair)


class TestRounds:
    """Start, collect and broadcast."""

    def test_start_pushes_record(self, broker, plain_company, painting):
        record = broker.register(plain_company, painting, 500.0)
        broker.start_round(painting)
        assert plain_company.info is record

    def test_collect_only_matching(self, broker, plain_company, rich_company, painting, chair):
        broker.register(plain_company, painting, 500.0)
        broker.register(rich_company, chair, 900.0)
        assert broker.collect_bids(painting) == [50.0]

    def test_collect_stores_bid_and_wins(self, broker, plain_company, painting):
        plain_company.win_count = 2
        record = broker.register(plain_company, painting, 500.0)
        broker.collect_bids(painting)
        assert record.current_bid == 50.0
        assert record.prior_win_count == 2

    def test_broadcast_updates_record(self, broker, plain_company, painting):
        record = broker.register(plain_company, painting, 500.0)
        broker.broadcast_max(75.0, painting)
        assert record.max_auction_bid_so_far == 75.0
        assert plain_company.info.max_auction_bid_so_far == 75.0

    def test_no_clients_no_bids(self, broker, painting):
        assert broker.collect_bids(painting) == []

    def test_bids_grow_each_round(self, broker, plain_company, painting):
        """Three rounds: 100, then 100+10+100, then 210+21+100."""
        broker.register(plain_company, painting, 1000.0)
        assert run_rounds(broker, painting, 3) == 331.0


class TestSettle:
    """Winner selection, commission and sale."""

    def test_winner_gets_product(self, broker, plain_company, collector, painting, registry):
        broker.register(plain_company, painting, 1000.0)
        broker.register(collector, painting, 600.0)
        biggest = run_rounds(broker, painting, 3)

        description = broker.settle(biggest, painting)

        assert description == 'Painting "Water Lilies" has been sold to Plain Co for 331.0 dollars.'
        assert painting.sell_price == 331.0
        assert plain_company.win_count == 1
        assert plain_company.participation_count == 2
        assert collector.win_count == 0
        assert collector.participation_count == 1
        assert broker.win_count == 1
        # Legal newcomer pays 25%
        assert broker.cash_accumulated == pytest.approx(331.0 * 0.25)

    def test_winner_counted_as_participant_twice(self, broker, painting):
        """Everyone is settled as a loser first, then the winner as a winner."""
        high = LegalPerson(name="High", capital=0)
        low = LegalPerson(name="Low", capital=0)
        broker.register(high, painting, 1000.0)
        broker.register(low, painting, 500.0)
        biggest = run_rounds(broker, painting, 1)

        broker.settle(biggest, painting)

        assert (high.participation_count, high.win_count) == (2, 1)
        assert (low.participation_count, low.win_count) == (1, 0)

    def test_double_count_moves_commission_tier(self, broker, painting):
        """A natural person with 3 auctions behind it pays 15% after one win."""
        client = NaturalPerson(name="Ana", birth_year=2024, participation_count=3)
        broker.register(client, painting, 1000.0)
        broker.settle(run_rounds(broker, painting, 1), painting)

        assert client.participation_count == 5
        assert broker.commission.percent_for(client) == 15

    def test_commission_recorded_for_everyone(self, broker, plain_company, collector, painting):
        a = broker.register(plain_company, painting, 1000.0)
        b = broker.register(collector, painting, 600.0)
        biggest = run_rounds(broker, painting, 1)
        broker.settle(biggest, painting)
        assert a.commission_percent == 25
        assert b.commission_percent == 20
        assert a.is_winner and not b.is_winner

    def test_regular_client_commission(self, broker, plain_company, painting):
        plain_company.participation_count = 30
        broker.register(plain_company, painting, 1000.0)
        biggest = run_rounds(broker, painting, 1)
        broker.settle(biggest, painting)
        assert broker.cash_accumulated == pytest.approx(biggest * 0.10)

    def test_no_matching_bid(self, broker, plain_company, painting):
        """The winning bid belongs to another broker's client."""
        broker.register(plain_company, painting, 1000.0)
        run_rounds(broker, painting, 1)

        assert broker.settle(900.0, painting) == ""
        assert painting.sell_price == 0
        assert plain_company.participation_count == 1
        assert plain_company.win_count == 0
        assert broker.cash_accumulated == 0

    def test_tie_goes_to_most_prior_wins(self, broker, painting):
        novice = LegalPerson(name="Novice", capital=0)
        veteran = LegalPerson(name="Veteran", capital=0, win_count=4)
        broker.register(novice, painting, 1000.0)
        broker.register(veteran, painting, 1000.0)
        biggest = run_rounds(broker, painting, 2)

        description = broker.settle(biggest, painting)

        assert "Veteran" in description
        assert veteran.win_count == 5
        assert novice.win_count == 0

    def test_tie_with_equal_wins_goes_to_roster_order(self, broker, painting):
        first = LegalPerson(name="First", capital=0)
        second = LegalPerson(name="Second", capital=0)
        broker.register(first, painting, 1000.0)
        broker.register(second, painting, 1000.0)
        biggest = run_rounds(broker, painting, 1)

        assert "First" in broker.settle(biggest, painting)

    def test_already_sold_product(self, broker, plain_company, painting):
        """A second matching broker does not sell the product again."""
        broker.register(plain_company, painting, 1000.0)
        biggest = run_rounds(broker, painting, 1)
        painting.mark_sold(biggest)

        assert broker.settle(biggest, painting) == ""
        assert broker.win_count == 0
        assert plain_company.win_count == 0

    def test_sold_product_eventually_removed(self, broker, plain_company, painting, registry):
        broker.register(plain_company, painting, 1000.0)
        biggest = run_rounds(broker, painting, 1)
        broker.settle(biggest, painting)

        deadline = time.monotonic() + 2
        while painting in registry and time.monotonic() < deadline:
            time.sleep(0.01)
        assert painting not in registry


class TestReset:
    """Blanking records after settlement."""

    def test_reset_product(self, broker, plain_company, collector, painting, chair):
        broker.register(plain_company, painting, 500.0)
        broker.register(collector, chair, 500.0)

        broker.reset(painting)

        assert not broker.has_request(plain_company, painting)
        assert broker.has_request(collector, chair)
        assert plain_company.info.is_blank

    def test_reset_all(self, broker, plain_company, collector, painting, chair):
        broker.register(plain_company, painting, 500.0)
        broker.register(collector, chair, 500.0)

        broker.reset()

        assert all(entry.record.is_blank for entry in broker.roster)
        assert [entry.record.client_name for entry in broker.roster] == ["Plain Co", "Ana"]


def test_get_stats(broker):
    assert broker.get_stats() == {
        "broker_id": 0,
        "name": "Broker One",
        "cash_accumulated": 0.0,
        "win_count": 0,
        "roster_size": 0,
    }
