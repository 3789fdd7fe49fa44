"""
test_transfer_engine.py - Unit tests for TransferEngine over raw Books

Tests:
- Fractional transfer: burn / mint thresholds, remainders, whitelisting
- Unit transfer: range split and one-id receiver range
- Issuance
"""

import pytest

from dualledger import (
    Books, TransferEngine, Range, FractionTransfer,
    InsufficientBalance, InvalidRecipient, NotAuthorized, RangeInvariantViolation,
    ZERO_ADDRESS,
)

from tests.helpers import SCALE


@pytest.fixture
def books():
    return Books(scale=SCALE)


@pytest.fixture
def engine(books):
    engine = TransferEngine(books)
    engine.issue("alice", 5)  # ids 1..5
    return engine


class TestFractionalTransfer:

    def test_sub_unit_transfer_burns_one(self, engine, books):
        engine.transfer("alice", "bob", SCALE // 2)
        assert books.fractions.balance_of("alice") == 4 * SCALE + SCALE // 2
        assert books.units.balance_of_units("alice") == 4
        assert books.units.balance_of_units("bob") == 0
        assert books.ranges["alice"].ranges() == [Range(2, 5)]

    def test_whole_units_mint_one_range(self, engine, books):
        engine.transfer("alice", "bob", 3 * SCALE)
        assert books.ranges["bob"].ranges() == [Range(6, 8)]
        assert books.ranges["alice"].ranges() == [Range(4, 5)]

    def test_remainders_accumulate_into_a_unit(self, engine, books):
        engine.transfer("alice", "bob", SCALE // 2)
        engine.transfer("alice", "bob", SCALE // 2)
        assert books.fractions.balance_of("bob") == SCALE
        assert books.units.balance_of_units("bob") == 1
        assert books.units.balance_of_units("alice") == 4

    def test_receiver_remainder_crosses_threshold(self, engine, books):
        engine.transfer("alice", "bob", SCALE * 3 // 4)
        assert books.units.balance_of_units("bob") == 0
        engine.transfer("alice", "bob", SCALE // 2)
        assert books.fractions.balance_of("bob") == SCALE + SCALE // 4
        assert books.units.balance_of_units("bob") == 1

    def test_insufficient_balance(self, engine):
        with pytest.raises(InsufficientBalance):
            engine.transfer("alice", "bob", 5 * SCALE + 1)

    def test_to_null_holder_rejected(self, engine):
        with pytest.raises(InvalidRecipient):
            engine.transfer("alice", ZERO_ADDRESS, 1)

    def test_self_transfer_touches_nothing(self, engine, books):
        before = books.ranges["alice"].ranges()
        engine.transfer("alice", "alice", 3 * SCALE)
        assert books.fractions.balance_of("alice") == 5 * SCALE
        assert books.ranges["alice"].ranges() == before
        assert books.units.total_minted() == 5

    def test_event_emitted_last(self, engine, books):
        engine.transfer("alice", "bob", SCALE)
        assert books.events[-1] == FractionTransfer("alice", "bob", SCALE)

    def test_drained_holder_range_set_dropped(self, engine, books):
        engine.transfer("alice", "bob", 5 * SCALE)
        assert "alice" not in books.ranges
        assert books.ranges["bob"].ranges() == [Range(6, 10)]

    def test_zero_amount(self, engine, books):
        engine.transfer("alice", "bob", 0)
        assert books.fractions.balance_of("alice") == 5 * SCALE
        assert books.events[-1] == FractionTransfer("alice", "bob", 0)


class TestWhitelistedTransfer:

    def test_whitelisted_sender_burns_nothing(self, engine, books):
        books.whitelist.set_whitelist("alice", True)
        engine.transfer("alice", "bob", 2 * SCALE)
        assert books.units.balance_of_units("alice") == 5
        assert books.units.balance_of_units("bob") == 2

    def test_whitelisted_receiver_mints_nothing(self, engine, books):
        books.whitelist.set_whitelist("pool", True)
        engine.transfer("alice", "pool", 2 * SCALE)
        assert books.units.balance_of_units("pool") == 0
        assert books.units.balance_of_units("alice") == 3
        assert books.units.total_minted() == 5


class TestUnitTransfer:

    def test_interior_unit_splits_sender_range(self, engine, books):
        engine.transfer_unit("alice", "bob", 3)
        assert books.ranges["alice"].ranges() == [Range(1, 2), Range(4, 5)]
        assert books.ranges["bob"].ranges() == [Range(3, 3)]
        assert books.fractions.balance_of("bob") == SCALE
        assert books.units.owner_of(3) == "bob"

    def test_last_unit_sent_drops_range_set(self, books):
        engine = TransferEngine(books)
        engine.issue("alice", 1)
        engine.transfer_unit("alice", "bob", 1)
        assert "alice" not in books.ranges
        assert books.ranges["bob"].ranges() == [Range(1, 1)]

    def test_unit_transfer_event_order(self, engine, books):
        engine.transfer_unit("alice", "bob", 1)
        assert books.events[-1] == FractionTransfer("alice", "bob", SCALE)

    def test_not_owner_rejected(self, engine):
        with pytest.raises(NotAuthorized):
            engine.transfer_unit("bob", "carol", 1)

    def test_missing_from_ranges_is_invariant_violation(self, engine, books):
        books.ranges["alice"].remove_matching(2)
        with pytest.raises(RangeInvariantViolation):
            engine.transfer_unit("alice", "bob", 2)

    def test_unbacked_unit_rejected(self, engine, books):
        books.whitelist.set_whitelist("alice", True)
        engine.transfer("alice", "bob", 4 * SCALE + SCALE // 2)
        # alice keeps 5 units but only half a unit of fractions
        with pytest.raises(InsufficientBalance):
            engine.transfer_unit("alice", "carol", 1)


class TestIssue:

    def test_issue_mints_block(self, books):
        engine = TransferEngine(books)
        engine.issue("alice", 3)
        assert books.fractions.total() == 3 * SCALE
        assert books.ranges["alice"].ranges() == [Range(1, 3)]
        assert books.events[-1] == FractionTransfer(ZERO_ADDRESS, "alice", 3 * SCALE)

    def test_issue_to_whitelisted_mints_nothing(self, books):
        books.whitelist.set_whitelist("pool", True)
        TransferEngine(books).issue("pool", 3)
        assert books.units.total_minted() == 0
        assert books.fractions.balance_of("pool") == 3 * SCALE
