"""
test_unit_ledger.py - Unit tests for InMemoryUnitLedger

Tests:
- Sequential minting and the 64-bit id space
- Burn, transfer and ownership queries
- Per-unit and operator approvals
- Emitted UnitTransfer / Approval events
"""

import pytest

from dualledger import (
    InMemoryUnitLedger, UnitLedger, UnitTransfer, Approval, ApprovalForAll,
    ArithmeticOverflow, InvalidRecipient, NotAuthorized, UnitNotFound,
    MAX_UNIT_ID, ZERO_ADDRESS,
)


class TestMinting:

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryUnitLedger(), UnitLedger)

    def test_ids_are_sequential(self):
        units = InMemoryUnitLedger()
        assert units.mint_sequential("alice", 3) == 1
        assert units.mint_sequential("bob", 2) == 4
        assert units.total_minted() == 5
        assert units.balance_of_units("alice") == 3
        assert units.owner_of(5) == "bob"

    def test_custom_first_id(self):
        units = InMemoryUnitLedger(first_id=5)
        assert units.mint_sequential("alice", 2) == 5
        assert units.total_minted() == 2
        assert units.first_unit_id() == 5

    def test_mint_emits_events(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 2)
        assert units.events == [
            UnitTransfer(ZERO_ADDRESS, "alice", 1),
            UnitTransfer(ZERO_ADDRESS, "alice", 2),
        ]

    def test_mint_to_null_holder_raises(self):
        with pytest.raises(InvalidRecipient):
            InMemoryUnitLedger().mint_sequential(ZERO_ADDRESS, 1)

    def test_mint_zero_raises(self):
        with pytest.raises(ValueError):
            InMemoryUnitLedger().mint_sequential("alice", 0)

    def test_id_space_exhaustion_raises(self):
        units = InMemoryUnitLedger(first_id=MAX_UNIT_ID - 1)
        units.mint_sequential("alice", 2)
        with pytest.raises(ArithmeticOverflow):
            units.mint_sequential("alice", 1)


class TestBurnAndTransfer:

    def test_burn_removes_unit(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 2)
        units.burn(1)
        assert not units.exists(1)
        assert units.balance_of_units("alice") == 1
        assert units.total_minted() == 2
        assert units.events[-1] == UnitTransfer("alice", ZERO_ADDRESS, 1)

    def test_burned_id_not_found(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        units.burn(1)
        with pytest.raises(UnitNotFound):
            units.owner_of(1)
        with pytest.raises(UnitNotFound):
            units.burn(1)

    def test_burned_ids_never_reused(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        units.burn(1)
        assert units.mint_sequential("alice", 1) == 2

    def test_transfer_moves_ownership(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 2)
        units.transfer_unit("alice", "bob", 2)
        assert units.owner_of(2) == "bob"
        assert units.balance_of_units("alice") == 1
        assert units.balance_of_units("bob") == 1

    def test_transfer_by_non_owner_raises(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        with pytest.raises(NotAuthorized):
            units.transfer_unit("bob", "carol", 1)

    def test_transfer_to_null_raises(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        with pytest.raises(InvalidRecipient):
            units.transfer_unit("alice", ZERO_ADDRESS, 1)

    def test_owned_ids_in_range(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 5)
        units.transfer_unit("alice", "bob", 3)
        assert units.owned_ids_in_range("alice", 1, 5) == [1, 2, 4, 5]
        assert units.owned_ids_in_range("bob", 1, 5) == [3]

    def test_owned_ids_in_range_clipped_to_minted(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 2)
        assert units.owned_ids_in_range("alice", 0, MAX_UNIT_ID) == [1, 2]


class TestApprovals:

    def test_owner_approves_unit(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        units.approve("alice", "bob", 1)
        assert units.get_approved(1) == "bob"
        assert units.events[-1] == Approval("alice", "bob", 1)

    def test_stranger_cannot_approve(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        with pytest.raises(NotAuthorized):
            units.approve("mallory", "mallory", 1)

    def test_operator_can_approve(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        units.set_approval_for_all("alice", "op", True)
        units.approve("op", "bob", 1)
        assert units.get_approved(1) == "bob"
        assert units.events[-1] == Approval("alice", "bob", 1)

    def test_transfer_clears_approval(self):
        units = InMemoryUnitLedger()
        units.mint_sequential("alice", 1)
        units.approve("alice", "bob", 1)
        units.transfer_unit("alice", "carol", 1)
        assert units.get_approved(1) is None

    def test_operator_toggle(self):
        units = InMemoryUnitLedger()
        units.set_approval_for_all("alice", "op", True)
        assert units.is_approved_for_all("alice", "op")
        units.set_approval_for_all("alice", "op", False)
        assert not units.is_approved_for_all("alice", "op")
        assert units.events[-1] == ApprovalForAll("alice", "op", False)
