"""
unit_ledger.py - In-memory discrete-unit ledger

Reference implementation of the UnitLedger protocol. Ids are handed out
sequentially starting at FIRST_UNIT_ID and are never reused after a burn, so
total_minted() only ever grows.

Every ownership change is reported as a UnitTransfer event appended to the
event list handed in at construction. The token passes its own staging list,
which keeps unit events interleaved with fraction events in emission order.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Set, Tuple

from .core import (
    Holder, Event, UnitTransfer, Approval, ApprovalForAll,
    ZERO_ADDRESS, FIRST_UNIT_ID, MAX_UNIT_ID,
    ArithmeticOverflow, InvalidRecipient, NotAuthorized, UnitNotFound,
    require_holder,
)


class InMemoryUnitLedger:
    """
    Ownership-per-unit store with sequential minting.

    Thread Safety:
        Not thread-safe. The owning token serialises access.

    Example:
        units = InMemoryUnitLedger()
        first = units.mint_sequential("alice", 3)   # ids 1, 2, 3
        units.transfer_unit("alice", "bob", 2)
        units.owned_ids_in_range("alice", 1, 3)     # [1, 3]
    """

    def __init__(self, events: Optional[List[Event]] = None, first_id: int = FIRST_UNIT_ID):
        if first_id < 0 or first_id > MAX_UNIT_ID:
            raise ValueError(f"first_id out of range: {first_id}")
        self.events: List[Event] = events if events is not None else []
        self._first_id = first_id
        self._next_id = first_id
        self._owners: Dict[int, Holder] = {}
        self._balances: Dict[Holder, int] = {}
        self._approvals: Dict[int, Holder] = {}
        self._operators: Set[Tuple[Holder, Holder]] = set()

    # ========================================================================
    # QUERIES
    # ========================================================================

    def owner_of(self, unit_id: int) -> Holder:
        owner = self._owners.get(unit_id)
        if owner is None:
            raise UnitNotFound(f"Unit {unit_id} does not exist")
        return owner

    def exists(self, unit_id: int) -> bool:
        return unit_id in self._owners

    def owned_ids_in_range(self, owner: Holder, start: int, end: int) -> List[int]:
        """
        Return the ids in [start, end] owned by owner, ascending.

        The scan is clipped to the minted id window, so ranges reaching into
        never-minted territory cost nothing extra.
        """
        lo = max(start, self._first_id)
        hi = min(end, self._next_id - 1)
        return [i for i in range(lo, hi + 1) if self._owners.get(i) == owner]

    def balance_of_units(self, owner: Holder) -> int:
        return self._balances.get(owner, 0)

    def total_minted(self) -> int:
        return self._next_id - self._first_id

    def first_unit_id(self) -> int:
        return self._first_id

    def live_units(self) -> int:
        """Number of minted units not yet burned."""
        return len(self._owners)

    def all_owners(self) -> Dict[int, Holder]:
        """Copy of the id -> owner table."""
        return dict(self._owners)

    def get_approved(self, unit_id: int) -> Optional[Holder]:
        self.owner_of(unit_id)
        return self._approvals.get(unit_id)

    def is_approved_for_all(self, owner: Holder, operator: Holder) -> bool:
        return (owner, operator) in self._operators

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def mint_sequential(self, owner: Holder, count: int) -> int:
        """
        Assign the next count ids to owner.

        Returns:
            The first id of the block; the block is [first, first + count - 1].

        Raises:
            InvalidRecipient: If owner is the null holder
            ArithmeticOverflow: If the block would leave the 64-bit id space
        """
        require_holder(owner, "owner")
        if owner == ZERO_ADDRESS:
            raise InvalidRecipient("Cannot mint to the null holder")
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        first = self._next_id
        if first + count - 1 > MAX_UNIT_ID:
            raise ArithmeticOverflow(f"Minting {count} units from {first} exhausts the id space")
        for unit_id in range(first, first + count):
            self._owners[unit_id] = owner
            self.events.append(UnitTransfer(ZERO_ADDRESS, owner, unit_id))
        self._balances[owner] = self._balances.get(owner, 0) + count
        self._next_id = first + count
        return first

    def burn(self, unit_id: int) -> None:
        owner = self.owner_of(unit_id)
        del self._owners[unit_id]
        self._approvals.pop(unit_id, None)
        self._balances[owner] -= 1
        if not self._balances[owner]:
            del self._balances[owner]
        self.events.append(UnitTransfer(owner, ZERO_ADDRESS, unit_id))

    def transfer_unit(self, source: Holder, dest: Holder, unit_id: int) -> None:
        """
        Move a unit from source to dest.

        Only checks that source really owns the unit; whether the caller may
        move it is decided by the engine before this is called.

        Raises:
            UnitNotFound: If the unit does not exist
            NotAuthorized: If source does not own the unit
            InvalidRecipient: If dest is empty or the null holder
        """
        owner = self.owner_of(unit_id)
        if owner != source:
            raise NotAuthorized(f"{source} does not own unit {unit_id}")
        if not dest or dest == ZERO_ADDRESS:
            raise InvalidRecipient(f"Cannot transfer unit {unit_id} to {dest!r}")
        self._approvals.pop(unit_id, None)
        self._owners[unit_id] = dest
        self._balances[source] -= 1
        if not self._balances[source]:
            del self._balances[source]
        self._balances[dest] = self._balances.get(dest, 0) + 1
        self.events.append(UnitTransfer(source, dest, unit_id))

    def approve(self, owner: Holder, spender: Holder, unit_id: int) -> None:
        """
        Approve spender for one unit.

        owner must hold the unit or be an operator of whoever does.
        """
        holder = self.owner_of(unit_id)
        if owner != holder and not self.is_approved_for_all(holder, owner):
            raise NotAuthorized(f"{owner} may not approve unit {unit_id}")
        self._approvals[unit_id] = spender
        self.events.append(Approval(holder, spender, unit_id))

    def set_approval_for_all(self, owner: Holder, operator: Holder, approved: bool) -> None:
        if approved:
            self._operators.add((owner, operator))
        else:
            self._operators.discard((owner, operator))
        self.events.append(ApprovalForAll(owner, operator, approved))
