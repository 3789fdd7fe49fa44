"""
transfer_engine.py - Keep units in step with fraction balances

The engine moves fractions and then mints or burns units so that every
non-whitelisted holder ends up owning exactly floor(balance / SCALE) units.

    fractional transfer:
        units_to_burn = floor(before_from / SCALE) - floor(after_from / SCALE)
        units_to_mint = floor(after_to / SCALE)   - floor(before_to / SCALE)

Burns go through sequential_burn(); mints take the next sequential ids from
the unit ledger and are recorded as one new Range for the receiver.

All state lives in a Books instance. The engine mutates it freely and never
undoes anything; atomicity is provided by the caller (DualToken), which
snapshots the Books before each operation and restores it on failure.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List

from .core import (
    Holder, Range, Event, FractionTransfer, UnitLedger,
    ZERO_ADDRESS,
    InsufficientBalance, InvalidRecipient, NotAuthorized, RangeInvariantViolation,
    checked_mul, require_amount, require_holder,
)
from .fraction_ledger import FractionLedger
from .range_set import RangeSet
from .sequential_burn import sequential_burn
from .unit_ledger import InMemoryUnitLedger
from .whitelist import WhitelistRegistry


@dataclass
class Books:
    """
    Everything a token mutates, in one object.

    events is shared with the unit ledger so unit and fraction events land
    in one list in emission order. Deep-copying a Books keeps that sharing.
    """
    scale: int
    fractions: FractionLedger = field(default_factory=FractionLedger)
    whitelist: WhitelistRegistry = field(default_factory=WhitelistRegistry)
    ranges: Dict[Holder, RangeSet] = field(default_factory=dict)
    events: List[Event] = field(default_factory=list)
    units: UnitLedger = None

    def __post_init__(self):
        if self.units is None:
            self.units = InMemoryUnitLedger(events=self.events)

    def ranges_for(self, holder: Holder) -> RangeSet:
        range_set = self.ranges.get(holder)
        if range_set is None:
            range_set = self.ranges[holder] = RangeSet()
        return range_set

    def prune(self, holder: Holder) -> None:
        """Forget holder's RangeSet once it covers nothing."""
        range_set = self.ranges.get(holder)
        if range_set is not None and not range_set:
            del self.ranges[holder]


def _require_recipient(dest: Holder) -> None:
    require_holder(dest, "dest")
    if dest == ZERO_ADDRESS:
        raise InvalidRecipient("Cannot send to the null holder")


class TransferEngine:
    """Drives fraction, unit and range updates over a Books instance."""

    def __init__(self, books: Books):
        self.books = books

    @property
    def scale(self) -> int:
        return self.books.scale

    def mint_units(self, holder: Holder, count: int) -> Range:
        """Mint count fresh ids to holder and record them as one new range."""
        first = self.books.units.mint_sequential(holder, count)
        block = Range(first, first + count - 1)
        self.books.ranges_for(holder).insert(block)
        return block

    def burn_units(self, holder: Holder, count: int) -> List[int]:
        burned = sequential_burn(self.books.units, self.books.ranges_for(holder), holder, count)
        self.books.prune(holder)
        return burned

    def transfer(self, source: Holder, dest: Holder, amount: int) -> None:
        """
        Move amount fractions from source to dest and resynchronise units.

        Raises:
            InsufficientBalance: If source holds fewer than amount fractions,
                or its ranges cannot supply the units that must be burned
            InvalidRecipient: If dest is empty or the null holder
        """
        require_holder(source, "source")
        _require_recipient(dest)
        require_amount(amount)
        books = self.books
        scale = self.scale

        before_from = books.fractions.balance_of(source)
        before_to = books.fractions.balance_of(dest)
        if amount > before_from:
            raise InsufficientBalance(f"{source}: balance {before_from} < {amount}")

        books.fractions.move(source, dest, amount)
        after_from = books.fractions.balance_of(source)
        after_to = books.fractions.balance_of(dest)

        if not books.whitelist.is_whitelisted(source):
            units_to_burn = before_from // scale - after_from // scale
            if units_to_burn > 0:
                self.burn_units(source, units_to_burn)

        if not books.whitelist.is_whitelisted(dest):
            units_to_mint = after_to // scale - before_to // scale
            if units_to_mint > 0:
                self.mint_units(dest, units_to_mint)

        books.events.append(FractionTransfer(source, dest, amount))

    def transfer_unit(self, source: Holder, dest: Holder, unit_id: int) -> None:
        """
        Move one unit and the SCALE fractions backing it.

        The id is cut out of source's ranges and given to dest as a
        one-id range. Whitelisted holders are tracked the same way, since
        ranges index ownership and must cover every live unit.

        Raises:
            UnitNotFound: If unit_id is not live
            NotAuthorized: If source does not own unit_id
            InsufficientBalance: If source holds fewer than SCALE fractions
            RangeInvariantViolation: If source's ranges do not cover unit_id
        """
        require_holder(source, "source")
        _require_recipient(dest)
        books = self.books

        if books.units.owner_of(unit_id) != source:
            raise NotAuthorized(f"{source} does not own unit {unit_id}")

        source_ranges = books.ranges_for(source)
        if not source_ranges.contains(unit_id):
            raise RangeInvariantViolation(
                f"Unit {unit_id} owned by {source} is missing from its ranges"
            )
        balance = books.fractions.balance_of(source)
        if balance < self.scale:
            raise InsufficientBalance(
                f"{source}: balance {balance} cannot back unit {unit_id}"
            )

        books.units.transfer_unit(source, dest, unit_id)
        source_ranges.remove_matching(unit_id)
        books.prune(source)
        books.ranges_for(dest).insert(Range(unit_id, unit_id))
        books.fractions.move(source, dest, self.scale)
        books.events.append(FractionTransfer(source, dest, self.scale))

    def issue(self, dest: Holder, units: int) -> None:
        """
        Create units new units' worth of supply for dest.

        dest is credited units * SCALE fractions; unless whitelisted it is
        also minted the matching ids as one range.
        """
        _require_recipient(dest)
        require_amount(units, "units")
        amount = checked_mul(units, self.scale)
        books = self.books
        before = books.fractions.balance_of(dest)
        books.fractions.credit(dest, amount)
        if not books.whitelist.is_whitelisted(dest):
            to_mint = books.fractions.balance_of(dest) // self.scale - before // self.scale
            if to_mint > 0:
                self.mint_units(dest, to_mint)
        books.events.append(FractionTransfer(ZERO_ADDRESS, dest, amount))
