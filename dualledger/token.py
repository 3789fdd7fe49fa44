"""
token.py - Stateful dual-representation token

DualToken is the public face of the engine and the only object callers
mutate. Each public operation:

    1. takes the token lock (one operation at a time)
    2. snapshots the Books
    3. routes through the dispatcher / TransferEngine
    4. on success, appends an OperationRecord to the audit log
       on LedgerError, restores the snapshot and re-raises

so an operation is either applied in full or leaves no trace, events
included.

Caller identity is explicit: every mutating method takes the acting holder
as its first argument.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple
import copy
import threading

from .core import (
    # Types
    Holder, Range, Event, Operand, OperandKind, OperationRecord, Approval, ApprovalForAll,
    UnitLedger,
    # Constants
    DEFAULT_DECIMALS, MAX_UINT256, ZERO_ADDRESS,
    # Exceptions
    LedgerError, NotAuthorized, UnitNotFound,
    # Helpers
    require_holder,
)
from .dispatch import resolve_operand
from .transfer_engine import Books, TransferEngine


class DualToken:
    """
    Token whose value is held both as numbered units and as fractions.

    1 unit = SCALE = 10 ** decimals fractions. For every non-whitelisted
    holder, after every operation:

        units_of(h) == balance_of(h) // SCALE

    Thread Safety:
        Operations are serialised by an internal re-entrant lock.

    Example:
        token = DualToken("Azukira", "AKA", owner="deployer", verbose=False)
        token.issue("deployer", "alice", 2)            # alice: units [1, 2]
        token.transfer("alice", "bob", token.SCALE // 2)
        token.owned_units("alice")                     # [2]
        token.balance_of("bob")                        # SCALE // 2
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        owner: Holder,
        decimals: int = DEFAULT_DECIMALS,
        verbose: bool = True,
        units: Optional[UnitLedger] = None,
    ):
        """
        Create a token.

        Args:
            name: Token name
            symbol: Token symbol
            owner: Administrator allowed to issue supply and edit the whitelist
            decimals: Fraction digits per unit; SCALE = 10 ** decimals
            verbose: Print applied and rejected operations (default: True)
            units: Unit ledger to drive (default: a fresh InMemoryUnitLedger)
        """
        require_holder(owner, "owner")
        if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
            raise ValueError(f"decimals must be a non-negative int, got {decimals!r}")
        if 10 ** decimals > MAX_UINT256:
            raise ValueError(f"decimals {decimals} too large")
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.SCALE = 10 ** decimals
        self.owner = owner
        self.verbose = verbose
        self.operation_log: List[OperationRecord] = []
        self._next_sequence = 0
        self._lock = threading.RLock()
        if units is not None:
            self._books = Books(scale=self.SCALE, units=units)
            events = getattr(units, "events", None)
            if isinstance(events, list):
                self._books.events = events
        else:
            self._books = Books(scale=self.SCALE)

    # ========================================================================
    # READ-ONLY VIEW
    # ========================================================================

    @property
    def units(self) -> UnitLedger:
        """The unit ledger currently backing this token."""
        return self._books.units

    def balance_of(self, holder: Holder) -> int:
        """Fraction balance of holder."""
        return self._books.fractions.balance_of(holder)

    def units_of(self, holder: Holder) -> int:
        """Number of live units owned by holder."""
        return self._books.units.balance_of_units(holder)

    def ranges_of(self, holder: Holder) -> List[Range]:
        """holder's ranges in stored order."""
        range_set = self._books.ranges.get(holder)
        return range_set.ranges() if range_set else []

    def owned_units(self, holder: Holder) -> List[int]:
        """Ids owned by holder, ascending."""
        range_set = self._books.ranges.get(holder)
        return sorted(range_set.iter_ids()) if range_set else []

    def owner_of(self, unit_id: int) -> Holder:
        return self._books.units.owner_of(unit_id)

    def allowance(self, owner: Holder, spender: Holder) -> int:
        return self._books.fractions.allowance(owner, spender)

    def total_supply(self) -> int:
        """Total fractions in existence (issued units * SCALE)."""
        return self._books.fractions.total()

    def total_minted(self) -> int:
        """Number of unit ids ever minted, burned ones included."""
        return self._books.units.total_minted()

    def is_whitelisted(self, holder: Holder) -> bool:
        return self._books.whitelist.is_whitelisted(holder)

    def holders(self) -> Dict[Holder, int]:
        """All holders with a non-zero fraction balance."""
        return self._books.fractions.holders()

    @property
    def event_log(self) -> List[Event]:
        """Every event emitted by applied operations, in order."""
        return list(self._books.events)

    # ========================================================================
    # ATOMIC EXECUTION
    # ========================================================================

    @contextmanager
    def _atomic(self, operation: str, args: Tuple[Any, ...]) -> Iterator[Books]:
        with self._lock:
            saved = copy.deepcopy(self._books)
            events_before = len(self._books.events)
            try:
                yield self._books
            except LedgerError as e:
                self._books = saved
                if self.verbose:
                    print(f"✗ REJECTED: {operation}{args!r}: {type(e).__name__}: {e}")
                raise
            except BaseException:
                self._books = saved
                raise
            record = OperationRecord(
                sequence_number=self._next_sequence,
                operation=operation,
                args=args,
                events=tuple(self._books.events[events_before:]),
            )
            self._next_sequence += 1
            self.operation_log.append(record)
            if self.verbose:
                self._print_record(record)

    def _print_record(self, record: OperationRecord) -> None:
        print(f"✓ APPLIED: {record!r}")
        for event in record.events:
            print(f"    {event!r}")

    def _require_owner(self, caller: Holder, operation: str) -> None:
        if caller != self.owner:
            raise NotAuthorized(f"{operation}: {caller} is not the token owner")

    def _is_unit_operator(self, spender: Holder, source: Holder, unit_id: int) -> bool:
        units = self._books.units
        return (
            spender == source
            or units.get_approved(unit_id) == spender
            or units.is_approved_for_all(source, spender)
        )

    # ========================================================================
    # HOLDER OPERATIONS (Mutating)
    # ========================================================================

    def transfer(self, sender: Holder, to: Holder, amount: int) -> None:
        """
        Move amount fractions from sender to to.

        Raises:
            InsufficientBalance: If sender holds fewer than amount fractions
            InvalidRecipient: If to is empty or the null holder
        """
        with self._atomic("transfer", (sender, to, amount)) as books:
            TransferEngine(books).transfer(sender, to, amount)

    def transfer_unit(self, sender: Holder, to: Holder, unit_id: int) -> None:
        """
        Move one of sender's own units, together with SCALE fractions.

        Raises:
            UnitNotFound: If unit_id is not live
            NotAuthorized: If sender does not own unit_id
            InsufficientBalance: If sender holds fewer than SCALE fractions
        """
        with self._atomic("transfer_unit", (sender, to, unit_id)) as books:
            TransferEngine(books).transfer_unit(sender, to, unit_id)

    def approve(self, owner: Holder, spender: Holder, amount_or_id: Operand) -> None:
        """
        Approve spender for a unit id or a fraction amount.

        A bare int inside the minted id window is taken as a unit id;
        anything else as a fraction allowance. UnitId / FractionAmount
        operands are taken at face value.

        Raises:
            UnitNotFound: Unit-style operand naming a burned id
            NotAuthorized: Unit-style and owner neither holds nor operates the unit
        """
        require_holder(owner, "owner")
        require_holder(spender, "spender")
        with self._atomic("approve", (owner, spender, amount_or_id)) as books:
            kind, value = resolve_operand(books.units, amount_or_id)
            if kind is OperandKind.UNIT:
                books.units.approve(owner, spender, value)
                # Ledgers without a shared event list emit nothing themselves
                if getattr(books.units, "events", None) is not books.events:
                    books.events.append(Approval(books.units.owner_of(value), spender, value))
            else:
                books.fractions.approve(owner, spender, value)
                books.events.append(Approval(owner, spender, value))

    def set_approval_for_all(self, owner: Holder, operator: Holder, approved: bool) -> None:
        """Let operator move any of owner's units."""
        require_holder(operator, "operator")
        with self._atomic("set_approval_for_all", (owner, operator, approved)) as books:
            books.units.set_approval_for_all(owner, operator, bool(approved))
            if getattr(books.units, "events", None) is not books.events:
                books.events.append(ApprovalForAll(owner, operator, bool(approved)))

    def transfer_from(self, spender: Holder, source: Holder, to: Holder, amount_or_id: Operand) -> None:
        """
        Move value out of source on spender's authority.

        Unit-style operands move one unit (spender must be the owner, its
        approved address or an operator). Fraction-style operands consume
        spender's allowance and then transfer as transfer() does.

        Raises:
            NotAuthorized: Unit-style and spender may not move the unit
            InsufficientAllowance: Fraction-style and allowance too small
            InsufficientBalance: source cannot cover the amount
        """
        with self._atomic("transfer_from", (spender, source, to, amount_or_id)) as books:
            kind, value = resolve_operand(books.units, amount_or_id)
            engine = TransferEngine(books)
            if kind is OperandKind.UNIT:
                if not self._is_unit_operator(spender, source, value):
                    raise NotAuthorized(f"{spender} may not move unit {value} of {source}")
                engine.transfer_unit(source, to, value)
            else:
                books.fractions.spend_allowance(source, spender, value)
                engine.transfer(source, to, value)

    # ========================================================================
    # ADMINISTRATION (Mutating, owner only)
    # ========================================================================

    def set_whitelist(self, caller: Holder, holder: Holder, enabled: bool) -> None:
        """
        Exempt holder from (or return it to) unit synchronisation.

        Existing balances are not reconciled.
        """
        require_holder(holder, "holder")
        with self._atomic("set_whitelist", (caller, holder, enabled)) as books:
            self._require_owner(caller, "set_whitelist")
            books.whitelist.set_whitelist(holder, bool(enabled))

    def issue(self, caller: Holder, to: Holder, units: int) -> None:
        """Create units * SCALE new fractions (and units, unless whitelisted) for to."""
        with self._atomic("issue", (caller, to, units)) as books:
            self._require_owner(caller, "issue")
            TransferEngine(books).issue(to, units)

    def transfer_ownership(self, caller: Holder, new_owner: Holder) -> None:
        require_holder(new_owner, "new_owner")
        with self._atomic("transfer_ownership", (caller, new_owner)):
            self._require_owner(caller, "transfer_ownership")
            if new_owner == ZERO_ADDRESS:
                raise NotAuthorized("Ownership cannot go to the null holder")
            self.owner = new_owner

    # ========================================================================
    # INVARIANTS
    # ========================================================================

    def verify_invariants(self) -> Dict[str, Any]:
        """
        Check conservation, partition and synchronisation.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every invariant holds
            - 'supply': int - current total supply in fractions
            - 'discrepancies': List[Dict] - one entry per violation, each
              with a 'check' key naming the invariant

        Example:
            result = token.verify_invariants()
            assert result['valid'], result['discrepancies']
        """
        books = self._books
        discrepancies: List[Dict[str, Any]] = []

        balances = books.fractions.holders()
        balance_sum = sum(balances[h] for h in sorted(balances))
        if balance_sum != books.fractions.total():
            discrepancies.append({
                'check': 'conservation',
                'expected': books.fractions.total(),
                'actual': balance_sum,
            })

        # Partition: every live unit appears in exactly one range of its owner
        claimed: Dict[int, Holder] = {}
        for holder in sorted(books.ranges):
            range_set = books.ranges[holder]
            for a, b in range_set.overlaps():
                discrepancies.append({'check': 'partition', 'holder': holder, 'overlap': (a, b)})
            for unit_id in range_set.iter_ids():
                if unit_id in claimed:
                    discrepancies.append({
                        'check': 'partition', 'unit_id': unit_id,
                        'holders': (claimed[unit_id], holder),
                    })
                    continue
                claimed[unit_id] = holder

        owners = self._live_owners()
        for unit_id, owner in owners.items():
            if claimed.get(unit_id) != owner:
                discrepancies.append({
                    'check': 'partition', 'unit_id': unit_id,
                    'owner': owner, 'range_holder': claimed.get(unit_id),
                })
        for unit_id in claimed.keys() - owners.keys():
            discrepancies.append({
                'check': 'partition', 'unit_id': unit_id,
                'owner': None, 'range_holder': claimed[unit_id],
            })

        # Synchronisation for non-whitelisted holders
        for holder in sorted(set(balances) | set(books.ranges)):
            if books.whitelist.is_whitelisted(holder):
                continue
            expected = balances.get(holder, 0) // self.SCALE
            actual = books.units.balance_of_units(holder)
            if expected != actual:
                discrepancies.append({
                    'check': 'synchronisation', 'holder': holder,
                    'expected': expected, 'actual': actual,
                })

        return {
            'valid': not discrepancies,
            'supply': books.fractions.total(),
            'discrepancies': discrepancies,
        }

    def _live_owners(self) -> Dict[int, Holder]:
        units = self._books.units
        all_owners = getattr(units, "all_owners", None)
        if all_owners is not None:
            return all_owners()
        # Generic UnitLedger: ask about every id the ranges mention
        owners = {}
        for range_set in self._books.ranges.values():
            for unit_id in range_set.iter_ids():
                try:
                    owners[unit_id] = units.owner_of(unit_id)
                except UnitNotFound:
                    continue
        return owners

    # ========================================================================
    # CLONING
    # ========================================================================

    def clone(self) -> DualToken:
        """
        Create an independent deep copy of this token.

        The clone shares no mutable state with the original; the audit log is
        copied as a list of the same immutable records.
        """
        with self._lock:
            cloned = DualToken.__new__(DualToken)
            cloned.name = self.name
            cloned.symbol = self.symbol
            cloned.decimals = self.decimals
            cloned.SCALE = self.SCALE
            cloned.owner = self.owner
            cloned.verbose = self.verbose
            cloned.operation_log = list(self.operation_log)
            cloned._next_sequence = self._next_sequence
            cloned._lock = threading.RLock()
            cloned._books = copy.deepcopy(self._books)
            return cloned
