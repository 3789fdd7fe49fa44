"""
Core types and pure functions for the dual-representation ledger.

This module provides the foundational data structures and protocols:
1. Protocols: UnitLedger, the discrete-unit collaborator the engine drives
2. Immutable data structures: Range, UnitId, FractionAmount, events
3. Exceptions: LedgerError and domain-specific error types
4. Type aliases: Holder, Balances, Allowances
5. Checked arithmetic: uint256-bounded add/sub that never wrap

Every unit of value exists twice: as a discrete unit with its own id and as
SCALE fractions. Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import (
    Dict, List, Tuple, Optional, Protocol, Union, Any, runtime_checkable
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Null holder. Mints originate here and burns end here; it never holds value.
ZERO_ADDRESS = "0x0"

# Fractions per unit are 10 ** decimals.
DEFAULT_DECIMALS = 18

# Upper bound of every balance, allowance and supply figure.
MAX_UINT256 = 2 ** 256 - 1

# Unit ids live in a 64-bit space.
MAX_UNIT_ID = 2 ** 64 - 1

# First id handed out by a fresh unit ledger.
FIRST_UNIT_ID = 1

# Allowance sentinel that spending never decrements.
UNLIMITED_ALLOWANCE = MAX_UINT256


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Account identity.
Holder = str

# Mapping from holder to fraction balance.
Balances = Dict[Holder, int]

# Mapping from (owner, spender) to remaining fraction allowance.
Allowances = Dict[Tuple[Holder, Holder], int]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InsufficientBalance(LedgerError):
    """Raised when a holder lacks the fractions or units an operation needs."""
    pass


class InsufficientAllowance(LedgerError):
    """Raised when a spender tries to move more than its remaining allowance."""
    pass


class ArithmeticOverflow(LedgerError):
    """Raised when a computation would leave the representable range."""
    pass


class RangeInvariantViolation(LedgerError):
    """Raised when a unit expected in a holder's ranges cannot be found."""
    pass


class NotAuthorized(LedgerError):
    """Raised when the caller may not perform an operation."""
    pass


class UnitNotFound(LedgerError):
    """Raised when a unit id was never minted or has been burned."""
    pass


class InvalidRecipient(LedgerError):
    """Raised when value would be sent to the empty or null holder."""
    pass


# ============================================================================
# CHECKED ARITHMETIC
# ============================================================================

def checked_add(a: int, b: int, bound: int = MAX_UINT256) -> int:
    """Return a + b, raising ArithmeticOverflow above bound."""
    result = a + b
    if result > bound:
        raise ArithmeticOverflow(f"{a} + {b} exceeds {bound}")
    return result


def checked_sub(a: int, b: int) -> int:
    """Return a - b, raising ArithmeticOverflow below zero."""
    if b > a:
        raise ArithmeticOverflow(f"{a} - {b} underflows")
    return a - b


def checked_mul(a: int, b: int, bound: int = MAX_UINT256) -> int:
    """Return a * b, raising ArithmeticOverflow above bound."""
    result = a * b
    if result > bound:
        raise ArithmeticOverflow(f"{a} * {b} exceeds {bound}")
    return result


def require_amount(value: Any, what: str = "amount") -> int:
    """
    Validate an integer quantity.

    bool is rejected even though it subclasses int.

    Raises:
        TypeError: If value is not an int
        ValueError: If value is negative
        ArithmeticOverflow: If value exceeds MAX_UINT256
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{what} must be non-negative, got {value}")
    if value > MAX_UINT256:
        raise ArithmeticOverflow(f"{what} {value} exceeds uint256")
    return value


def require_holder(holder: Any, what: str = "holder") -> Holder:
    """Validate a holder identity (non-empty string)."""
    if not isinstance(holder, str) or not holder.strip():
        raise ValueError(f"{what} cannot be empty")
    return holder


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Range:
    """
    Inclusive block of unit ids [start, end] owned by one holder.

    Attributes:
        start: First unit id in the block.
        end: Last unit id in the block (inclusive).
    """
    start: int
    end: int

    def __post_init__(self):
        if isinstance(self.start, bool) or not isinstance(self.start, int):
            raise ValueError(f"Range start must be int, got {type(self.start)}")
        if isinstance(self.end, bool) or not isinstance(self.end, int):
            raise ValueError(f"Range end must be int, got {type(self.end)}")
        if self.start < 0:
            raise ValueError(f"Range start must be non-negative, got {self.start}")
        if self.end > MAX_UNIT_ID:
            raise ValueError(f"Range end {self.end} exceeds unit id space")
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} > end {self.end}")

    @property
    def size(self) -> int:
        """Number of ids covered (can exceed sys.maxsize)."""
        return self.end - self.start + 1

    def __contains__(self, unit_id: int) -> bool:
        return self.start <= unit_id <= self.end

    def overlaps(self, other: Range) -> bool:
        return self.start <= other.end and other.start <= self.end

    def __repr__(self) -> str:
        return f"Range[{self.start}..{self.end}]"


@dataclass(frozen=True, slots=True)
class UnitId:
    """Operand explicitly tagged as a unit id."""
    value: int

    def __post_init__(self):
        require_amount(self.value, "unit id")


@dataclass(frozen=True, slots=True)
class FractionAmount:
    """Operand explicitly tagged as a fraction amount."""
    value: int

    def __post_init__(self):
        require_amount(self.value, "fraction amount")


# An operand that is either a unit id or a fraction amount.
Operand = Union[int, UnitId, FractionAmount]


class OperandKind(Enum):
    """
    How a mixed operand is interpreted.

    UNIT: the operand names a single unit id.
    FRACTION: the operand is a quantity of fractions.
    """
    UNIT = "unit"
    FRACTION = "fraction"


# ============================================================================
# EVENTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class FractionTransfer:
    """Fractions moved between holders (source ZERO_ADDRESS on issuance)."""
    source: Holder
    dest: Holder
    amount: int

    def __repr__(self) -> str:
        return f"FractionTransfer({self.amount}: {self.source}→{self.dest})"


@dataclass(frozen=True, slots=True)
class UnitTransfer:
    """A unit changed hands. Mints come from ZERO_ADDRESS, burns go to it."""
    source: Holder
    dest: Holder
    unit_id: int

    def __repr__(self) -> str:
        return f"UnitTransfer(#{self.unit_id}: {self.source}→{self.dest})"


@dataclass(frozen=True, slots=True)
class Approval:
    """Allowance or per-unit approval granted by owner to spender."""
    owner: Holder
    spender: Holder
    amount_or_id: int

    def __repr__(self) -> str:
        return f"Approval({self.owner}→{self.spender}: {self.amount_or_id})"


@dataclass(frozen=True, slots=True)
class ApprovalForAll:
    """Operator approval toggled for every unit of owner."""
    owner: Holder
    operator: Holder
    approved: bool


Event = Union[FractionTransfer, UnitTransfer, Approval, ApprovalForAll]


@dataclass(frozen=True, slots=True)
class OperationRecord:
    """
    Audit record of one applied public operation.

    Attributes:
        sequence_number: Monotonic position within the token's log
        operation: Operation name (e.g. "transfer", "approve")
        args: Arguments the operation was called with
        events: Events the operation emitted, in order
    """
    sequence_number: int
    operation: str
    args: Tuple[Any, ...]
    events: Tuple[Event, ...]

    def __repr__(self) -> str:
        args = ", ".join(repr(a) for a in self.args)
        return f"#{self.sequence_number} {self.operation}({args}) -> {len(self.events)} events"


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class UnitLedger(Protocol):
    """
    Discrete-unit collaborator.

    Owns one record per unit id and hands out ids sequentially. The engine
    never stores unit ownership itself; its range sets are a cache that is
    re-checked against owned_ids_in_range() before anything is burned.

    Implementations must not call back into the engine from any method.

    UnitTransfer events for mint, burn and transfer are the ledger's job. A
    ledger exposing an `events` list shares it with the token; approval
    events are added by the token when it does not.
    """

    def mint_sequential(self, owner: Holder, count: int) -> int:
        """Assign the next count ids to owner and return the first one."""
        ...

    def burn(self, unit_id: int) -> None:
        """Destroy a unit."""
        ...

    def transfer_unit(self, source: Holder, dest: Holder, unit_id: int) -> None:
        """Move a unit from source to dest, clearing its per-unit approval."""
        ...

    def owner_of(self, unit_id: int) -> Holder:
        """Return the owner of a live unit; raises UnitNotFound otherwise."""
        ...

    def owned_ids_in_range(self, owner: Holder, start: int, end: int) -> List[int]:
        """Return the ids in [start, end] owned by owner, ascending."""
        ...

    def balance_of_units(self, owner: Holder) -> int:
        """Return the number of live units owned by owner."""
        ...

    def total_minted(self) -> int:
        """Return the number of ids ever minted (burned ones included)."""
        ...

    def first_unit_id(self) -> int:
        """Return the id the first mint hands out; minted ids are [first, first + total_minted())."""
        ...

    def approve(self, owner: Holder, spender: Holder, unit_id: int) -> None:
        """Approve spender for a single unit."""
        ...

    def get_approved(self, unit_id: int) -> Optional[Holder]:
        """Return the approved spender of a unit, if any."""
        ...

    def set_approval_for_all(self, owner: Holder, operator: Holder, approved: bool) -> None:
        """Toggle operator approval over all of owner's units."""
        ...

    def is_approved_for_all(self, owner: Holder, operator: Holder) -> bool:
        """Return True if operator may move every unit of owner."""
        ...
