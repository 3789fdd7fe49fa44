"""
dualledger - Dual-Representation Token Ledger

Every unit of value is held twice: as a numbered unit and as SCALE
fractions. Holders trade in either form and the engine keeps both views
consistent, tracking unit ownership as compact id ranges.

Usage:
    from dualledger import DualToken

    token = DualToken("Azukira", "AKA", owner="deployer", verbose=False)
    token.issue("deployer", "alice", 10)          # alice owns units 1..10
    token.set_whitelist("deployer", "pool", True)

    # Fractional transfer: alice drops to 9.5 units' worth, one unit burned
    token.transfer("alice", "bob", token.SCALE // 2)

    # Unit transfer: unit 7 and SCALE fractions move to carol
    token.transfer_unit("alice", "carol", 7)

    result = token.verify_invariants()
    assert result['valid']
"""

# Core types
from .core import (
    Range,
    UnitId,
    FractionAmount,
    Operand,
    OperandKind,
    OperationRecord,
    UnitLedger,
    Event,
    FractionTransfer,
    UnitTransfer,
    Approval,
    ApprovalForAll,
    LedgerError,
    InsufficientBalance,
    InsufficientAllowance,
    ArithmeticOverflow,
    RangeInvariantViolation,
    NotAuthorized,
    UnitNotFound,
    InvalidRecipient,
    checked_add,
    checked_sub,
    checked_mul,
    ZERO_ADDRESS,
    DEFAULT_DECIMALS,
    MAX_UINT256,
    MAX_UNIT_ID,
    FIRST_UNIT_ID,
    UNLIMITED_ALLOWANCE,
)

# Components
from .range_set import RangeSet
from .unit_ledger import InMemoryUnitLedger
from .fraction_ledger import FractionLedger
from .whitelist import WhitelistRegistry
from .sequential_burn import sequential_burn
from .dispatch import classify_operand, resolve_operand
from .transfer_engine import Books, TransferEngine

# Token
from .token import DualToken

__all__ = [
    # Core
    'Range', 'UnitId', 'FractionAmount', 'Operand', 'OperandKind',
    'OperationRecord', 'UnitLedger',
    'Event', 'FractionTransfer', 'UnitTransfer', 'Approval', 'ApprovalForAll',
    'LedgerError', 'InsufficientBalance', 'InsufficientAllowance',
    'ArithmeticOverflow', 'RangeInvariantViolation', 'NotAuthorized',
    'UnitNotFound', 'InvalidRecipient',
    'checked_add', 'checked_sub', 'checked_mul',
    'ZERO_ADDRESS', 'DEFAULT_DECIMALS', 'MAX_UINT256', 'MAX_UNIT_ID',
    'FIRST_UNIT_ID', 'UNLIMITED_ALLOWANCE',
    # Components
    'RangeSet', 'InMemoryUnitLedger', 'FractionLedger', 'WhitelistRegistry',
    'sequential_burn', 'classify_operand', 'resolve_operand',
    'Books', 'TransferEngine',
    # Token
    'DualToken',
]

__version__ = '1.0.0'
