"""
dispatch.py - Decide whether an operand is a unit id or a fraction amount

approve() and transfer_from() take a single number that means either a unit
id or a fraction amount. A bare int is classified by magnitude against the
window of ids minted so far:

    first = first_unit_id()
    0 < operand and first <= operand < first + total_minted()   -> UNIT
    otherwise                                                   -> FRACTION

With the default first id of 1 this is 0 < operand <= total_minted().

The rule is ambiguous: a legitimate fraction amount that happens to fall in
the minted window is read as a unit id. Callers that need certainty pass
UnitId(n) or FractionAmount(n), which are taken at face value.
"""

from __future__ import annotations
from typing import Tuple

from .core import (
    Operand, OperandKind, UnitId, FractionAmount, UnitLedger,
    require_amount,
)


def classify_operand(units: UnitLedger, operand: Operand) -> OperandKind:
    """
    Classify operand against the unit ledger's minted id window.

    Raises:
        TypeError: If operand is neither an int nor a tagged operand
    """
    if isinstance(operand, UnitId):
        return OperandKind.UNIT
    if isinstance(operand, FractionAmount):
        return OperandKind.FRACTION
    value = require_amount(operand, "operand")
    first = units.first_unit_id()
    if 0 < value and first <= value < first + units.total_minted():
        return OperandKind.UNIT
    return OperandKind.FRACTION


def resolve_operand(units: UnitLedger, operand: Operand) -> Tuple[OperandKind, int]:
    """Return (kind, raw value) for operand."""
    kind = classify_operand(units, operand)
    if isinstance(operand, (UnitId, FractionAmount)):
        return kind, operand.value
    return kind, operand
