"""
sequential_burn.py - Destroy a required number of a holder's units

The holder's RangeSet is walked in stored order. Ranges are only a cache of
ownership, so every range is re-checked against the unit ledger before any
id in it is burned.

    owned subset <= remaining quota  -> burn all of it, swap-pop the range
    owned subset >  remaining quota  -> burn the lowest `remaining` ids and
                                        move the range start to the lowest
                                        survivor
    owned subset empty               -> drop the stale range

Running out of ranges before the quota is met is an insufficient-balance
condition. Nothing is undone here; the caller's atomic scope rolls back.
"""

from __future__ import annotations
from typing import List

from .core import (
    Holder, Range, UnitLedger,
    InsufficientBalance,
)
from .range_set import RangeSet


def sequential_burn(
    units: UnitLedger,
    range_set: RangeSet,
    holder: Holder,
    burn_count: int,
) -> List[int]:
    """
    Burn burn_count of holder's units, oldest range first.

    Args:
        units: Unit ledger that owns the ids
        range_set: holder's RangeSet, updated in place
        holder: Holder whose units are burned
        burn_count: Number of units to destroy

    Returns:
        The burned ids in burn order

    Raises:
        ValueError: If burn_count is negative
        InsufficientBalance: If holder's ranges cover fewer than burn_count owned ids
    """
    if burn_count < 0:
        raise ValueError(f"burn_count must be non-negative, got {burn_count}")
    burned: List[int] = []
    if burn_count == 0:
        return burned

    i = 0
    while i < len(range_set) and len(burned) < burn_count:
        r = range_set[i]
        remaining = burn_count - len(burned)
        owned = units.owned_ids_in_range(holder, r.start, r.end)

        if len(owned) <= remaining:
            for unit_id in owned:
                units.burn(unit_id)
            burned.extend(owned)
            # swap-pop moves an unvisited range into slot i
            range_set.pop_at(i)
            continue

        for unit_id in owned[:remaining]:
            units.burn(unit_id)
        burned.extend(owned[:remaining])
        range_set.replace_at(i, Range(owned[remaining], r.end))
        break

    if len(burned) < burn_count:
        raise InsufficientBalance(
            f"{holder}: only {len(burned)} of {burn_count} units available to burn"
        )
    return burned
