"""
fraction_ledger.py - Fraction balances and spender allowances

Balances are plain non-negative ints counted in fractions. Every change
goes through checked arithmetic so nothing can wrap around the uint256
bounds. Allowances are keyed by (owner, spender); UNLIMITED_ALLOWANCE is
never decremented.
"""

from __future__ import annotations
from typing import Dict, Tuple

from .core import (
    Holder, Balances, Allowances,
    UNLIMITED_ALLOWANCE,
    InsufficientBalance, InsufficientAllowance,
    checked_add, checked_sub, require_amount,
)


class FractionLedger:
    """Per-holder fraction balances with allowance bookkeeping."""

    def __init__(self):
        self._balances: Balances = {}
        self._allowances: Allowances = {}
        self._total: int = 0

    def balance_of(self, holder: Holder) -> int:
        return self._balances.get(holder, 0)

    def total(self) -> int:
        """Sum of all balances, maintained incrementally."""
        return self._total

    def holders(self) -> Dict[Holder, int]:
        """Copy of all non-zero balances."""
        return dict(self._balances)

    def _set(self, holder: Holder, value: int) -> None:
        if value:
            self._balances[holder] = value
        else:
            self._balances.pop(holder, None)

    def credit(self, holder: Holder, amount: int) -> int:
        """Add fractions to holder, returning the new balance."""
        require_amount(amount)
        new_balance = checked_add(self.balance_of(holder), amount)
        self._total = checked_add(self._total, amount)
        self._set(holder, new_balance)
        return new_balance

    def debit(self, holder: Holder, amount: int) -> int:
        """
        Remove fractions from holder, returning the new balance.

        Raises:
            InsufficientBalance: If holder has fewer than amount fractions
        """
        require_amount(amount)
        current = self.balance_of(holder)
        if amount > current:
            raise InsufficientBalance(f"{holder}: balance {current} < {amount}")
        self._total = checked_sub(self._total, amount)
        new_balance = current - amount
        self._set(holder, new_balance)
        return new_balance

    def move(self, source: Holder, dest: Holder, amount: int) -> Tuple[int, int]:
        """Debit source then credit dest. Returns (source_balance, dest_balance)."""
        self.debit(source, amount)
        self.credit(dest, amount)
        return self.balance_of(source), self.balance_of(dest)

    # ========================================================================
    # ALLOWANCES
    # ========================================================================

    def allowance(self, owner: Holder, spender: Holder) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: Holder, spender: Holder, amount: int) -> None:
        require_amount(amount)
        if amount:
            self._allowances[(owner, spender)] = amount
        else:
            self._allowances.pop((owner, spender), None)

    def spend_allowance(self, owner: Holder, spender: Holder, amount: int) -> int:
        """
        Consume amount of spender's allowance over owner's fractions.

        Returns:
            The remaining allowance

        Raises:
            InsufficientAllowance: If the remaining allowance is below amount
        """
        require_amount(amount)
        current = self.allowance(owner, spender)
        if current == UNLIMITED_ALLOWANCE:
            return current
        if amount > current:
            raise InsufficientAllowance(
                f"{spender} allowance over {owner}: {current} < {amount}"
            )
        remaining = current - amount
        self.approve(owner, spender, remaining)
        return remaining
