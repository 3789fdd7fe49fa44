"""
whitelist.py - Holders exempt from unit synchronisation

A whitelisted holder (typically a pool or other high-churn account) keeps a
fraction balance without the engine minting or burning units to match it.
Toggling an entry never reconciles existing balances; the next transfer
through the holder simply follows the new setting.
"""

from __future__ import annotations
from typing import Set

from .core import Holder


class WhitelistRegistry:

    def __init__(self):
        self._members: Set[Holder] = set()

    def set_whitelist(self, holder: Holder, enabled: bool) -> None:
        if enabled:
            self._members.add(holder)
        else:
            self._members.discard(holder)

    def is_whitelisted(self, holder: Holder) -> bool:
        return holder in self._members

    def whitelisted(self) -> Set[Holder]:
        return set(self._members)

    def __contains__(self, holder: Holder) -> bool:
        return holder in self._members

    def __len__(self) -> int:
        return len(self._members)
