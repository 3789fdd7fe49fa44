"""
helpers.py - Shared helpers for dualledger tests
"""

from typing import Dict

from dualledger import DualToken


# Small scale keeps fraction arithmetic readable: 1 unit = 100 fractions.
TEST_DECIMALS = 2
SCALE = 10 ** TEST_DECIMALS


def make_token(owner: str = "deployer", decimals: int = TEST_DECIMALS, **kwargs) -> DualToken:
    """Create a quiet token for testing."""
    return DualToken("Azukira", "AKA", owner=owner, decimals=decimals, verbose=False, **kwargs)


def assert_invariants(token: DualToken) -> None:
    """Fail with the discrepancy list if any invariant is broken."""
    result = token.verify_invariants()
    assert result['valid'], f"Invariants violated: {result['discrepancies']}"


def snapshot(token: DualToken) -> Dict:
    """Observable state of a token, for before/after comparisons."""
    holders = set(token.holders()) | set(token._books.ranges)
    return {
        'balances': token.holders(),
        'ranges': {h: token.ranges_of(h) for h in sorted(holders)},
        'owners': token.units.all_owners(),
        'allowances': dict(token._books.fractions._allowances),
        'whitelist': token._books.whitelist.whitelisted(),
        'supply': token.total_supply(),
        'minted': token.total_minted(),
        'events': token.event_log,
        'log_length': len(token.operation_log),
    }
