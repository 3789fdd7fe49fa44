"""
conftest.py - Shared pytest fixtures for dualledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Tokens (empty, funded, with a whitelisted pool, with offset ids)
"""

import pytest

from dualledger import InMemoryUnitLedger

from tests.helpers import make_token


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def empty_token():
    """Fresh token with no supply."""
    return make_token()


@pytest.fixture
def funded_token():
    """Token where alice holds 2 units (ids 1, 2) and nobody else holds anything."""
    token = make_token()
    token.issue("deployer", "alice", 2)
    return token


@pytest.fixture
def pool_token():
    """Token with a whitelisted pool holding 10 units' worth of fractions and no units."""
    token = make_token()
    token.set_whitelist("deployer", "pool", True)
    token.issue("deployer", "pool", 10)
    return token


@pytest.fixture
def offset_token():
    """Token whose ids start at 5, with alice holding units 5 and 6 as [5, 6]."""
    token = make_token(units=InMemoryUnitLedger(first_id=5))
    token.issue("deployer", "alice", 2)
    return token
