#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Dual Token Step by Step

A walk through a token whose value lives in two places at once: numbered
units and divisible fractions. Each step builds on the previous one.
Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3: Foundation   - Deployment, issuance, the two representations
  4-6: Transfers    - Burning on the way out, minting on the way in, ranges
  7-8: Integrity    - Whitelisted pools, rejected operations, invariants

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from dualledger import DualToken, InsufficientBalance


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    name: str = "Azukira"
    symbol: str = "AKA"
    deployer: str = "deployer"
    # Small decimals keep the numbers readable: 1 unit = 100 fractions
    decimals: int = 2
    alice_units: int = 5
    pool_units: int = 20


CONFIG = DemoConfig()

# Global state for interactive mode
QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def show_holder(token: DualToken, holder: str):
    print(f"{holder:>8}: {token.balance_of(holder):>6} fractions  "
          f"{token.units_of(holder)} units  ranges={token.ranges_of(holder)}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_deploy():
    step_header(1, "Deployment",
        "A fresh token has an owner, a scale and nothing else.")

    print(f">>> token = DualToken('{CONFIG.name}', '{CONFIG.symbol}', "
          f"owner='{CONFIG.deployer}', decimals={CONFIG.decimals})")
    token = DualToken(CONFIG.name, CONFIG.symbol, owner=CONFIG.deployer,
                      decimals=CONFIG.decimals, verbose=True)

    section_header("Initial State")
    print(f"SCALE:          {token.SCALE} fractions per unit")
    print(f"Total supply:   {token.total_supply()}")
    print(f"Units minted:   {token.total_minted()}")
    return token


def step_02_issue(token: DualToken):
    step_header(2, "Issuance",
        "Issuing whole units credits fractions and mints one block of ids.")

    print(f">>> token.issue('{CONFIG.deployer}', 'alice', {CONFIG.alice_units})")
    token.issue(CONFIG.deployer, "alice", CONFIG.alice_units)

    section_header("Balances")
    show_holder(token, "alice")
    return token


def step_03_two_views(token: DualToken):
    step_header(3, "Two Views of One Balance",
        "units_of(h) always equals balance_of(h) // SCALE.")

    balance = token.balance_of("alice")
    print(f"alice: {balance} // {token.SCALE} = {balance // token.SCALE} "
          f"== {token.units_of('alice')} units")
    print(f"alice owns ids {token.owned_units('alice')}")
    return token


# ============================================================================
# PHASE 2: TRANSFERS (Steps 4-6)
# ============================================================================

def step_04_fraction_transfer(token: DualToken):
    step_header(4, "Half a Unit",
        "Dropping below a whole unit burns the sender's oldest id.")

    print(f">>> token.transfer('alice', 'bob', {token.SCALE // 2})")
    token.transfer("alice", "bob", token.SCALE // 2)

    section_header("Balances")
    show_holder(token, "alice")
    show_holder(token, "bob")
    return token


def step_05_completing_a_unit(token: DualToken):
    step_header(5, "The Other Half",
        "Crossing a whole unit on the receiving side mints a fresh id.")

    print(f">>> token.transfer('alice', 'bob', {token.SCALE // 2})")
    token.transfer("alice", "bob", token.SCALE // 2)

    section_header("Balances")
    show_holder(token, "alice")
    show_holder(token, "bob")
    print(f"\nIds ever minted: {token.total_minted()} (burned ids are never reused)")
    return token


def step_06_unit_transfer(token: DualToken):
    step_header(6, "Moving a Specific Unit",
        "transfer_unit moves one id and the fractions backing it.")

    unit_id = token.owned_units("alice")[1]
    print(f">>> token.transfer_unit('alice', 'carol', {unit_id})")
    token.transfer_unit("alice", "carol", unit_id)

    section_header("Balances")
    for holder in ["alice", "bob", "carol"]:
        show_holder(token, holder)
    return token


# ============================================================================
# PHASE 3: INTEGRITY (Steps 7-8)
# ============================================================================

def step_07_pool(token: DualToken):
    step_header(7, "Whitelisted Pool",
        "Whitelisted holders never mint or burn units.")

    token.set_whitelist(CONFIG.deployer, "pool", True)
    token.issue(CONFIG.deployer, "pool", CONFIG.pool_units)
    print(f">>> token.transfer('pool', 'dave', {3 * token.SCALE})")
    token.transfer("pool", "dave", 3 * token.SCALE)

    section_header("Balances")
    show_holder(token, "pool")
    show_holder(token, "dave")
    return token


def step_08_rejection_and_invariants(token: DualToken):
    step_header(8, "Rejection and Invariants",
        "A rejected operation leaves no trace; the invariants always hold.")

    events_before = len(token.event_log)
    try:
        token.transfer("bob", "alice", 10 * token.SCALE)
    except InsufficientBalance:
        pass
    print(f"Events before: {events_before}, after: {len(token.event_log)}")

    section_header("verify_invariants()")
    result = token.verify_invariants()
    print(f"valid:         {result['valid']}")
    print(f"supply:        {result['supply']}")
    print(f"discrepancies: {result['discrepancies']}")
    return token


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       DUAL TOKEN - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    token = step_01_deploy()
    wait_for_enter()
    for step in (step_02_issue, step_03_two_views, step_04_fraction_transfer,
                 step_05_completing_a_unit, step_06_unit_transfer, step_07_pool):
        token = step(token)
        wait_for_enter()
    step_08_rejection_and_invariants(token)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See dualledger/transfer_engine.py for the burn / mint rules
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
