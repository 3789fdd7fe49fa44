"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the dual-representation token.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Supply is only created by issuance
2. partition.py - Every live unit sits in exactly one range of its owner
3. synchronisation.py - Unit counts track fraction balances
4. atomicity.py - All-or-nothing operation semantics

These tests use hypothesis for property-based testing.
"""
