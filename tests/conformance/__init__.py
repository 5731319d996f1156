"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the ledger interpreter.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Double-entry: balanced transactions move exactly their amounts
2. atomicity.py - A failing transaction changes no balance
3. idempotency.py - Tagging twice equals tagging once; untagging absent tags is a no-op
4. temporal.py - The ledger clock never moves backwards
5. scoping.py - Scopes hide outer operands and must be left as found

These tests use hypothesis for property-based testing.
"""
