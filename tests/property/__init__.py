# tests/property/__init__.py
"""Property-based tests for waypoint.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of.

Test categories:
- redirect/: classification, hop bounds, credential stripping, 303 downgrade
"""
