"""
Test suite for the LP vault engine

Contains:
- tests/unit/          : Unit tests for math, adapters and vault operations
"""
