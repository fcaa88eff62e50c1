"""
Test suite for prelude

Contains:
- tests/unit/          : Unit tests for individual modules
"""
