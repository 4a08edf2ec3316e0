"""
Test suite for isolated lending engine

Contains:
- tests/unit/          : Unit tests for individual modules
- tests/scenarios/     : Scenario tests (full liquidation, expired auction)
"""
