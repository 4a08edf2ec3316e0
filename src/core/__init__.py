"""
Core domain models, mathematical primitives, and invariants.

This module contains the foundational building blocks shared by every
market: fixed-point math, domain models, contracts, errors and the host
environment.
"""
