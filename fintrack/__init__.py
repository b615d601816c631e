"""
fintrack - Source Package

A personal income/expense ledger kept in a single JSON document.

DESIGN PRINCIPLES:
1. The ledger is the single source of truth
2. Fail early, fail visibly
3. No partial writes
4. Every mutation is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "fintrack Team"
