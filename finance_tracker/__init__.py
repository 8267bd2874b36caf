"""
Finance Tracker - Source Package

A personal budget and transaction ledger: categories, transactions,
monthly budgets and savings goals, with dashboard and statistics views.
Served over HTTP, or mirrored to a device-local file when running offline.

DESIGN PRINCIPLES:
1. Money is Decimal end to end, serialized as fixed-point strings
2. Fail early, fail visibly
3. No silent corrections
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
