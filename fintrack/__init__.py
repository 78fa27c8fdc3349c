"""
Finance Tracker - Source Package

A personal finance tracker: record income and expenses, see totals,
browse and filter history.

DESIGN PRINCIPLES:
1. One owner of the transaction collection (the state manager)
2. Show changes immediately, undo them precisely if the store says no
3. Totals are always derived, never stored
4. Every outcome is reported to the user exactly once
5. Storage and identity are swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
