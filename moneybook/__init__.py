"""
Moneybook - Source Package

A small personal finance tracker: one password-protected user, a list of
income/expense transactions in a key-value record store, and period
reports (daily, weekly, monthly, yearly net flow).

DESIGN PRINCIPLES:
1. The transaction list is the only source of truth
2. Reports are pure functions of (transactions, now, target period)
3. All calendar math happens in one fixed civil timezone
4. Storage layer is swappable
5. The current user is always passed explicitly
"""

__version__ = "1.0.0"
__author__ = "Moneybook Team"
