"""
Sheet Tracker - Source Package

A small personal finance tracker built around named sheets of
income and expense transactions.

DESIGN PRINCIPLES:
1. Sheets are immutable values, updates return new sheets
2. Reports are derived on demand, never stored
3. Money is Decimal end to end
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Sheet Tracker Team"
