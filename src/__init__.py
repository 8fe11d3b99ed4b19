"""
Personal Ledger - Source Package

A personal finance tracker for a single signed-in user: record income and
expense transactions, keep a running balance, browse history.

DESIGN PRINCIPLES:
1. Validate at the boundary, before anything is admitted
2. The balance is always the sum of the held transactions
3. Auth and persistence belong to the hosted backend
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
