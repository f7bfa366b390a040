"""
finledger - Personal Finance Ledger Engine

Owns accounts, categories, transactions and budgets, keeps account
balances consistent with transaction history, and derives monthly
summaries by replaying that history.

DESIGN PRINCIPLES:
1. The ledger is the only owner of its collections
2. Every value leaving the ledger is a copy
3. Reject invalid commands before anything mutates
4. Every mutation is persisted in full, immediately
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "finledger maintainers"
