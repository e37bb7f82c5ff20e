"""
Account Service

Per-user accounts with an auditable transaction ledger: balance debits,
full reversals and transaction lookups.
"""

__version__ = "1.0.0"
