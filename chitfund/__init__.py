"""
Chit Fund Member Ledger

This module provides:
- Member, receipt and auction records
- Month-by-month premium reconciliation with FIFO carry-forward
- Auction winner exemption from the won month's premium
- Running outstanding balance with optional date window
- JSON and PDF ledger statements
"""

from .models import (
    Member,
    Receipt,
    AuctionEvent,
    LedgerMonth,
    LedgerStatement,
)
from .engine import compute_ledger, build_statement
from .service import LedgerService

__all__ = [
    "Member",
    "Receipt",
    "AuctionEvent",
    "LedgerMonth",
    "LedgerStatement",
    "compute_ledger",
    "build_statement",
    "LedgerService",
]
