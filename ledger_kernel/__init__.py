"""
Ledger Kernel - dealer account reporting core

Read-only foundation for dealer statements and reminders:
- Typed ledger entries with Decimal amounts
- Structured JSON logging
- Injectable clock
- SQLAlchemy-backed ledger store behind an async port
"""

__version__ = "0.1.0"
