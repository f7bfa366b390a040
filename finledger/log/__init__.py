"""Ledger logging package."""

from finledger.log.logger import LedgerEventLogger, configure_level, get_logger

__all__ = ["LedgerEventLogger", "configure_level", "get_logger"]
