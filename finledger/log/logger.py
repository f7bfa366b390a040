"""
Ledger Event Logger

Every committed mutation is logged as a structured event:
1. Traceability of what changed and when
2. Debugging capability when balances look wrong
3. Visibility into recovered storage problems

The logger never raises into ledger code. It only writes locally.
"""

import logging
from typing import Optional

import structlog

from finledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerEventSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: str = "finledger"):
    """Return a structlog logger bound to a stdlib logger name."""
    return structlog.get_logger(name)


def configure_level(level: str) -> None:
    """Set the minimum level of the stdlib logger behind structlog."""
    logging.getLogger("finledger").setLevel(level)


class LedgerEventLogger:
    """
    Central event logging service for the ledger.

    Routes each LedgerEvent to the structured local log at a level
    matching its severity.
    """

    def __init__(self, name: str = "finledger"):
        self._logger = get_logger(name)

    def log(self, event: LedgerEvent) -> None:
        """Log a ledger event."""
        log_dict = event.to_log_dict()

        if event.severity == LedgerEventSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == LedgerEventSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == LedgerEventSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

    def log_change(
        self,
        event_type: LedgerEventType,
        entity_type: str,
        entity_id: str,
        description: str,
        **details,
    ) -> None:
        """Log a create/update/delete of a ledger entity."""
        self.log(LedgerEventBuilder.entity_changed(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details,
        ))

    def log_loaded(self, counts: dict[str, int]) -> None:
        self.log(LedgerEventBuilder.ledger_loaded(counts))

    def log_seeded(self, keys: list[str]) -> None:
        self.log(LedgerEventBuilder.ledger_seeded(keys))

    def log_malformed(self, key: str, error: str) -> None:
        self.log(LedgerEventBuilder.persisted_data_malformed(key, error))

    def log_record_skipped(self, key: str, index: Optional[int], error: str) -> None:
        self.log(LedgerEventBuilder.persisted_record_skipped(key, index, error))

    def log_recurring(self, created_ids: list[str]) -> None:
        self.log(LedgerEventBuilder.recurring_materialized(created_ids))

    def log_validation_failed(self, operation: str, issues: list[dict]) -> None:
        self.log(LedgerEventBuilder.validation_failed(operation, issues))

    def warning(self, message: str, **kwargs) -> None:
        """Free-form warning for conditions that are tolerated, not events."""
        self._logger.warning(message, **kwargs)
