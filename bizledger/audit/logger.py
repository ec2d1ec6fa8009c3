"""
Audit Logger

Every fetch and write the state engine performs is logged as a structured
event. The audit logger:
- Is async so it can sit on the same await path as remote calls
- Never raises into the caller (a logging failure must not undo a write)
- Supports correlation IDs to tie events to one mutation
"""

from typing import Optional
from uuid import UUID

import structlog

from bizledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


class AuditLogger:
    """
    Central audit logging service.

    Keeps the events of the current session in memory (newest last) so a UI
    can show what just happened, and writes each one to the structured log.
    """

    def __init__(self, max_events: int = 500):
        self._logger = structlog.get_logger("bizledger.audit")
        self._events: list[AuditEvent] = []
        self._max_events = max_events

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        self._events.append(event)
        if len(self._events) > self._max_events:
            del self._events[: len(self._events) - self._max_events]

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    async def log_remote_error(
        self,
        operation: str,
        error_message: str,
        status_code: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failure reported by the remote store."""
        event = AuditEventBuilder.remote_error(
            operation=operation,
            error_message=error_message,
            status_code=status_code,
            correlation_id=correlation_id,
        )
        await self.log(event)
