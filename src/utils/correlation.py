"""
Correlation IDs for blib

Ties together the log records emitted while one diff or one SQL build runs,
so a single CLI invocation can be followed through JSON logs. The CLI takes
the ID from BLIB_CORRELATION_ID when a caller wants to join its own trace.
"""

import uuid
import contextvars
from typing import Optional
import logging

logger = logging.getLogger(__name__)

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'blib_correlation_id',
    default=None
)


def generate_correlation_id() -> str:
    """Return a fresh UUID4 string."""
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    """Return the correlation ID bound to the current context, if any."""
    return _correlation_id.get()


class CorrelationContext:
    """
    Binds a correlation ID for the duration of a block.

    Contexts nest: leaving one restores whatever ID was bound before it,
    including none.
    """

    def __init__(self, correlation_id: Optional[str] = None):
        """
        Args:
            correlation_id: ID to bind; a UUID4 is generated when omitted

        Raises:
            ValueError: If correlation_id is given but not a non-empty string
        """
        if correlation_id is not None and (not isinstance(correlation_id, str) or not correlation_id):
            raise ValueError("Correlation ID must be a non-empty string")

        self.correlation_id = correlation_id
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        if self.correlation_id is None:
            self.correlation_id = generate_correlation_id()

        self._token = _correlation_id.set(self.correlation_id)
        logger.debug(f"Entered correlation context: {self.correlation_id}")
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        _correlation_id.reset(self._token)
        self._token = None


def correlation_id_filter(record: logging.LogRecord) -> bool:
    """
    Logging filter stamping the current correlation ID onto each record.

    Always lets the record through.
    """
    record.correlation_id = get_correlation_id() or "N/A"
    return True
