"""Error Hierarchy - typed, categorized exceptions for all engine failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable by the caller; CRITICAL errors are not
    - to_response() produces the envelope the action-handler layer renders
    - No UI text formatting here: messages are diagnostic, callers own wording

Design Decisions:
    - Single hierarchy with RosterError base: callers catch one type
    - ErrorContext as dataclass: carries entity/period identity for logs
    - LedgerCorruptionError is CRITICAL: raised on invariant breaches found
      while loading a ledger, never caught inside the engine
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_id: str | None = None
    entity_kind: str | None = None
    period_type: str | None = None
    action: str | None = None
    debug_info: dict[str, Any] | None = None


class RosterError(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def recoverable(self) -> bool:
        return self.severity is not ErrorSeverity.CRITICAL

    def to_response(self) -> dict:
        """Convert to standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "recoverable": self.recoverable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity_id": self.context.entity_id,
                    "entity_kind": self.context.entity_kind,
                    "period_type": self.context.period_type,
                    "action": self.context.action,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class PeriodClashError(RosterError):
    """A period of this type is already open for the entity."""
    def __init__(self, period_type: str, context: ErrorContext | None = None):
        super().__init__(
            f"An open {period_type} period already exists",
            "PERIOD_CLASH", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.period_type = period_type


class NoOpenPeriodError(RosterError):
    """Attempt to close (or reschedule) a period type with nothing open."""
    def __init__(self, period_type: str, context: ErrorContext | None = None):
        super().__init__(
            f"No open {period_type} period to close",
            "NO_OPEN_PERIOD", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )
        self.period_type = period_type


class InvalidRangeError(RosterError):
    """End instant precedes start instant, or a new interval would overlap."""
    def __init__(
        self,
        start: datetime,
        end: datetime,
        reason: str = "end precedes start",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid range {start.isoformat()} .. {end.isoformat()}: {reason}",
            "INVALID_RANGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.start = start
        self.end = end


class StartDateLockedError(RosterError):
    """Moving a start date would strand an existing commitment."""
    def __init__(
        self, blocking: str, blocked_at: datetime, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Start date is locked by {blocking} at {blocked_at.isoformat()}",
            "START_DATE_LOCKED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )
        self.blocking = blocking
        self.blocked_at = blocked_at


class CompositeMembershipError(RosterError):
    """Composite operation with a member set the kind does not allow."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "COMPOSITE_MEMBERSHIP", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )


class InvalidTransitionError(RosterError):
    """Action requested for a status (or kind) that does not permit it."""
    def __init__(
        self, action: str, status: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot {action} from status '{status}'",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )
        self.action = action
        self.status = status


class ResourceNotFoundError(RosterError):
    """Requested entity does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Fatal / Infrastructure Errors (500-level) ──────────────────

class LedgerCorruptionError(RosterError):
    """Stored history breaks a ledger invariant. Fatal."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "LEDGER_CORRUPTION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class DatabaseError(RosterError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
