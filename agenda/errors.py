"""Domain exceptions for the agenda service.

Every error inherits from AgendaError so routes can translate them in one
place. Services raise; nothing here is swallowed into a default result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from agenda.domain.models import ConflictReport


class AgendaError(Exception):
    """Base exception for all agenda errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


class InvalidSessionError(AgendaError, ValueError):
    """Raised when a candidate session is malformed (bad window, no stage)."""


class InvalidReorderError(AgendaError, ValueError):
    """Raised when a reorder request cannot be applied as given."""


class NotFoundError(AgendaError):
    """Raised when a referenced entity does not exist."""


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Session with ID {session_id} not found",
            context={"session_id": session_id},
        )
        self.session_id = session_id


class TierNotFoundError(NotFoundError):
    def __init__(self, missing_ids: list[str]) -> None:
        super().__init__(
            "Sponsor tier not found",
            context={"missing_ids": missing_ids},
        )
        self.missing_ids = missing_ids


class SessionConflictError(AgendaError):
    """Raised when a session write is refused because of scheduling conflicts."""

    def __init__(self, report: ConflictReport) -> None:
        super().__init__(
            "Session conflicts with existing sessions",
            context={"conflicting_session_ids": [s.id for s in report.conflicts]},
        )
        self.report = report


class DuplicateOrderError(AgendaError):
    """Raised by a store when an order value is already held by another tier."""

    def __init__(self, order: int, holder_id: str) -> None:
        super().__init__(
            f"Order {order} is already taken",
            context={"order": order, "holder_id": holder_id},
        )
        self.order = order
        self.holder_id = holder_id


class DuplicateTierError(AgendaError):
    """Raised when a sponsor tier name is already in use."""


class StoreError(AgendaError):
    """Raised when the backing store cannot serve a read or write."""
