"""Error taxonomy for the simulation core.

Only ``InvalidArgument`` and ``DuplicateAgent`` ever reach a direct caller.
``OracleUnavailable`` and ``EventCallbackFailure`` are raised and handled
inside the component that owns the failing call, then logged.
"""

from __future__ import annotations


class PopulaceError(Exception):
    """Base class for all errors raised by the simulation core."""


class InvalidArgument(PopulaceError, ValueError):
    """Raised for bad input to a constructor or setter (negative delay, scale <= 0, ...)."""


class NotFound(PopulaceError, KeyError):
    """Unknown identifier.

    Reserved. Plan status and relationship updates treat unknown ids as a
    silent no-op, and registry lookups return ``None``, so nothing in the core
    raises it today. Hosts may raise it from strict lookups of their own and
    still catch everything as ``PopulaceError``.
    """


class DuplicateAgent(PopulaceError):
    """Raised when registering an agent whose id is already present."""

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent '{agent_id}' is already registered")


class OracleUnavailable(PopulaceError):
    """The oracle failed, timed out, or returned something unusable."""

    def __init__(self, operation: str, underlying: BaseException | None = None) -> None:
        self.operation = operation
        self.underlying = underlying
        detail = f": {underlying!r}" if underlying is not None else ""
        super().__init__(f"Oracle call '{operation}' failed{detail}")


class EventCallbackFailure(PopulaceError):
    """Wraps an exception raised by a scheduled event callback."""

    def __init__(self, *, event_id: str, kind: str, underlying: BaseException) -> None:
        self.event_id = event_id
        self.kind = kind
        self.underlying = underlying
        super().__init__(
            f"Callback for event {event_id} of kind '{kind}' failed: {underlying!r}"
        )


__all__ = [
    "PopulaceError",
    "InvalidArgument",
    "NotFound",
    "DuplicateAgent",
    "OracleUnavailable",
    "EventCallbackFailure",
]
