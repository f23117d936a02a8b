from __future__ import annotations

from typing import Iterable


class SchedulingError(RuntimeError):
    """Base class for every error raised by the scheduling core."""

    retryable = False


class ParseError(SchedulingError, ValueError):
    """Raised when a 12-hour time label cannot be parsed."""
    pass


class InvalidTransition(SchedulingError):
    """Raised when an action is not permitted from the current state."""

    def __init__(self, action: str, state: str) -> None:
        super().__init__(f"Cannot {action} from {state}")
        self.action = action
        self.state = state


class SlotConflict(SchedulingError):
    """Raised when the target slot is already occupied (HTTP 409 equivalent)."""

    retryable = True


class StepIncomplete(SchedulingError):
    """Raised when the booking wizard cannot leave a step yet."""

    def __init__(self, step: str, missing: Iterable[str]) -> None:
        self.step = step
        self.missing = tuple(missing)
        detail = ", ".join(self.missing) or "no further step"
        super().__init__(f"Step {step} is incomplete: {detail}")


class NotFound(SchedulingError):
    """Raised when a salon, appointment or other resource does not exist."""
    pass


class InvalidRequest(SchedulingError):
    """Raised when a request is malformed or fails validation."""
    pass


class ServerError(SchedulingError):
    """Raised when the salon backend fails with a 5xx response."""
    pass


class NetworkError(SchedulingError):
    """Raised when the salon backend cannot be reached."""

    retryable = True


class PersistenceError(SchedulingError):
    """Raised when an appointment cannot be saved."""
    pass
