"""
Typed failures raised by the lifecycle engine.

Every error carries a machine-readable code, a human message and a
details dict with enough structure (field, offending value, allowed
transitions) for an operator UI to explain why something failed.
"""
from typing import Any, Iterable, Optional


class DrayageError(Exception):
    """Base class for all engine errors."""

    code: str = "DRAYAGE_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(DrayageError):
    """Bad input shape or range. Caller's fault; never retried."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **kwargs):
        details = {"field": field, "value": _jsonable(value)}
        details.update(kwargs.pop("details", None) or {})
        super().__init__(message, details=details, **kwargs)
        self.field = field
        self.value = value


class TerminalClosedError(ValidationError):
    """Requested gate time falls outside the terminal's operating hours."""

    code = "TERMINAL_CLOSED"

    def __init__(self, terminal_id: Any, requested_time: Any):
        super().__init__(
            "Terminal is closed at requested time",
            field="requested_time",
            value=requested_time,
            details={"terminal_id": _jsonable(terminal_id)},
        )


class NotFoundError(DrayageError):
    code = "NOT_FOUND"

    def __init__(self, resource_type: str, identifier: Any):
        super().__init__(
            f"{resource_type} not found",
            details={"resource_type": resource_type, "identifier": _jsonable(identifier)},
        )
        self.resource_type = resource_type
        self.identifier = identifier


class ConflictError(DrayageError):
    """An active duplicate already exists."""

    code = "CONFLICT"


class InvalidStateError(DrayageError):
    """Illegal state transition attempted."""

    code = "INVALID_STATE"

    def __init__(
        self,
        current_state: Any,
        requested_state: Any,
        allowed: Iterable[Any] = (),
        message: Optional[str] = None,
    ):
        current = _state_name(current_state)
        requested = _state_name(requested_state)
        allowed_names = sorted(_state_name(s) for s in allowed)
        super().__init__(
            message or f"invalid state transition: {current} -> {requested}",
            details={
                "current_state": current,
                "requested_state": requested,
                "allowed": allowed_names,
            },
        )
        self.current_state = current_state
        self.requested_state = requested_state
        self.allowed = allowed_names


class InsufficientResourceError(DrayageError):
    code = "INSUFFICIENT_RESOURCE"

    def __init__(self, resource: str, required: Any = None, available: Any = None, message: Optional[str] = None):
        super().__init__(
            message or f"insufficient {resource}",
            details={
                "resource": resource,
                "required": _jsonable(required),
                "available": _jsonable(available),
            },
        )


class SlotUnavailableError(InsufficientResourceError):
    """Terminal capacity at the requested time is exhausted."""

    code = "SLOT_UNAVAILABLE"

    def __init__(self, terminal_id: Any, requested_time: Any, capacity: Optional[int] = None):
        super().__init__(
            "appointment slot",
            required=1,
            available=0,
            message="No available slots at requested time",
        )
        self.details.update(
            {
                "terminal_id": _jsonable(terminal_id),
                "requested_time": _jsonable(requested_time),
                "capacity": capacity,
            }
        )


class ConfigurationError(DrayageError):
    """Operator-fixable data problem, e.g. an incomplete rate table."""

    code = "CONFIGURATION_ERROR"


class InvalidContainerSize(ConfigurationError):
    code = "INVALID_CONTAINER_SIZE"

    def __init__(self, size: Any, charge_kind: str):
        super().__init__(
            f"no {charge_kind} rates for container size {_state_name(size)}",
            details={"size": _state_name(size), "charge_kind": charge_kind},
        )


def _state_name(value: Any) -> str:
    return str(getattr(value, "value", value))


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(getattr(value, "value", value))
