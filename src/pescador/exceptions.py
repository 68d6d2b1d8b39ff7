"""
Exceptions for pescador operations.
"""

from typing import Any, Dict, Optional, Sequence


class ConditionsError(Exception):
    """Base exception for conditions pipeline errors."""

    kind = "conditions_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation safe to hand back to callers."""
        return {"kind": self.kind, "message": self.message}


class MalformedRequest(ConditionsError):
    """Caller payload is missing or has a malformed required field."""

    kind = "malformed_request"


class InvalidQuery(ConditionsError):
    """Geocoding provider rejected the query."""

    kind = "invalid_query"


class NoMatchError(ConditionsError):
    """Geocoding provider returned zero locations."""

    kind = "no_match"


class AmbiguousMatch(ConditionsError):
    """More than one location matched where exactly one was required."""

    kind = "ambiguous_match"

    def __init__(self, message: str = "", options: Optional[Sequence[Any]] = None):
        super().__init__(message)
        self.options = tuple(options or ())

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["options"] = [option.to_dict() for option in self.options]
        return data


class UpstreamError(ConditionsError):
    """A dependency call failed or returned an unusable payload."""

    kind = "upstream_error"


class UpstreamTimeout(UpstreamError):
    """A dependency call or the whole operation exceeded its deadline."""

    kind = "upstream_timeout"
