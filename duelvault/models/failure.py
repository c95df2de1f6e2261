"""
Failure Envelope and Domain Results.

Two layers live here:

1. Domain results. Every deck-rule and resolution outcome is returned as an
   ``Ok`` or ``Err`` value, never raised. Callers branch on ``is_ok``.
2. The API envelope. Routers convert results into ``ApiResponse`` so every
   user-visible failure carries a classification and a message.

INVARIANT: Expected rule violations never surface as raw exceptions.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of domain failures."""

    # Malformed input: quantity range, missing required field
    VALIDATION = "validation_error"

    # Caller does not own the deck
    AUTHORIZATION = "authorization_error"

    # Card, deck or entry absent
    NOT_FOUND = "not_found_error"

    # Deck construction rules
    PLACEMENT = "placement_error"
    SIZE = "size_error"
    FORBIDDEN = "forbidden_error"
    LIMIT = "limit_error"

    # Catalog code could not be resolved
    RESOLUTION = "resolution_error"


# HTTP status used when a domain error crosses the API boundary
STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PLACEMENT: 400,
    ErrorKind.SIZE: 400,
    ErrorKind.FORBIDDEN: 400,
    ErrorKind.LIMIT: 400,
    ErrorKind.RESOLUTION: 404,
}

MAX_SUGGESTIONS = 5


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: ErrorKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    suggestions: list[str] = Field(
        default_factory=list,
        description="Alternative codes or actions the user can try",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for all API endpoints.

    Success carries ``data``; failure carries ``failure``. Never both.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: ErrorKind,
        message: str,
        suggestions: list[str] | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                suggestions=suggestions or [],
            ),
        )


@dataclass(frozen=True, slots=True)
class DeckError:
    """
    A classified, user-facing domain failure.

    Attributes:
        kind: Failure classification
        message: Explanation suitable for display
        suggestions: Up to five alternatives (e.g. similar set codes)
    """

    kind: ErrorKind
    message: str
    suggestions: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.suggestions) > MAX_SUGGESTIONS:
            object.__setattr__(self, "suggestions", self.suggestions[:MAX_SUGGESTIONS])

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            suggestions=list(self.suggestions),
        )


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying a classified error."""

    error: DeckError

    @property
    def is_ok(self) -> bool:
        return False


Result = Ok[T] | Err


def err(kind: ErrorKind, message: str, suggestions: Sequence[str] = ()) -> Err:
    """Shorthand for building an ``Err``."""
    return Err(DeckError(kind=kind, message=message, suggestions=tuple(suggestions)))
