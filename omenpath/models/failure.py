"""
Failure classification: row failures and the API response envelope.

Two kinds of failure exist in a conversion:

- Row failures: one input row could not be identified. These are never
  raised. They travel on the row's ConversionOutcome as a FailureKind so
  that one bad row never aborts a batch or the conversion.
- Request failures: the input as a whole cannot be converted (unparseable
  text, undetectable format). These are raised as KnownError and turned
  into an ApiResponse envelope at the API boundary.

INVARIANT: No raw 500 errors may reach an API caller. Unexpected exceptions
are wrapped with create_unknown_failure().
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Why a row or a request could not be converted."""

    # Row-scoped failures produced by the lookup pipeline
    NO_IDENTIFIER = "no_identifier"
    NOT_FOUND = "not_found"
    SERVICE_ERROR = "service_error"
    VALIDATION_MISMATCH = "validation_mismatch"

    # Request-scoped failures
    INVALID_INPUT = "invalid_input"
    UNKNOWN_FORMAT = "unknown_format"
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """Top-level result of an API call."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """What went wrong with a request, in terms the uploader can act on."""

    kind: FailureKind = Field(
        ...,
        description="Failure category",
    )
    message: str = Field(
        ...,
        description="Explanation shown to the uploader",
    )
    detail: str | None = Field(
        default=None,
        description="Parser or detector detail, e.g. the headers that were seen",
    )
    suggestion: str | None = Field(
        default=None,
        description="How to fix the upload, if known",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by every conversion endpoint."""

    outcome: OutcomeType = Field(
        ...,
        description="success, known_failure or unknown_failure",
    )
    data: T | None = Field(
        default=None,
        description="Endpoint payload; null unless outcome is success",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Set whenever outcome is not success",
    )

    # set by finalize_response(); never serialized
    _finalized: bool = PrivateAttr(default=False)


class KnownError(Exception):
    """
    A request-level failure the system can explain.

    Raised for structurally unusable input. The API layer converts it to a
    known_failure envelope with ``status_code``.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to a finalized ApiResponse."""
        return finalize_response(
            ApiResponse(
                outcome=OutcomeType.KNOWN_FAILURE,
                failure=FailureDetail(
                    kind=self.kind,
                    message=self.message,
                    detail=self.detail,
                    suggestion=self.suggestion,
                ),
            )
        )


class UnknownFormatError(KnownError):
    """Raised when no registered format scores above the detection floor."""

    def __init__(self, headers: list[str]):
        self.headers = headers
        super().__init__(
            kind=FailureKind.UNKNOWN_FORMAT,
            message="Could not detect the export format of this file.",
            detail=f"Headers: {', '.join(headers) if headers else '(none)'}",
            suggestion="Choose the source format explicitly.",
            status_code=422,
        )


# =============================================================================
# RESPONSE BOUNDARY
# =============================================================================

UNKNOWN_FAILURE_MESSAGE = "The conversion failed unexpectedly. Try again or simplify the file."
UNKNOWN_FAILURE_SUGGESTION = "If this persists, please report the issue."


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Check an envelope's shape and mark it as finalized.

    Raises:
        ValueError: If a success carries failure details or a failure lacks them
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    elif response.failure is None:
        raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True
    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through finalize_response()."""
    return response._finalized


def create_success(data: T) -> ApiResponse[T]:
    """Create a finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create a finalized unknown failure response from an exception.

    Only the exception type is exposed, never its message.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=UNKNOWN_FAILURE_MESSAGE,
            detail=type(exception).__name__,
            suggestion=UNKNOWN_FAILURE_SUGGESTION,
        ),
    )
    return finalize_response(response)
