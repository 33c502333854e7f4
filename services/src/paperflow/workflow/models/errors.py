"""Wire shape of workflow failures returned to HTTP clients."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ..service_errors import WorkflowError

__all__ = ["ErrorResponse"]


class ErrorResponse(BaseModel):
    """Envelope carrying a stable error code plus the trace id of the request."""

    model_config = ConfigDict(extra="forbid")

    code: str = Field(min_length=1)
    message: str = Field(min_length=1)
    details: dict[str, Any] = Field(default_factory=dict)
    trace_id: str = Field(min_length=1)

    @classmethod
    def for_error(cls, exc: "WorkflowError", trace_id: str, details: dict[str, Any] | None = None) -> "ErrorResponse":
        return cls(
            code=exc.code,
            message=exc.message,
            details=exc.details if details is None else details,
            trace_id=trace_id,
        )
