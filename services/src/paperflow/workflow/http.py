"""Translate workflow failures into FastAPI JSON responses.

Hosts register :func:`workflow_error_response` as the handler for
:class:`WorkflowError`; the status code comes from the error table in
``service_errors`` so HTTP semantics stay next to the error codes.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping
from uuid import UUID, uuid4

from fastapi import status
from fastapi.responses import JSONResponse

from .models.errors import ErrorResponse
from .service_errors import ERROR_DEFINITIONS, WorkflowError

LOGGER = logging.getLogger(__name__)

TRACE_ID_HEADER: Final[str] = "x-trace-id"


def trace_id_from(headers: Mapping[str, str] | None) -> str:
    """Reuse the caller's trace id when it is a UUID, otherwise mint one."""

    supplied = (headers or {}).get(TRACE_ID_HEADER)
    if supplied:
        try:
            return str(UUID(supplied))
        except ValueError:
            LOGGER.debug("Discarding malformed trace id %r", supplied)
    return str(uuid4())


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return value


def _render(status_code: int, payload: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(mode="json"),
        headers={TRACE_ID_HEADER: payload.trace_id},
    )


def workflow_error_response(exc: WorkflowError, trace_id: str) -> JSONResponse:
    payload = ErrorResponse.for_error(exc, trace_id, details=_jsonable(exc.details))
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        LOGGER.error(
            "workflow.error",
            extra={"extra_payload": {"code": exc.code, "trace_id": trace_id, "details": payload.details}},
        )
    return _render(exc.status_code, payload)


def internal_error_response(trace_id: str) -> JSONResponse:
    """Opaque 500 for failures that are not workflow errors."""

    definition = ERROR_DEFINITIONS["INTERNAL"]
    payload = ErrorResponse(code=definition.code, message=definition.message, trace_id=trace_id)
    return _render(definition.status_code, payload)


__all__ = [
    "TRACE_ID_HEADER",
    "internal_error_response",
    "trace_id_from",
    "workflow_error_response",
]
