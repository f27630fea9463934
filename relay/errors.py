# relay/errors.py
"""
Failure kinds of a /calculate invocation and their HTTP mapping.

Both kinds currently produce the same opaque 500 payload; the cause is only
ever written to the server log.
"""

from typing import Dict, Tuple, Type

from fastapi.responses import JSONResponse

CALCULATION_FAILED = "Failed to process calculation"


class RelayError(Exception):
    kind = "internal"


class UpstreamError(RelayError):
    """The compute collaborator was unreachable, timed out, or answered badly."""

    kind = "upstream"


class PersistenceError(RelayError):
    """The process_logs insert failed after a successful compute call."""

    kind = "persistence"


# kind -> (status_code, message)
_ERROR_MAP: Dict[Type[RelayError], Tuple[int, str]] = {
    UpstreamError: (500, CALCULATION_FAILED),
    PersistenceError: (500, CALCULATION_FAILED),
    RelayError: (500, CALCULATION_FAILED),
}


def status_for(exc: RelayError) -> Tuple[int, str]:
    for cls in type(exc).__mro__:
        if cls in _ERROR_MAP:
            return _ERROR_MAP[cls]
    return _ERROR_MAP[RelayError]


def error_response(exc: RelayError) -> JSONResponse:
    status_code, message = status_for(exc)
    return JSONResponse(status_code=status_code, content={"error": message})
