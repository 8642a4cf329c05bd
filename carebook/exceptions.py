from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class APIException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class SchedulingError(APIException):
    """Base class for expected, user-facing scheduling failures.

    Subclasses fix the HTTP status and a stable machine-readable ``code``;
    ``context`` carries whatever the caller needs to retry meaningfully.
    """

    status_code = 400
    code = "SCHEDULING_ERROR"

    def __init__(self, detail: str, **context: Any):
        super().__init__(status_code=type(self).status_code, detail=detail)
        self.context: Dict[str, Any] = context


class InvalidInput(SchedulingError):
    status_code = 400
    code = "INVALID_INPUT"


class Forbidden(SchedulingError):
    status_code = 403
    code = "FORBIDDEN"


class NotFound(SchedulingError):
    status_code = 404
    code = "NOT_FOUND"


class SlotConflict(SchedulingError):
    """The requested slot is already held by an active appointment.

    The caller should re-query availability and pick another slot; the
    engine never retries on its own.
    """

    status_code = 409
    code = "SLOT_CONFLICT"

    def __init__(self, doctor_id: int, appointment_date: Any, appointment_time: str, detail: Optional[str] = None):
        date_str = str(appointment_date)
        super().__init__(
            detail or "This time slot is already booked",
            doctor_id=doctor_id,
            date=date_str,
            time=appointment_time,
            available_slots_url=f"/appointments/available/{doctor_id}/{date_str}",
        )


class InvalidTransition(SchedulingError):
    status_code = 409
    code = "INVALID_TRANSITION"

    def __init__(self, current: str, target: str, detail: Optional[str] = None):
        super().__init__(
            detail or f"Cannot change appointment status from {current} to {target}",
            current_status=current,
            requested_status=target,
        )


class AlreadyCancelled(SchedulingError):
    status_code = 400
    code = "ALREADY_CANCELLED"


class PersistenceFailure(SchedulingError):
    status_code = 503
    code = "PERSISTENCE_FAILURE"


def create_error_response(error_message: str, status_code: int = 400, code: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> dict:
    """Create a standardized error response"""
    body = {
        "success": False,
        "data": None,
        "error": error_message,
    }
    if code:
        body["code"] = code
    if context:
        body["context"] = context
    return body


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # HTTPBearer answers 403 when the header is missing; report it as 401
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401),
        )

    if isinstance(exc, SchedulingError):
        return JSONResponse(
            status_code=exc.status_code,
            content=create_error_response(exc.detail, exc.status_code, code=exc.code, context=exc.context),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code),
        headers=getattr(exc, "headers", None),
    )
