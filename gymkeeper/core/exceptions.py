"""
Domain error taxonomy and its HTTP translation

Services raise these; routers never build error responses by hand. The
handler registered on the app turns each one into a JSON body carrying a
stable ``code`` so clients can tell a retryable failure from a final one.
"""

from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class GymKeeperError(Exception):
    """Base exception for business rule violations"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(GymKeeperError):
    """Input is missing, malformed or violates a domain rule"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> Dict:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class NotFoundError(GymKeeperError):
    """Referenced record does not exist"""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(GymKeeperError):
    """A uniqueness rule was violated"""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class AlreadyMarkedError(ConflictError):
    """Attendance already exists for this member and day"""

    code = "already_marked"

    def __init__(self, message: str = "Attendance already marked"):
        super().__init__(message)


class AuthenticationError(GymKeeperError):
    """Credentials are missing or invalid"""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_failed"


class AuthorizationError(GymKeeperError):
    """Record belongs to another tenant"""

    status_code = status.HTTP_403_FORBIDDEN
    code = "access_denied"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class TransactionError(GymKeeperError):
    """A multi-record write was rolled back; nothing was committed"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "transaction_failed"


class AggregationDataError(GymKeeperError):
    """A ledger record references a member that no longer resolves.

    Raised and caught inside the aggregation layer only; a report skips the
    record instead of failing.
    """

    code = "orphan_record"

    def __init__(self, record_id, member_id):
        super().__init__(f"Record {record_id} references missing member {member_id}")
        self.record_id = record_id
        self.member_id = member_id


async def gymkeeper_error_handler(request: Request, exc: GymKeeperError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GymKeeperError, gymkeeper_error_handler)
