from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class LabRecordException(HTTPException):
    """HTTP error with a per-class status code and default message.

    Denied authorization and missing resources share ``NotFoundException`` so
    callers cannot tell hidden rows from missing ones.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail, headers=headers)

class NotFoundException(LabRecordException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"

class BadRequestException(LabRecordException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"

class UnauthorizedException(LabRecordException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"

# Rejected input: marks out of range, empty code, unknown language or role,
# forbidden status transitions
class ValidationException(LabRecordException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Validation error"

# Uniqueness violation; the caller may retry as an update
class ConflictException(LabRecordException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"

# The execution sandbox failed or timed out; never retried here
class UpstreamException(LabRecordException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Upstream service error"

class InternalServerException(LabRecordException):
    pass
