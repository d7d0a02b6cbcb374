from dataclasses import dataclass
from enum import StrEnum


class ErrorCode(StrEnum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_STATUS_ERROR_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    422: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    429: ErrorCode.RATE_LIMITED,
}


@dataclass(slots=True)
class ApiError(Exception):
    status_code: int
    error_code: ErrorCode
    message: str


def not_found(resource: str) -> ApiError:
    return ApiError(
        status_code=404,
        error_code=ErrorCode.NOT_FOUND,
        message=f"{resource} not found",
    )


def map_status_to_error_code(status_code: int) -> ErrorCode:
    return _STATUS_ERROR_CODES.get(status_code, ErrorCode.INTERNAL_ERROR)


def build_error_payload(error_code: ErrorCode, message: str, request_id: str) -> dict:
    return {
        "error_code": error_code.value,
        "message": message,
        "request_id": request_id,
    }
