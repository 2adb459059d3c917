from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional

class AppException(HTTPException):
    """Application error carrying a stable error code and optional extra body fields."""
    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code
        self.extra_data = extra_data or {}

def create_error_response(
    status_code: int,
    message: str,
    error_code: Optional[str] = None,
    extra_data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Uniform error body. Extra fields sit at top level so clients can read e.g. `remaining`."""
    response = {
        "success": False,
        "error": {
            "code": error_code or f"ERR_{status_code}",
            "message": message
        },
        "detail": message,
    }

    if extra_data:
        response.update(extra_data)

    return response

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.status_code, exc.detail, exc.error_code, exc.extra_data),
        headers=exc.headers,
    )

class NotFoundException(AppException):
    def __init__(self, resource: str, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail or f"{resource} not found",
            error_code="NOT_FOUND"
        )

class BadRequestException(AppException):
    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
            error_code=error_code or "BAD_REQUEST"
        )

class UnauthorizedException(AppException):
    def __init__(self, message: str = "Unauthorized", extra_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
            error_code="UNAUTHORIZED",
            extra_data=extra_data
        )

class RateLimitException(AppException):
    def __init__(self, limit: int, message: str = "The daily limit for chat messages has been reached. Please try again tomorrow."):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=message,
            error_code="DAILY_LIMIT_REACHED",
            extra_data={"remaining": 0, "limit": limit}
        )

class InternalServerException(AppException):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=message,
            error_code="INTERNAL_ERROR"
        )

class ServiceUnavailableException(AppException):
    def __init__(self, message: str = "Database not configured"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=message,
            error_code="SERVICE_UNAVAILABLE"
        )
