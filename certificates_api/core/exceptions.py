from fastapi import Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

logger = logging.getLogger("uvicorn.error")

class CustomHTTPException(Exception):
    """A custom HTTPException that we can use for additional context."""
    def __init__(self, status_code: int, detail: str, error_code: str = None, headers: dict = None):
        self.status_code = status_code
        self.detail = detail
        self.error_code = error_code
        self.headers = headers
        super().__init__(detail)  # Initialize the base Exception with the detail message


class CertificateValidationError(CustomHTTPException):
    """Required input is missing; nothing was written."""
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail, error_code="validation_error")


class CertificateNotFoundError(CustomHTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail, error_code="not_found")


class StorageError(CustomHTTPException):
    """The relational store or the blob store rejected a call."""
    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=detail, error_code="storage_error")


class ImageTooLargeError(CustomHTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=413, detail=detail, error_code="image_too_large")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported the same way as missing fields."""
    logger.error(f"Validation error on {request.url}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "بيانات غير صالحة"},
    )

async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render every HTTP error as {"error": <message>}."""
    if isinstance(exc, CustomHTTPException):
        logger.error(f"Custom HTTP error on {request.url}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers or {},
        )
    elif isinstance(exc, StarletteHTTPException):
        logger.error(f"HTTP error on {request.url}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers or {},
        )

    logger.error(f"Unexpected error on {request.url}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred"},
    )
