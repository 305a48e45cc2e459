from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)


class NavigationError(Exception):
    """
    Raised when a page could not be navigated to at all.

    This is the only failure that aborts an extraction request; everything
    that goes wrong after the page has loaded is reported as a warning on
    the evidence document instead.
    """

    def __init__(
        self,
        url: str,
        *,
        status: Optional[int] = None,
        timed_out: bool = False,
        reason: Optional[str] = None,
    ):
        self.url = url
        self.status = status
        self.timed_out = timed_out
        self.reason = reason
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.timed_out:
            return f"Navigation to {self.url} timed out"
        if self.status is not None:
            return f"Failed to load page {self.url}: HTTP {self.status}"
        return f"Failed to load page {self.url}: {self.reason or 'unknown error'}"

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status,
            "timed_out": self.timed_out,
            "reason": self.reason,
        }


def add_exception_handlers(app):
    @app.exception_handler(NavigationError)
    async def navigation_exception_handler(request: Request, exc: NavigationError):
        logger.warning(f"Navigation failed: {exc}")
        return api_response(
            message=str(exc),
            status_code=status.HTTP_502_BAD_GATEWAY,
            data=exc.to_dict(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
