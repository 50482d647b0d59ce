"""Custom exception classes and handlers."""

from collections.abc import Iterable

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse


class BusinessLogicError(Exception):
    """Raised for domain-specific validation errors."""

    def __init__(self, detail: str, status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class ValidationError(BusinessLogicError):
    """Malformed or missing input that passed schema validation."""


class NotFoundError(BusinessLogicError):
    def __init__(self, detail: str):
        super().__init__(detail, status_code=status.HTTP_404_NOT_FOUND)


class InvalidTransitionError(BusinessLogicError):
    """A status change the lifecycle does not allow."""

    def __init__(self, detail: str):
        super().__init__(detail, status_code=status.HTTP_409_CONFLICT)


class PricingError(BusinessLogicError):
    """Requested inventory items could not be priced.

    ``unresolved_ids`` keeps first-seen order with repeats removed.
    """

    def __init__(self, unresolved_ids: Iterable[str]):
        self.unresolved_ids = list(dict.fromkeys(unresolved_ids))
        super().__init__(f"Unknown inventory items: {', '.join(self.unresolved_ids)}")


class GatewayError(BusinessLogicError):
    """The SMS provider rejected the message or could not be reached."""

    def __init__(self, detail: str):
        super().__init__(detail, status_code=status.HTTP_502_BAD_GATEWAY)


class PersistenceError(BusinessLogicError):
    def __init__(self, detail: str):
        super().__init__(detail, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI app."""

    @app.exception_handler(BusinessLogicError)
    async def _business_error_handler(_: FastAPI, exc: BusinessLogicError):
        body = {"success": False, "message": exc.detail, "error": exc.detail}
        if isinstance(exc, PricingError):
            body["unresolved_ids"] = exc.unresolved_ids
        return JSONResponse(body, status_code=exc.status_code)
