# orderdesk/core/errors.py
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ValidationFailed(HTTPException):
    """
    Rejected input: blank required field or malformed value.
    Raised before anything is written.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFound(HTTPException):
    """Operation on an order id that does not exist."""

    def __init__(self, detail: str = "Order not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConstraintViolation(HTTPException):
    """
    Integrity failure the service could not recover from, e.g. a
    reference row that vanished between insert-if-absent and re-select.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Report request-validation errors as 400, the same status
    ValidationFailed uses, so clients see one shape for rejected input.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,  # noqa
        exc: RequestValidationError,
    ) -> JSONResponse:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            message = error.get("msg", "")
            if message.startswith("Value error, "):
                message = message[len("Value error, ") :]
            messages.append(f"{location}: {message}" if location else message)

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "; ".join(messages) or "Invalid request data"},
        )
