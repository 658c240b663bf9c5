"""HTTP mapping of domain exceptions."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.integrations.fastapi import register_exception_handlers


async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"errors": exc.messages})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers (404 for missing records), then answer validation failures with 422."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, validation_error_handler)
