from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from expense_categorizer.api.schemas import ErrorResponse
from expense_categorizer.core.errors import CategorizationError
from expense_categorizer.logger import get_logger

logger = get_logger(__name__)


async def handle_categorization_error(request: Request, exc: CategorizationError) -> JSONResponse:
    logger.warning(
        "[API] %s %s -> %d %s: %s",
        request.method,
        request.url.path,
        exc.http_status,
        exc.error_code,
        exc.message,
    )
    body = ErrorResponse(error=exc.error_code, message=exc.message)
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CategorizationError, handle_categorization_error)
