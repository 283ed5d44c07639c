"""Main entrypoint and application factory for the MoneyWhisper API.

This module initializes the FastAPI application, configures logging, creates the tables and
seeds the categories at startup, renders every failure as a JSON error envelope, and exposes
the Scalar API reference endpoint for interactive OpenAPI documentation. It also includes the
main entrypoint for running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes import router
from app.core.db import Base, CategoryStore, SessionLocal, engine
from app.core.errors import InvalidInputError, MoneyWhisperError
from app.core.models import ErrorResponse
from app.core.seed import load_category_config, seed_categories
from app.core.settings import get_settings
from app.core.utils import LOG_FORMAT, ROOT_LOGGER, ensure_dir, get_logger

logger = get_logger("money-whisper.api")


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure logging to file and console, and ensure the log directory exists."""
    settings = get_settings()
    log_path = Path(settings.log_file)
    ensure_dir(log_path.parent)
    root = get_logger(ROOT_LOGGER)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    # Add file handler for persistent logs (not colorized)
    if not any(isinstance(h, logging.FileHandler) for h in root.handlers):
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler to create the tables and seed the category table on first run."""
    _ = app  # Silence unused argument warning
    settings = get_settings()
    try:
        Base.metadata.create_all(engine)
        with SessionLocal() as session:
            seed_categories(CategoryStore(session), load_category_config(settings.categories_file))
    except (SQLAlchemyError, MoneyWhisperError):
        logger.exception("Failed to initialize the expense database")
        raise
    yield
    engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="MoneyWhisper API",
    description="""
    The MoneyWhisper API records personal expenses from free-text descriptions and summarizes spending.

    **Endpoints:**
    - `POST /expense`: Extract and save an expense with the LLM (`{"text": "pizza for 300 rupees at Dominos"}`).
    - `POST /extract-data`: Extract and save an expense with the built-in pattern matcher.
    - `GET /expenses`: Today's expenses.
    - `GET /categories`: All categories.
    - `GET /insights`: Per-category totals for a date range (`startDate`, `endDate`, `categoryId`).
    - `GET /expense-projections`: LLM projection of this month's total spending.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
app.include_router(router)


def _error_response(status_code: int, message: str, raw_response: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, raw_response=raw_response)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))


@app.exception_handler(MoneyWhisperError)
async def money_whisper_error_handler(request: Request, exc: MoneyWhisperError) -> JSONResponse:
    """Render a domain error as a JSON envelope with its HTTP status."""
    logger.error(f"{request.method} {request.url.path} failed ({exc.status_code}): {exc.message}")
    if exc.raw_response:
        logger.error(f"Raw LLM response: {exc.raw_response}")
    return _error_response(exc.status_code, exc.message, exc.raw_response)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and query parameters as 400 invalid input."""
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.errors()}")
    return _error_response(InvalidInputError.status_code, InvalidInputError.default_message)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so every failure still gets a JSON envelope."""
    logger.exception(f"Unhandled error in {request.method} {request.url.path}", exc_info=exc)
    return _error_response(500, "Failed to process the request. Please try again.")


@app.middleware("http")
async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Log every request with its response status."""
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> HTMLResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
