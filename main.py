# (v1.0.0) - Book Details: mock record or Google Books proxy
import os
import sys
import httpx
from pathlib import Path
from fastapi import FastAPI, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict
from dotenv import load_dotenv
from typing import Mapping, Optional, Protocol
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from loguru import logger
import google_books
from models import BookDetails, HealthStatus

# --------------------------------------------------------------------
# 1. Configuration & Setup
# --------------------------------------------------------------------

env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)

PORT = 9080
HEALTHY = "Details is healthy"
MISSING_ID_MESSAGE = "please provide product id"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enable_external_book_service: bool = False
    external_book_isbn: str = "0486424618"
    google_api_key: Optional[str] = None
    do_not_encrypt: bool = False
    external_service_timeout: float = 20.0
    rate_limit: str = "100/minute"
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        # Only the exact string "true" switches the external service on.
        return cls(
            enable_external_book_service=os.getenv("ENABLE_EXTERNAL_BOOK_SERVICE") == "true",
            external_book_isbn=os.getenv("EXTERNAL_BOOK_ISBN", "0486424618"),
            google_api_key=os.getenv("GOOGLE_API_KEY") or None,
            do_not_encrypt=os.getenv("DO_NOT_ENCRYPT") == "true",
            external_service_timeout=float(os.getenv("EXTERNAL_SERVICE_TIMEOUT", "20.0")),
            rate_limit=os.getenv("RATE_LIMIT", "100/minute"),
            rate_limit_enabled=os.getenv("RATE_LIMIT_ENABLED", "true") != "false",
            rate_limit_storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        serialize=True,
        enqueue=True,
        level=level,
        format="{time} {level} {message}",
    )


# --------------------------------------------------------------------
# 2. Resolvers
# --------------------------------------------------------------------

MOCK_BOOK_DETAILS = BookDetails(
    author="William Shakespeare",
    year="1595",
    type="paperback",
    pages=200,
    publisher="PublisherX",
    language="English",
    isbn_10="1234567890",
    isbn_13="123-1234567890",
)


class BookResolver(Protocol):
    async def resolve(self, book_id: str, headers: Optional[Mapping[str, str]] = None) -> BookDetails:
        ...


class MockBookResolver:
    """Serves the same hardcoded record for every id."""

    async def resolve(self, book_id: str, headers: Optional[Mapping[str, str]] = None) -> BookDetails:
        return MOCK_BOOK_DETAILS.model_copy(update={"id": book_id})


class ExternalBookResolver:
    """
    Looks up settings.external_book_isbn on Google Books.
    The requested id never selects the book; it is only stamped onto the result.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    async def resolve(self, book_id: str, headers: Optional[Mapping[str, str]] = None) -> BookDetails:
        async with httpx.AsyncClient(
            transport=self.transport, timeout=self.settings.external_service_timeout
        ) as client:
            result = await google_books.search_by_isbn(
                client,
                self.settings.external_book_isbn,
                api_key=self.settings.google_api_key,
                encrypt=not self.settings.do_not_encrypt,
                headers=google_books.forward_headers(headers or {}),
            )
        return google_books.to_book_details(result, book_id)


def build_resolver(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> BookResolver:
    if settings.enable_external_book_service:
        logger.info(f"Using external book service for ISBN {settings.external_book_isbn}")
        return ExternalBookResolver(settings, transport=transport)
    logger.info("Using mock book details")
    return MockBookResolver()


def get_resolver(request: Request) -> BookResolver:
    return request.app.state.resolver


# --------------------------------------------------------------------
# 3. Error Handlers
# --------------------------------------------------------------------

ERROR_STATUS = {
    google_books.BookNotFoundError: status.HTTP_404_NOT_FOUND,
    google_books.ExternalServiceTimeout: status.HTTP_504_GATEWAY_TIMEOUT,
    google_books.ExternalServiceUnavailable: status.HTTP_502_BAD_GATEWAY,
    google_books.ExternalResponseError: status.HTTP_502_BAD_GATEWAY,
}


async def external_service_error_handler(request: Request, exc: google_books.ExternalServiceError):
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_502_BAD_GATEWAY)
    if status_code == status.HTTP_404_NOT_FOUND:
        logger.info(f"No book found for {request.url.path}")
    else:
        logger.warning(f"Upstream failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# --------------------------------------------------------------------
# 4. Application & API Endpoints
# --------------------------------------------------------------------

def create_app(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    app = FastAPI(
        title="Book Details API",
        description="Book details by id, served from a mock record or the Google Books API.",
        version="1.0.0",
    )

    limiter = Limiter(
        key_func=get_remote_address,
        storage_uri=settings.rate_limit_storage_uri,
        enabled=settings.rate_limit_enabled,
    )
    app.state.limiter = limiter
    app.state.resolver = build_resolver(settings, transport=transport)

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(google_books.ExternalServiceError, external_service_error_handler)

    # Not rate limited: probes must always get a 200.
    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def get_health():
        return HealthStatus(status=HEALTHY)

    @app.get("/details/", include_in_schema=False)
    @limiter.limit(settings.rate_limit)
    async def get_details_without_id(request: Request):
        return PlainTextResponse(MISSING_ID_MESSAGE, status_code=status.HTTP_400_BAD_REQUEST)

    @app.get(
        "/details/{id}",
        response_model=BookDetails,
        response_model_exclude_none=True,
        tags=["Books"],
    )
    @limiter.limit(settings.rate_limit)
    async def get_details(request: Request, id: str, resolver: BookResolver = Depends(get_resolver)):
        return await resolver.resolve(id, headers=request.headers)

    return app


settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
