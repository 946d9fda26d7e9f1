import httpx
from typing import Optional, Dict, Mapping
from loguru import logger
from pydantic import ValidationError

from models import BookDetails, VolumeInfo, VolumeSearchResult

# --- CONFIGURATION ---
GOOGLE_BOOKS_API_HOST = "www.googleapis.com"
GOOGLE_BOOKS_API_PATH = "/books/v1/volumes"

FALLBACK_ISBN = "1234567890"

# Tracing headers worth passing on to the upstream call.
# Credentials (authorization, cookie, jwt) are never forwarded.
FORWARDED_HEADERS = [
    "x-request-id",
    "x-ot-span-context",
    "x-datadog-trace-id",
    "x-datadog-parent-id",
    "x-datadog-sampling-priority",
    "traceparent",
    "tracestate",
    "x-cloud-trace-context",
    "grpc-trace-bin",
    "x-b3-traceid",
    "x-b3-spanid",
    "x-b3-parentspanid",
    "x-b3-sampled",
    "x-b3-flags",
    "sw8",
    "end-user",
    "user-agent",
]

HEADERS = {"Accept": "application/json"}


class ExternalServiceError(Exception):
    """Base class for failures talking to the book-metadata API."""


class ExternalServiceUnavailable(ExternalServiceError):
    pass


class ExternalServiceTimeout(ExternalServiceError):
    pass


class ExternalResponseError(ExternalServiceError):
    pass


class BookNotFoundError(ExternalServiceError):
    pass


def volumes_url(encrypt: bool = True) -> str:
    scheme = "https" if encrypt else "http"
    return f"{scheme}://{GOOGLE_BOOKS_API_HOST}{GOOGLE_BOOKS_API_PATH}"


def forward_headers(incoming: Mapping[str, str]) -> Dict[str, str]:
    headers = {}
    for name in FORWARDED_HEADERS:
        value = incoming.get(name)
        if value is not None:
            headers[name] = value
    return headers


async def search_by_isbn(
    client: httpx.AsyncClient,
    isbn: str,
    api_key: Optional[str] = None,
    encrypt: bool = True,
    headers: Optional[Mapping[str, str]] = None,
) -> VolumeSearchResult:
    """
    Queries the volumes endpoint with q=isbn:<isbn>.
    Raises an ExternalServiceError subclass instead of returning an empty result.
    """
    url = volumes_url(encrypt)
    params = {"q": f"isbn:{isbn}"}
    if api_key:
        params["key"] = api_key

    logger.debug(f"Fetching details for ISBN {isbn} from {url}")
    try:
        resp = await client.get(url, params=params, headers={**HEADERS, **(headers or {})})
        resp.raise_for_status()
    except httpx.TimeoutException as e:
        logger.error(f"Fetching details from external service timed out for ISBN {isbn}: {e!r}")
        raise ExternalServiceTimeout("External book service timed out.") from e
    except httpx.HTTPStatusError as e:
        logger.error(f"External service answered {e.response.status_code} for ISBN {isbn}")
        raise ExternalResponseError(
            f"External book service returned status {e.response.status_code}."
        ) from e
    except httpx.HTTPError as e:
        logger.error(f"Fetching details from external service failed with error {e!r}")
        raise ExternalServiceUnavailable("External book service is unreachable.") from e

    try:
        return VolumeSearchResult.model_validate_json(resp.content)
    except ValidationError as e:
        logger.error(f"Can't parse response from external service for ISBN {isbn}: {e}")
        raise ExternalResponseError("External book service returned an unreadable response.") from e


def _print_type(info: VolumeInfo) -> str:
    if info.printType == "BOOK":
        return "paperback"
    return "unknown"


def _language(info: VolumeInfo) -> str:
    if info.language == "en":
        return "English"
    return "unknown"


def _isbn(kind: str, info: VolumeInfo) -> Optional[str]:
    # First entry of the matching type wins, even when its identifier is empty.
    for identifier in info.industryIdentifiers:
        if identifier.type == kind:
            return identifier.identifier or None
    return FALLBACK_ISBN


def to_book_details(result: VolumeSearchResult, book_id: str) -> BookDetails:
    """
    Reshapes the first search hit into a BookDetails stamped with book_id.
    """
    if not result.items:
        raise BookNotFoundError("Book not found.")

    info = result.items[0].volumeInfo
    return BookDetails(
        id=book_id,
        author=info.authors[0] if info.authors else None,
        year=info.publishedDate or None,
        type=_print_type(info),
        pages=info.pageCount or None,
        publisher=info.publisher or None,
        language=_language(info),
        isbn_10=_isbn("ISBN_10", info),
        isbn_13=_isbn("ISBN_13", info),
    )
