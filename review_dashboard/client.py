"""Review data access over the dashboard's HTTP API."""

import asyncio
from typing import Any, Protocol, TypeVar
from urllib.parse import quote

import httpx
from aiolimiter import AsyncLimiter
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PayloadError
from rich.progress import Progress, SpinnerColumn, TextColumn
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .constants import (
    API_ANALYTICS_ENDPOINT,
    API_REVIEW_ENDPOINT,
    API_TAGS_ENDPOINT,
    AUTHORIZATION_HEADER,
    BEARER_PREFIX,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RATE_LIMIT,
    FIRST_PAGE,
    HTTP_UNAUTHORIZED,
    ApiRequestKey,
    ApiResponseKey,
    LogMessage,
    NotifyMessage,
)
from .errors import SessionExpired, TransportFailure, Unauthorized
from .models import Review, ReviewPage, TagUpdate

ModelT = TypeVar("ModelT", bound=BaseModel)


class ReviewDataSource(Protocol):
    """Remote operations the dashboard depends on.

    Every method may raise ``Unauthorized`` (no credential),
    ``SessionExpired`` (credential rejected) or ``TransportFailure``.
    """

    async def fetch_page(
        self, page: int, page_size: int, credential: str | None
    ) -> ReviewPage: ...

    async def fetch_all(
        self, credential: str | None, *, total_hint: int | None = None
    ) -> list[Review]: ...

    async def fetch_analytics_summary(self, credential: str | None) -> dict[str, Any]: ...

    async def persist_tag_update(
        self, review_id: str, update: TagUpdate, credential: str | None
    ) -> Review: ...


class PaginationPayload(BaseModel):
    """Pagination block of a review list response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_page: int = Field(
        default=FIRST_PAGE, alias="currentPage", ge=1, description="Page returned"
    )
    total_pages: int = Field(
        default=1, alias="totalPages", ge=0, description="Number of pages"
    )
    total_reviews: int = Field(
        default=0, alias="totalReviews", ge=0, description="Number of reviews overall"
    )
    limit: int = Field(
        default=DEFAULT_PAGE_SIZE, gt=0, description="Page size used by the server"
    )


class ReviewListResponse(BaseModel):
    """Body of ``GET review``."""

    model_config = ConfigDict(extra="ignore")

    reviews: list[dict[str, Any]] = Field(
        default_factory=list, description="Raw review objects"
    )
    pagination: PaginationPayload | None = Field(
        default=None, description="Pagination metadata, if the server sent it"
    )


class TagUpdateResponse(BaseModel):
    """Body of ``PATCH review/{id}/tags`` when the review is wrapped."""

    model_config = ConfigDict(extra="ignore")

    review: dict[str, Any] = Field(description="The updated review")


def _validate(model: type[ModelT], data: Any, endpoint: str) -> ModelT:
    try:
        return model.model_validate(data)
    except PayloadError as e:
        logger.error(LogMessage.REQUEST_FAILED.format(endpoint, e))
        raise TransportFailure(f"Malformed response from {endpoint}") from e


class ReviewApiClient:
    """Talks to the review API.

    Attributes:
        base_url: Base URL of the API, always ending with a slash.
        semaphore: Asyncio semaphore limiting concurrent requests.
        rate_limiter: AsyncLimiter limiting requests per second.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        rate_limit: int = DEFAULT_RATE_LIMIT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the ReviewApiClient.

        Args:
            base_url: Base URL of the API.
            timeout: Request timeout in seconds.
            max_concurrency: Maximum requests in flight at once.
            rate_limit: Maximum requests per second.
            transport: Optional httpx transport, mainly for tests.
        """
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.semaphore = asyncio.Semaphore(max_concurrency)
        self.rate_limiter = AsyncLimiter(max_rate=rate_limit, time_period=1)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "ReviewApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_page(
        self, page: int, page_size: int, credential: str | None
    ) -> ReviewPage:
        """Fetch one page of reviews.

        Args:
            page: 1-based page number.
            page_size: Reviews per page.
            credential: Bearer token.

        Returns:
            ReviewPage: The page with the server's total review count.
        """
        logger.debug(LogMessage.FETCHING_PAGE.format(page, page_size))
        data = await self._request(
            "GET",
            API_REVIEW_ENDPOINT,
            credential=credential,
            params={ApiRequestKey.PAGE.value: page, ApiRequestKey.LIMIT.value: page_size},
        )
        body = _validate(ReviewListResponse, data, API_REVIEW_ENDPOINT)
        records = [Review.from_dict(data=item) for item in body.reviews]

        if body.pagination is None:
            return ReviewPage(
                records=records, total_count=len(records), page=page, page_size=page_size
            )

        logger.debug(
            LogMessage.RETRIEVED_PAGE.format(
                len(records), body.pagination.current_page, body.pagination.total_reviews
            )
        )
        return ReviewPage(
            records=records,
            total_count=body.pagination.total_reviews,
            page=body.pagination.current_page,
            page_size=body.pagination.limit,
        )

    async def fetch_all(
        self, credential: str | None, *, total_hint: int | None = None
    ) -> list[Review]:
        """Fetch every review in a single request.

        The API has no "all" endpoint, so the first page is requested with a
        limit equal to the total review count. Without a hint the total is
        learned from a one-review probe request first.

        Args:
            credential: Bearer token.
            total_hint: Total review count, if already known from a page fetch.

        Returns:
            list[Review]: Every review.
        """
        total = total_hint
        if total is None:
            probe = await self.fetch_page(FIRST_PAGE, 1, credential)
            total = probe.total_count
            if total <= len(probe.records):
                return probe.records

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(LogMessage.FETCHING_ALL.format(total), total=None)
            page = await self.fetch_page(FIRST_PAGE, max(total, 1), credential)

        logger.success(LogMessage.FETCHED_ALL.format(len(page.records)))
        return page.records

    async def fetch_analytics_summary(self, credential: str | None) -> dict[str, Any]:
        """Fetch the server-side analytics summary as an opaque dictionary."""
        data = await self._request("GET", API_ANALYTICS_ENDPOINT, credential=credential)
        if not isinstance(data, dict):
            raise TransportFailure(f"Malformed response from {API_ANALYTICS_ENDPOINT}")
        return data

    async def persist_tag_update(
        self, review_id: str, update: TagUpdate, credential: str | None
    ) -> Review:
        """Send a tag update and return the canonical updated review."""
        endpoint = API_TAGS_ENDPOINT.format(review_id=quote(review_id, safe=""))
        data = await self._request(
            "PATCH", endpoint, credential=credential, json=update.to_payload()
        )

        if isinstance(data, dict) and isinstance(data.get(ApiResponseKey.REVIEW), dict):
            data = _validate(TagUpdateResponse, data, endpoint).review
        if not isinstance(data, dict):
            raise TransportFailure(f"Malformed response from {endpoint}")

        review = Review.from_dict(data=data)
        if not review.id:
            raise TransportFailure(f"Updated review from {endpoint} has no id")
        return review

    async def _request(
        self, method: str, endpoint: str, *, credential: str | None, **kwargs: Any
    ) -> Any:
        """Send an authorized request and decode its JSON body.

        Raises:
            Unauthorized: If no credential is available.
            SessionExpired: If the server answers 401.
            TransportFailure: On network errors, other HTTP errors or bad JSON.
        """
        if not credential:
            raise Unauthorized(NotifyMessage.NO_TOKEN)

        headers = {AUTHORIZATION_HEADER: f"{BEARER_PREFIX} {credential}"}
        try:
            response = await self._send(method, endpoint, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.error(LogMessage.REQUEST_FAILED.format(endpoint, e))
            raise TransportFailure(f"Could not reach {endpoint}: {e}") from e

        if response.status_code == HTTP_UNAUTHORIZED:
            logger.warning(LogMessage.SESSION_EXPIRED.format(endpoint))
            raise SessionExpired(NotifyMessage.SESSION_EXPIRED)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(LogMessage.REQUEST_FAILED.format(endpoint, e))
            raise TransportFailure(
                f"{endpoint} answered with status {response.status_code}"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(LogMessage.REQUEST_FAILED.format(endpoint, e))
            raise TransportFailure(f"Invalid JSON from {endpoint}") from e

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(DEFAULT_MAX_RETRIES),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Send a request with rate limiting, retrying transport errors."""
        async with self.semaphore:
            async with self.rate_limiter:
                return await self._client.request(method, endpoint, **kwargs)
