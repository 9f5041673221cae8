"""
Asana project task extractor with bearer authentication and retry logic.

This module provides paginated extraction with:
- Exponential backoff retry for timeouts, connection errors and 5xx
- Rate limit handling (HTTP 429, honouring Retry-After)
- Typed errors for authentication, missing resources and bad responses
- A request timeout on every call
"""

import httpx
import asyncio
from typing import Dict, Any, Optional
from ingestion.base import TaskSource
from schemas.task import TaskPage
from core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ResourceNotFoundError,
    SourceResponseError,
)
import logging

logger = logging.getLogger(__name__)

ASANA_API_BASE = "https://app.asana.com/api/1.0"

OPT_FIELDS = ",".join([
    "gid",
    "name",
    "notes",
    "completed",
    "completed_at",
    "due_on",
    "assignee",
    "assignee.name",
    "assignee.email",
    "custom_fields",
    "custom_fields.name",
    "custom_fields.display_value",
    "custom_fields.number_value",
    "custom_fields.enum_value",
    "tags",
    "tags.name",
])


class AsanaExtractor(TaskSource):
    """
    Read every task of one Asana project.

    Features:
    - Bearer token authentication
    - Offset pagination (``next_page.offset``)
    - Retry logic with exponential backoff
    - Injectable ``httpx.AsyncClient`` for tests

    Attributes:
        max_retries: Maximum number of attempts per request (default: 3)
        retry_delay: Initial retry delay in seconds (default: 1.0)
        timeout: Request timeout in seconds (default: 30.0)
    """

    def __init__(
        self,
        access_token: Optional[str],
        project_id: Optional[str],
        api_base: str = ASANA_API_BASE,
        page_size: int = 100,
        max_pages: int = 500,
        max_duration_seconds: float = 300.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(
            source_name="asana",
            page_size=page_size,
            max_pages=max_pages,
            max_duration_seconds=max_duration_seconds
        )
        self.access_token = access_token
        self.project_id = project_id
        self.api_base = api_base.rstrip("/")
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings, client: Optional[httpx.AsyncClient] = None) -> "AsanaExtractor":
        return cls(
            access_token=settings.ASANA_ACCESS_TOKEN,
            project_id=settings.ASANA_PROJECT_ID,
            api_base=settings.ASANA_API_BASE,
            page_size=settings.SYNC_PAGE_SIZE,
            max_pages=settings.SYNC_MAX_PAGES,
            max_duration_seconds=settings.SYNC_MAX_DURATION_SECONDS,
            max_retries=settings.MAX_RETRIES,
            retry_delay=settings.RETRY_DELAY,
            timeout=settings.SYNC_REQUEST_TIMEOUT,
            client=client
        )

    @property
    def tasks_url(self) -> str:
        return f"{self.api_base}/projects/{self.project_id}/tasks"

    def validate_config(self) -> None:
        missing = []
        if not self.access_token:
            missing.append("ASANA_ACCESS_TOKEN")
        if not self.project_id:
            missing.append("ASANA_PROJECT_ID")
        if missing:
            raise ConfigurationError(
                f"Missing {' or '.join(missing)}",
                context={"missing": missing}
            )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _make_request_with_retry(
        self,
        url: str,
        headers: Dict[str, str],
        params: Dict[str, Any]
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic and exponential backoff.

        Returns:
            A 2xx response

        Raises:
            AuthenticationError: 401 or 403
            ResourceNotFoundError: 404
            RateLimitError: 429 after the last attempt
            NetworkError: Timeout, connection failure or 5xx after the last attempt
            SourceResponseError: Any other non-2xx status
        """
        client = self._get_client()

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            delay = self.retry_delay * (2 ** attempt)

            try:
                logger.debug(f"Request attempt {attempt + 1}/{self.max_retries} to {url}")
                response = await client.get(url, headers=headers, params=params, timeout=self.timeout)

            except httpx.TimeoutException as e:
                if last_attempt:
                    raise NetworkError(
                        f"Request timeout after {self.max_retries} attempts",
                        context={"api_url": url, "timeout": self.timeout, "retry_count": attempt + 1},
                        original_exception=e
                    )
                logger.warning(f"Request timeout. Retrying in {delay} seconds")
                await asyncio.sleep(delay)
                continue

            except httpx.TransportError as e:
                if last_attempt:
                    raise NetworkError(
                        f"Network error after {self.max_retries} attempts",
                        context={"api_url": url, "retry_count": attempt + 1},
                        original_exception=e
                    )
                logger.warning(f"Network error. Retrying in {delay} seconds")
                await asyncio.sleep(delay)
                continue

            status = response.status_code

            if status in (401, 403):
                raise AuthenticationError(
                    f"Asana API error: {status} - {response.text[:500]}",
                    context={"status_code": status, "api_url": url}
                )

            if status == 404:
                raise ResourceNotFoundError(
                    f"Asana API error: 404 - {response.text[:500]}",
                    context={"status_code": 404, "api_url": url}
                )

            if status == 429:
                retry_after = self._retry_after(response, delay)
                if last_attempt:
                    raise RateLimitError(
                        f"Rate limit exceeded for {url}",
                        context={"status_code": 429, "api_url": url, "retry_count": attempt + 1},
                        retry_after=retry_after
                    )
                logger.warning(f"Rate limited. Retrying after {retry_after} seconds")
                await asyncio.sleep(retry_after)
                continue

            if status >= 500:
                if last_attempt:
                    raise NetworkError(
                        f"Asana API error: {status} - {response.text[:500]}",
                        context={"status_code": status, "api_url": url, "retry_count": attempt + 1}
                    )
                logger.warning(
                    f"Server error {status}. "
                    f"Retrying in {delay} seconds (attempt {attempt + 1}/{self.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            if not 200 <= status < 300:
                raise SourceResponseError(
                    f"Asana API error: {status} - {response.text[:500]}",
                    context={"status_code": status, "api_url": url}
                )

            return response

        # Unreachable: the last attempt always returns or raises
        raise NetworkError("Max retries exceeded", context={"api_url": url})

    @staticmethod
    def _retry_after(response: httpx.Response, default: float) -> float:
        value = response.headers.get("Retry-After")
        if value is None:
            return default
        try:
            return max(0.0, float(value))
        except ValueError:
            return default

    async def fetch_page(self, offset: Optional[str] = None) -> TaskPage:
        """Fetch one page of project tasks."""
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json"
        }
        params: Dict[str, Any] = {"opt_fields": OPT_FIELDS, "limit": self.page_size}
        if offset:
            params["offset"] = offset

        response = await self._make_request_with_retry(self.tasks_url, headers, params)

        try:
            data = response.json()
        except ValueError as e:
            raise SourceResponseError(
                "Failed to parse JSON response",
                context={"api_url": self.tasks_url, "response_body": response.text[:500]},
                original_exception=e
            )

        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise SourceResponseError(
                "Unexpected response shape: missing 'data' list",
                context={"api_url": self.tasks_url}
            )

        next_page = data.get("next_page") or {}
        next_offset = next_page.get("offset") if isinstance(next_page, dict) else None

        records = [record for record in data["data"] if isinstance(record, dict)]
        dropped = len(data["data"]) - len(records)
        if dropped:
            logger.warning(
                f"Skipping {dropped} non-object task records on page",
                extra={"error_context": {"api_url": self.tasks_url, "offset": offset, "records": dropped}}
            )

        return TaskPage(records=records, next_offset=next_offset)
