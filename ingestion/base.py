"""
Abstract base class for paginated task sources with bounded paging
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Set
import logging
import time
from core.exceptions import PaginationLimitError
from schemas.task import TaskPage

logger = logging.getLogger(__name__)


class TaskSource(ABC):
    """
    Abstract base class for task sources.

    Responsibilities:
    - Configuration validation before any request is made
    - Sequential paging with a continuation token
    - Hard bounds on page count and wall-clock time

    Subclasses implement ``fetch_page``; callers use ``fetch_all``.
    """

    def __init__(
        self,
        source_name: str,
        page_size: int = 100,
        max_pages: int = 500,
        max_duration_seconds: float = 300.0
    ):
        self.source_name = source_name
        self.page_size = page_size
        self.max_pages = max_pages
        self.max_duration_seconds = max_duration_seconds

    def validate_config(self) -> None:
        """Raise ConfigurationError when the source cannot be used."""
        return None

    @abstractmethod
    async def fetch_page(self, offset: Optional[str] = None) -> TaskPage:
        """
        Fetch one page of raw tasks.

        Args:
            offset: Continuation token from the previous page (None for the first)

        Returns:
            TaskPage with the raw records and the next token, if any
        """
        pass

    async def close(self) -> None:
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def fetch_all(self) -> List[Dict[str, Any]]:
        """
        Fetch every page until the source stops returning a token.

        Nothing is returned unless paging completes, so a failure part way
        through discards the pages already read.

        Raises:
            ConfigurationError: Source is not configured
            SourceError: Transport failure, bad response or a tripped bound
        """
        self.validate_config()

        records: List[Dict[str, Any]] = []
        seen_offsets: Set[str] = set()
        offset: Optional[str] = None
        pages = 0
        started = time.monotonic()

        while True:
            if pages >= self.max_pages:
                raise PaginationLimitError(
                    f"Exceeded {self.max_pages} pages",
                    context={"source": self.source_name, "pages_fetched": pages, "max_pages": self.max_pages}
                )

            elapsed = time.monotonic() - started
            if elapsed > self.max_duration_seconds:
                raise PaginationLimitError(
                    f"Exceeded {self.max_duration_seconds}s while paging",
                    context={
                        "source": self.source_name,
                        "pages_fetched": pages,
                        "max_duration_seconds": self.max_duration_seconds
                    }
                )

            page = await self.fetch_page(offset)
            pages += 1
            records.extend(page.records)

            logger.info(
                f"Fetched page {pages} from {self.source_name}: "
                f"{len(page.records)} tasks (total {len(records)})"
            )

            offset = page.next_offset
            if not offset:
                break

            if offset in seen_offsets:
                raise PaginationLimitError(
                    "Source repeated a continuation token",
                    context={"source": self.source_name, "pages_fetched": pages, "offset": offset}
                )
            seen_offsets.add(offset)

        return records
