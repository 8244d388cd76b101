"""Page repository for the tenant pages API."""

import structlog

from pagekit.client import ApiClient
from pagekit.models.page import PageDefinition, PageType
from pagekit.repositories.base import BaseRepository
from pagekit.services import normalizer

logger = structlog.get_logger()

PAGES_PATH = "/tenant/pages"


class PageRepository(BaseRepository):
    """Repository for page records."""

    def __init__(self, client: ApiClient):
        """Initialize page repository."""
        super().__init__(client, PAGES_PATH)

    def list_pages(self) -> list[dict]:
        """List every page of the tenant."""
        return self.query()

    def list_by_type(self, page_type: PageType | str, query_key: str = "page_type") -> list[dict]:
        """List pages filtered by type.

        Args:
            page_type: Page type to filter on.
            query_key: Query parameter the backend filters with
                (``page_type``, ``type`` or ``form_type``).

        Returns:
            Raw page records.
        """
        value = getattr(page_type, "value", page_type)
        return self.query(params={query_key: value})

    def get_page(self, page_id: str) -> dict:
        """Get a raw page record by ID."""
        return self.get(page_id)

    def get_definition(self, page_id: str, page_type: PageType | str | None = None) -> PageDefinition:
        """Fetch a page and normalize it.

        Args:
            page_id: The page ID.
            page_type: Page type to assume when normalizing.

        Returns:
            The normalized definition.
        """
        return normalizer.parse(self.get_page(page_id), page_type)
