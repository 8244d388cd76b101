"""Slug-based upsert resolution for page saves.

The backend rejects a create whose slug is already taken for the tenant and
page type. Before creating, the resolver looks for an existing page with the
same slug and turns the save into an update of that page instead.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from pagekit.models.page import PageType
from pagekit.repositories.page import PageRepository
from pagekit.utils.exceptions import PageKitError

logger = structlog.get_logger()

# Backends deployed so far filter page lists by one of these keys, and which
# one varies between versions, so each is tried in turn.
PAGE_TYPE_QUERY_KEYS = ("page_type", "type", "form_type")


@dataclass(frozen=True)
class SaveTarget:
    """Where and how a page body should be sent."""

    method: str
    endpoint: str
    page_id: str | None = None

    @property
    def is_update(self) -> bool:
        """True when the save updates an existing record."""
        return self.page_id is not None


def try_in_order(candidates: Iterable[Callable[[], list[Any]]]) -> list[Any]:
    """Run candidate queries one at a time until one returns something.

    A candidate that raises a PageKitError, or returns an empty result,
    counts as "try the next one".

    Returns:
        The first non-empty result, or ``[]`` when every candidate failed.
    """
    for index, candidate in enumerate(candidates):
        try:
            result = candidate()
        except PageKitError as e:
            logger.debug("Probe query failed, trying next", candidate=index, error=str(e))
            continue
        if result:
            return result
        logger.debug("Probe query returned nothing, trying next", candidate=index)
    return []


class SlugResolver:
    """Decides whether a save creates a page or updates an existing one."""

    def __init__(self, repository: PageRepository, update_method: str = "PATCH"):
        """Initialize resolver.

        Args:
            repository: Page repository used for the probe queries.
            update_method: HTTP method for updates (PATCH or PUT).
        """
        self.repository = repository
        self.update_method = update_method

    def find_existing(self, candidate_slug: str, page_type: PageType | str) -> dict | None:
        """Find a page of the given type whose slug matches exactly.

        Returns:
            The matching record, or None.
        """
        pages = try_in_order(
            (lambda key=key: self.repository.list_by_type(page_type, query_key=key))
            for key in PAGE_TYPE_QUERY_KEYS
        )
        for page in pages:
            if page.get("slug") == candidate_slug and page.get("id") not in (None, ""):
                return page
        return None

    def resolve_target(
        self,
        candidate_slug: str,
        page_type: PageType | str,
        existing_id: str | None = None,
    ) -> SaveTarget:
        """Resolve the endpoint and method for saving a page.

        Args:
            candidate_slug: Slug the page will be saved with.
            page_type: Type of the page.
            existing_id: ID of the page being edited, if it was loaded.

        Returns:
            An update of ``existing_id`` or of a same-slug page, otherwise a create.
        """
        collection = self.repository.collection_path

        if existing_id:
            return SaveTarget(self.update_method, f"{collection}/{existing_id}", str(existing_id))

        match = self.find_existing(candidate_slug, page_type)
        if match is not None:
            page_id = str(match["id"])
            logger.info(
                "Existing page with slug found, saving as update",
                slug=candidate_slug,
                page_id=page_id,
            )
            return SaveTarget(self.update_method, f"{collection}/{page_id}", page_id)

        return SaveTarget("POST", collection)
