"""Base repository for REST collection endpoints."""

from typing import TYPE_CHECKING, Any

import structlog

from pagekit.client import ApiClient

if TYPE_CHECKING:
    from pagekit.services.resolver import SaveTarget

logger = structlog.get_logger()


def unwrap_collection(response: Any) -> list[dict]:
    """Extract the record list from a collection response.

    Accepts a bare list, a ``{"data": [...]}`` envelope, or a single record
    (returned as a one-item list). Anything else yields ``[]``.
    """
    if response is None:
        return []
    if isinstance(response, list):
        return [item for item in response if isinstance(item, dict)]
    if isinstance(response, dict):
        data = response.get("data")
        if isinstance(data, list):
            return [item for item in data if isinstance(item, dict)]
        if data is None and response.get("id") is not None:
            return [response]
    return []


def unwrap_record(response: Any) -> dict:
    """Extract a single record from a ``{"data": {...}}`` envelope or bare object."""
    if isinstance(response, dict):
        data = response.get("data")
        if isinstance(data, dict) and "id" not in response:
            return data
        return response
    return {}


class BaseRepository:
    """CRUD operations against one REST collection.

    Errors from the client propagate unchanged.
    """

    def __init__(self, client: ApiClient, collection_path: str):
        """Initialize repository.

        Args:
            client: API client.
            collection_path: Collection path, e.g. ``/tenant/pages``.
        """
        self.client = client
        self.collection_path = "/" + collection_path.strip("/")

    def item_path(self, item_id: str) -> str:
        """Path of one record."""
        return f"{self.collection_path}/{item_id}"

    def query(self, params: dict[str, Any] | None = None) -> list[dict]:
        """List records, optionally filtered by query parameters."""
        return unwrap_collection(self.client.get(self.collection_path, params=params))

    def get(self, item_id: str) -> dict:
        """Get one record by ID."""
        return unwrap_record(self.client.get(self.item_path(item_id)))

    def create(self, body: dict[str, Any]) -> dict:
        """Create a record."""
        record = unwrap_record(self.client.post(self.collection_path, json=body))
        logger.info("Record created", path=self.collection_path, id=record.get("id"))
        return record

    def update(self, item_id: str, body: dict[str, Any], method: str = "PATCH") -> dict:
        """Update a record with PATCH or PUT."""
        response = self.client.request(method, self.item_path(item_id), json=body)
        record = unwrap_record(response)
        logger.info("Record updated", path=self.item_path(item_id), method=method)
        return record

    def delete(self, item_id: str) -> None:
        """Delete a record."""
        self.client.delete(self.item_path(item_id))
        logger.info("Record deleted", path=self.item_path(item_id))

    def save(self, target: "SaveTarget", body: dict[str, Any]) -> dict:
        """Send a body to wherever the resolver decided it belongs."""
        response = self.client.request(target.method, target.endpoint, json=body)
        return unwrap_record(response)
