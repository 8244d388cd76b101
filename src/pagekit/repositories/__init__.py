"""Repositories over the tenant REST API."""

from pagekit.repositories.base import BaseRepository, unwrap_collection, unwrap_record
from pagekit.repositories.page import PAGES_PATH, PageRepository

__all__ = [
    "BaseRepository",
    "PageRepository",
    "PAGES_PATH",
    "unwrap_collection",
    "unwrap_record",
]
