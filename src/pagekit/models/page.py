"""Page definition model for builder-managed pages."""

import re
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from pagekit.models.base import BaseModel, generate_ulid
from pagekit.models.form import FormField

_SLUG_INVALID = re.compile(r"[^a-z0-9-]")
_SLUG_DASHES = re.compile(r"-+")


class PageType(str, Enum):
    """Functional category of a page."""

    LOGIN = "login"
    CONTACT_US = "contact_us"
    REGISTER = "register"
    CUSTOM = "custom"

    @classmethod
    def coerce(cls, value: object) -> "PageType | None":
        """Map a stored page type (or a legacy alias) onto the enum.

        Returns:
            The matching PageType, or None for missing/unknown values.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        key = value.strip().lower()
        key = _PAGE_TYPE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


_PAGE_TYPE_ALIASES = {
    "contact": "contact_us",
    "registration": "register",
    "signup": "register",
}


class PageStatus(str, Enum):
    """Page status enum. Transitions between statuses are unrestricted."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ModuleType(str, Enum):
    """Building blocks available to custom pages."""

    HERO = "hero"
    TEXT = "text"
    IMAGE = "image"
    EVENTS = "events"
    SPEAKERS = "speakers"
    TICKETS = "tickets"
    CONTACT = "contact"
    GALLERY = "gallery"
    TESTIMONIALS = "testimonials"


class ModuleLayout(str, Enum):
    """Width a module is rendered at."""

    FULL = "full"
    CONTAINER = "container"
    NARROW = "narrow"


class PageModule(BaseModel):
    """One block of a custom drag-and-drop page."""

    id: str = Field(default_factory=generate_ulid)
    type: ModuleType = Field(..., description="Module type")
    title: str = Field(default="")
    content: dict[str, Any] = Field(default_factory=dict, description="Opaque module content")
    order: int = Field(default=0, ge=0)
    layout: ModuleLayout = Field(default=ModuleLayout.CONTAINER)


def sanitize_slug(value: str | None) -> str:
    """Normalize a slug to lowercase alphanumerics and single hyphens.

    >>> sanitize_slug("  My Event -- 2025! ")
    'my-event-2025'
    """
    if not value:
        return ""
    slug = _SLUG_INVALID.sub("-", value.strip().lower())
    slug = _SLUG_DASHES.sub("-", slug)
    return slug.strip("-")


class PageDefinition(BaseModel):
    """Canonical in-memory shape of a page being edited.

    ``id`` is None until the first successful save. ``settings`` is a loose
    per-type key/value map; keys the builder does not know about are kept
    as-is and written back unchanged.
    """

    id: str | None = Field(None, description="Server-assigned ID, None for unsaved pages")
    title: str = Field(default="")
    name: str = Field(default="")
    slug: str = Field(default="")
    description: str = Field(default="")
    page_type: PageType = Field(..., description="Page type")
    fields: list[FormField] = Field(default_factory=list)
    modules: list[PageModule] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)
    status: PageStatus = Field(default=PageStatus.DRAFT)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_new(self) -> bool:
        """True while the page has never been saved."""
        return not self.id

    def field_by_name(self, name: str) -> FormField | None:
        """Find a field by its wire name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def ordered_fields(self) -> list[FormField]:
        """Fields sorted by their ``order`` value."""
        return sorted(self.fields, key=lambda f: f.order)
