"""Pydantic models for pagekit entities."""

from pagekit.models.base import BaseModel, generate_ulid
from pagekit.models.form import (
    PROTECTED_FIELDS,
    FormField,
    FormFieldType,
    placeholder_for,
    protected_fields_for,
)
from pagekit.models.page import (
    ModuleLayout,
    ModuleType,
    PageDefinition,
    PageModule,
    PageStatus,
    PageType,
    sanitize_slug,
)

__all__ = [
    # Base
    "BaseModel",
    "generate_ulid",
    # Form
    "FormField",
    "FormFieldType",
    "PROTECTED_FIELDS",
    "placeholder_for",
    "protected_fields_for",
    # Page
    "PageDefinition",
    "PageModule",
    "PageStatus",
    "PageType",
    "ModuleType",
    "ModuleLayout",
    "sanitize_slug",
]
