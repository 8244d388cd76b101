"""Form field model for page forms."""

import re
from enum import Enum

from pydantic import Field

from pagekit.models.base import BaseModel, generate_ulid

_LEADING_YOUR = re.compile(r"^your\s+")


class FormFieldType(str, Enum):
    """Form field input types."""

    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    PASSWORD = "password"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    NUMBER = "number"
    URL = "url"
    DATE = "date"

    @classmethod
    def coerce(cls, value: object) -> "FormFieldType":
        """Map a stored type string onto the enum, defaulting to text."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value.lower() == "phone":
                return cls.TEL
            try:
                return cls(value.lower())
            except ValueError:
                pass
        return cls.TEXT


class FormField(BaseModel):
    """A single input in a page's form.

    ``id`` is a client-side identifier and is never the server's id.
    ``placeholder`` of None means the placeholder is derived from the label
    when the page is serialized.
    """

    id: str = Field(default_factory=generate_ulid, description="Client-side field ID")
    name: str = Field(..., min_length=1, description="Wire-level field key")
    label: str = Field(default="", description="Display label")
    type: FormFieldType = Field(default=FormFieldType.TEXT, description="Input type")
    required: bool = Field(default=False)
    placeholder: str | None = Field(None, description="Explicit placeholder text")
    options: list[str] = Field(default_factory=list, description="Options for select/radio")
    order: int = Field(default=0, ge=0, description="Zero-based position")
    validation: dict | None = Field(None, description="minLength/maxLength/pattern rules")

    def effective_placeholder(self, page_type: object = None) -> str:
        """Placeholder as it will be written to the wire."""
        if self.placeholder:
            return self.placeholder
        return placeholder_for(self.label, page_type)


def placeholder_for(label: str, page_type: object = None) -> str:
    """Derive the default placeholder for a label.

    Contact pages drop a leading "your" from the label so the default
    "Your Name" label does not read "Enter your your name".

    >>> placeholder_for("Email")
    'Enter your email'
    >>> placeholder_for("Your Name")
    'Enter your your name'
    >>> placeholder_for("Your Name", "contact_us")
    'Enter your name'
    """
    text = label.lower()
    if getattr(page_type, "value", page_type) == "contact_us":
        text = _LEADING_YOUR.sub("", text.strip())
    return f"Enter your {text}"


# Field names each page type always carries. They are required and cannot be
# deleted or renamed.
PROTECTED_FIELDS: dict[str, frozenset[str]] = {
    "login": frozenset({"username", "password"}),
    "contact_us": frozenset({"name", "email"}),
    "register": frozenset({"first_name", "last_name", "email", "password", "phone"}),
    "custom": frozenset(),
}


def protected_fields_for(page_type: object) -> frozenset[str]:
    """Get the protected field names for a page type (enum or value)."""
    if page_type is None:
        return frozenset()
    key = getattr(page_type, "value", page_type)
    return PROTECTED_FIELDS.get(key, frozenset())
