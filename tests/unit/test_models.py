"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from pagekit.models.base import generate_ulid
from pagekit.models.form import (
    FormField,
    FormFieldType,
    placeholder_for,
    protected_fields_for,
)
from pagekit.models.page import (
    ModuleLayout,
    PageDefinition,
    PageModule,
    PageStatus,
    PageType,
    sanitize_slug,
)


class TestBaseModel:
    """Tests for BaseModel."""

    def test_generate_ulid(self):
        """Test ULID generation."""
        ulid1 = generate_ulid()
        ulid2 = generate_ulid()

        assert len(ulid1) == 26
        assert ulid1 != ulid2

    def test_unknown_keys_ignored(self):
        """Test loosely shaped payloads are accepted."""
        field = FormField(name="email", label="Email", colour="blue")

        assert field.name == "email"
        assert not hasattr(field, "colour")

    def test_enum_values_stored(self):
        """Test enums are stored by value."""
        field = FormField(name="phone", type=FormFieldType.TEL)

        assert field.type == "tel"
        assert field.model_dump()["type"] == "tel"


class TestFormField:
    """Tests for FormField model."""

    def test_field_defaults(self):
        """Test field defaults."""
        field = FormField(name="company")

        assert field.label == ""
        assert field.type == FormFieldType.TEXT
        assert field.required is False
        assert field.placeholder is None
        assert field.options == []
        assert field.order == 0
        assert len(field.id) == 26

    def test_name_required(self):
        """Test empty names are rejected."""
        with pytest.raises(PydanticValidationError):
            FormField(name="")

    def test_negative_order_rejected(self):
        """Test order must be non-negative."""
        with pytest.raises(PydanticValidationError):
            FormField(name="email", order=-1)

    def test_effective_placeholder_derived(self):
        """Test placeholder falls back to the label."""
        field = FormField(name="email", label="Email")

        assert field.effective_placeholder() == "Enter your email"

    def test_effective_placeholder_explicit(self):
        """Test explicit placeholder wins."""
        field = FormField(name="email", label="Email", placeholder="you@example.com")

        assert field.effective_placeholder() == "you@example.com"


class TestFormFieldType:
    """Tests for FormFieldType coercion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("email", FormFieldType.EMAIL),
            ("TEXTAREA", FormFieldType.TEXTAREA),
            ("phone", FormFieldType.TEL),
            ("hologram", FormFieldType.TEXT),
            (None, FormFieldType.TEXT),
            (FormFieldType.DATE, FormFieldType.DATE),
        ],
    )
    def test_coerce(self, raw, expected):
        """Test stored type strings map onto the enum."""
        assert FormFieldType.coerce(raw) == expected


class TestPlaceholders:
    """Tests for placeholder derivation."""

    def test_plain_label(self):
        """Test simple label."""
        assert placeholder_for("Email") == "Enter your email"

    def test_leading_your_kept(self):
        """Test the label is used as written outside contact pages."""
        assert placeholder_for("Your Email") == "Enter your your email"
        assert placeholder_for("Your Email", PageType.LOGIN) == "Enter your your email"

    def test_contact_leading_your_dropped(self):
        """Test contact pages do not double a leading 'Your'."""
        assert placeholder_for("Your Name", PageType.CONTACT_US) == "Enter your name"
        assert placeholder_for("Your Name", "contact_us") == "Enter your name"

    def test_multi_word_label(self):
        """Test label is lowercased as a whole."""
        assert placeholder_for("Email Address") == "Enter your email address"


class TestProtectedFields:
    """Tests for protected field lookup."""

    def test_login(self):
        """Test login protects username and password."""
        assert protected_fields_for(PageType.LOGIN) == {"username", "password"}

    def test_accepts_value_string(self):
        """Test lookup by plain value."""
        assert protected_fields_for("contact_us") == {"name", "email"}

    def test_register(self):
        """Test registration protects all five defaults."""
        assert protected_fields_for(PageType.REGISTER) == {
            "first_name",
            "last_name",
            "email",
            "password",
            "phone",
        }

    def test_custom_and_unknown(self):
        """Test custom and unknown types protect nothing."""
        assert protected_fields_for(PageType.CUSTOM) == frozenset()
        assert protected_fields_for("unknown") == frozenset()
        assert protected_fields_for(None) == frozenset()


class TestPageType:
    """Tests for PageType coercion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("login", PageType.LOGIN),
            ("contact", PageType.CONTACT_US),
            (" Contact_Us ", PageType.CONTACT_US),
            ("registration", PageType.REGISTER),
            (PageType.CUSTOM, PageType.CUSTOM),
            ("landing", None),
            ("", None),
            (None, None),
            (42, None),
        ],
    )
    def test_coerce(self, raw, expected):
        """Test aliases and unknown values."""
        assert PageType.coerce(raw) == expected


class TestSlug:
    """Tests for slug sanitization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("  My Event -- 2025! ", "my-event-2025"),
            ("Contact Us", "contact-us"),
            ("already-clean", "already-clean"),
            ("___", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_sanitize_slug(self, raw, expected):
        """Test slug normalization."""
        assert sanitize_slug(raw) == expected


class TestPageDefinition:
    """Tests for PageDefinition model."""

    def test_new_page_defaults(self):
        """Test an unsaved page."""
        page = PageDefinition(page_type=PageType.LOGIN)

        assert page.id is None
        assert page.is_new is True
        assert page.status == PageStatus.DRAFT
        assert page.page_type == "login"

    def test_status_validated_on_assignment(self):
        """Test status assignment is validated."""
        page = PageDefinition(page_type="custom")

        page.status = "published"
        assert page.status == "published"

        with pytest.raises(PydanticValidationError):
            page.status = "deleted"

    def test_field_helpers(self):
        """Test lookup and ordering helpers."""
        page = PageDefinition(
            id="1",
            page_type=PageType.CONTACT_US,
            fields=[
                FormField(name="email", order=1),
                FormField(name="name", order=0),
            ],
        )

        assert page.is_new is False
        assert page.field_by_name("email").order == 1
        assert page.field_by_name("missing") is None
        assert [f.name for f in page.ordered_fields()] == ["name", "email"]


class TestPageModule:
    """Tests for PageModule model."""

    def test_module_defaults(self):
        """Test module defaults."""
        module = PageModule(type="hero")

        assert module.layout == ModuleLayout.CONTAINER
        assert module.content == {}
        assert len(module.id) == 26

    def test_unknown_module_type_rejected(self):
        """Test module type must be known."""
        with pytest.raises(PydanticValidationError):
            PageModule(type="carousel")
