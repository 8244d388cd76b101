"""Builder controllers, one per page type.

A builder owns one PageDefinition and drives its lifecycle:

    uninitialized -> loading -> ready -> saving -> ready
    ready -> deleting -> uninitialized

Edits are applied to the in-memory definition only. Saves work on a
snapshot, and the definition picks up the server id only after the backend
confirmed the save, so a failed save or delete can simply be retried.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

import structlog

from pagekit.models.form import FormField, protected_fields_for
from pagekit.models.page import PageDefinition, PageModule, PageStatus, PageType
from pagekit.repositories.page import PageRepository
from pagekit.services import fields as field_ops
from pagekit.services import normalizer
from pagekit.services.page_templates import new_module, new_page
from pagekit.services.resolver import SlugResolver
from pagekit.utils.exceptions import (
    BuilderStateError,
    NotFoundError,
    PageKitError,
    ValidationError,
    describe_error,
)

logger = structlog.get_logger()

Confirmation = bool | Callable[[], bool]


class BuilderState(str, Enum):
    """Builder lifecycle states."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    DELETING = "deleting"


_BUSY_STATES = {BuilderState.LOADING, BuilderState.SAVING, BuilderState.DELETING}

# Page attributes editable through update_page.
_PAGE_ATTRIBUTES = {"title", "name", "slug", "description", "status"}


@dataclass
class NavigationState:
    """Which page the editor is showing, as it would appear in the URL."""

    page_id: str | None = None

    def query_string(self) -> str:
        """Query string for the current page (``?id=...`` or ``?``)."""
        return f"?id={self.page_id}" if self.page_id else "?"


class PageBuilder:
    """Base builder controller.

    Subclasses set ``page_type`` and may extend ``validate``.
    """

    page_type: ClassVar[PageType]
    update_method: ClassVar[str] = "PATCH"

    def __init__(
        self,
        repository: PageRepository,
        resolver: SlugResolver | None = None,
        navigation: NavigationState | None = None,
    ):
        """Initialize builder.

        Args:
            repository: Page repository.
            resolver: Slug resolver. Defaults to one over ``repository``
                using this builder's update method.
            navigation: Navigation state shared with the caller.
        """
        self.repository = repository
        self.resolver = resolver or SlugResolver(repository, self.update_method)
        self.navigation = navigation or NavigationState()
        self.state = BuilderState.UNINITIALIZED
        self.page: PageDefinition | None = None
        self.last_error: PageKitError | None = None

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @property
    def protected_fields(self) -> frozenset[str]:
        """Field names this page type never lets go of."""
        return protected_fields_for(self.page_type)

    @property
    def is_busy(self) -> bool:
        """True while a load, save or delete is in flight."""
        return self.state in _BUSY_STATES

    @property
    def not_found(self) -> bool:
        """True when the last load failed because the page does not exist."""
        return isinstance(self.last_error, NotFoundError)

    def error_message(self) -> str | None:
        """User-facing text for the last error, if any."""
        if self.last_error is None:
            return None
        return describe_error(self.last_error)

    def _ensure_idle(self, action: str) -> None:
        if self.is_busy:
            raise BuilderStateError(self.state.value, action)

    def _require_page(self, action: str) -> PageDefinition:
        self._ensure_idle(action)
        if self.page is None:
            raise BuilderStateError(self.state.value, action)
        return self.page

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self, page_id: str | None = None) -> PageDefinition:
        """Open the editor on a page, or on a new page when there is no id.

        Uses ``navigation.page_id`` when no id is passed.
        """
        page_id = page_id or self.navigation.page_id
        if page_id:
            return self.load(page_id)
        return self.reset()

    def reset(self) -> PageDefinition:
        """Replace the current page with the type's unsaved defaults."""
        self._ensure_idle("reset")
        self.page = new_page(self.page_type)
        self.navigation.page_id = None
        self.last_error = None
        self.state = BuilderState.READY
        return self.page

    def load(self, page_id: str) -> PageDefinition:
        """Fetch and normalize a saved page.

        On failure the builder keeps (or synthesizes) an editable page,
        records the error and re-raises it.

        Raises:
            NotFoundError: The page does not exist.
            PageKitError: Any other API or network failure.
        """
        self._ensure_idle("load")
        self.state = BuilderState.LOADING
        try:
            record = self.repository.get_page(page_id)
            if not record:
                raise NotFoundError(f"Page '{page_id}' not found")
        except PageKitError as e:
            logger.warning("Failed to load page", page_id=page_id, page_type=self.page_type.value, error=str(e))
            self.last_error = e
            if self.page is None:
                self.page = new_page(self.page_type)
            self.state = BuilderState.READY
            raise

        self.page = normalizer.parse(record, self.page_type)
        self.navigation.page_id = self.page.id
        self.last_error = None
        self.state = BuilderState.READY
        logger.info("Page loaded", page_id=self.page.id, page_type=self.page_type.value)
        return self.page

    def validate(self) -> list[str]:
        """Basic required-field checks run before every save.

        Returns:
            Problems found, empty when the page can be saved.
        """
        page = self.page
        if page is None:
            return ["No page loaded"]
        problems = []
        if not page.title.strip():
            problems.append("Page title is required")
        return problems

    def save(self) -> PageDefinition:
        """Persist the page, creating or updating as the resolver decides.

        Returns:
            The page with its server id applied.

        Raises:
            ValidationError: Local checks failed, or the backend rejected the body.
            PageKitError: Any other API or network failure.
        """
        page = self._require_page("save")

        problems = self.validate()
        if problems:
            error = ValidationError("Validation failed", errors={"page": problems})
            self.last_error = error
            raise error

        self.state = BuilderState.SAVING
        snapshot = page.model_copy(deep=True)
        slug = normalizer.resolve_slug(snapshot)
        try:
            target = self.resolver.resolve_target(slug, self.page_type, snapshot.id)
            body = normalizer.to_request_body(snapshot)
            saved = self.repository.save(target, body)
        except PageKitError as e:
            logger.warning("Failed to save page", page_id=snapshot.id, slug=slug, error=str(e))
            self.last_error = e
            raise
        finally:
            self.state = BuilderState.READY

        saved_id = saved.get("id") or target.page_id
        updates: dict[str, Any] = {"slug": slug, "fields": normalizer.build_fields(snapshot)}
        if saved_id:
            updates["id"] = str(saved_id)
        self.page = page.model_copy(update=updates)
        self.navigation.page_id = self.page.id
        self.last_error = None

        logger.info(
            "Page saved",
            page_id=self.page.id,
            page_type=self.page_type.value,
            method=target.method,
            created=not target.is_update,
        )
        return self.page

    def delete(self, confirm: Confirmation = False) -> bool:
        """Delete the current page after confirmation.

        Args:
            confirm: True, or a callable asked for confirmation.

        Returns:
            True if the page was deleted, False if there was nothing to
            delete or the user declined.
        """
        page = self._require_page("delete")
        if not page.id:
            return False
        confirmed = confirm() if callable(confirm) else bool(confirm)
        if not confirmed:
            return False

        self.state = BuilderState.DELETING
        try:
            self.repository.delete(page.id)
        except PageKitError as e:
            logger.warning("Failed to delete page", page_id=page.id, error=str(e))
            self.last_error = e
            self.state = BuilderState.READY
            raise

        logger.info("Page deleted", page_id=page.id, page_type=self.page_type.value)
        self.page = new_page(self.page_type)
        self.navigation.page_id = None
        self.last_error = None
        self.state = BuilderState.UNINITIALIZED
        return True

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def update_page(self, **changes: Any) -> PageDefinition:
        """Set page attributes (title, name, slug, description, status)."""
        page = self._require_page("edit")
        unknown = set(changes) - _PAGE_ATTRIBUTES
        if unknown:
            raise ValueError(f"Cannot update page attributes: {', '.join(sorted(unknown))}")
        if "status" in changes:
            changes["status"] = PageStatus(changes["status"])
        for key, value in changes.items():
            setattr(page, key, value)
        return page

    def update_settings(self, **changes: Any) -> dict[str, Any]:
        """Merge settings and re-sync fields that mirror them."""
        page = self._require_page("edit")
        page.settings = {**page.settings, **changes}
        page.fields = normalizer.build_fields(page)
        return page.settings

    def add_field(self, field: FormField | None = None) -> FormField:
        """Append a field (an optional "Company" field by default)."""
        page = self._require_page("edit")
        page.fields = field_ops.add_field(page.fields, field)
        return page.fields[-1]

    def update_field(self, field_id: str, **changes: Any) -> FormField:
        """Change one field's attributes."""
        page = self._require_page("edit")
        page.fields = field_ops.update_field(page.fields, field_id, self.protected_fields, **changes)
        updated = next(f for f in page.fields if f.id == field_id)
        self._mirror_label(updated)
        return updated

    def delete_field(self, field_id: str) -> None:
        """Remove a field. Protected fields raise ProtectedFieldError."""
        page = self._require_page("edit")
        page.fields = field_ops.delete_field(page.fields, field_id, self.protected_fields)

    def reorder_fields(self, source_id: str, target_id: str) -> list[FormField]:
        """Drop one field onto another."""
        page = self._require_page("edit")
        page.fields = field_ops.reorder(page.fields, source_id, target_id)
        return page.fields

    def _mirror_label(self, field: FormField) -> None:
        """Keep label settings in step with a field edited directly."""


class _LabelMirroringBuilder(PageBuilder):
    """Builder whose settings hold a copy of some field labels."""

    label_settings: ClassVar[dict[str, str]] = {}

    def _mirror_label(self, field: FormField) -> None:
        key = self.label_settings.get(field.name)
        if key and field.label and self.page is not None:
            self.page.settings = {**self.page.settings, key: field.label}


class LoginPageBuilder(_LabelMirroringBuilder):
    """Login page: username and password fields plus link toggles."""

    page_type = PageType.LOGIN
    update_method = "PUT"
    label_settings = {"username": "usernameLabel", "password": "passwordLabel"}

    def validate(self) -> list[str]:
        problems = super().validate()
        if self.page is not None:
            if not str(self.page.settings.get("usernameLabel", "")).strip():
                problems.append("Username label is required")
            if not str(self.page.settings.get("passwordLabel", "")).strip():
                problems.append("Password label is required")
        return problems


class ContactPageBuilder(_LabelMirroringBuilder):
    """Contact page: name, email, optional phone and message."""

    page_type = PageType.CONTACT_US
    label_settings = {
        "name": "nameLabel",
        "email": "emailLabel",
        "phone": "phoneLabel",
        "message": "messageLabel",
    }

    def set_phone_enabled(self, enabled: bool) -> None:
        """Show or hide the phone field."""
        self.update_settings(phoneEnabled=bool(enabled))

    def delete_field(self, field_id: str) -> None:
        """Remove a field. Removing the phone field switches phoneEnabled off."""
        page = self._require_page("edit")
        field = next((f for f in page.fields if f.id == field_id), None)
        if field is not None and field.name == "phone":
            self.set_phone_enabled(False)
            return
        super().delete_field(field_id)

    def validate(self) -> list[str]:
        problems = super().validate()
        if self.page is not None:
            if not self.page.name.strip():
                problems.append("Page name is required")
            if not str(self.page.settings.get("nameLabel", "")).strip():
                problems.append("Name label is required")
            if not str(self.page.settings.get("emailLabel", "")).strip():
                problems.append("Email label is required")
        return problems


class RegistrationPageBuilder(PageBuilder):
    """Registration page: editable field list on top of the required defaults."""

    page_type = PageType.REGISTER

    def validate(self) -> list[str]:
        problems = super().validate()
        if self.page is not None and not self.page.fields:
            problems.append("At least one form field is required")
        return problems


class CustomPageBuilder(PageBuilder):
    """Custom drag-and-drop page made of modules."""

    page_type = PageType.CUSTOM
    update_method = "PUT"

    def add_module(self, module_type: str) -> PageModule:
        """Append a module built from its template."""
        page = self._require_page("edit")
        module = new_module(module_type, order=len(page.modules))
        page.modules = field_ops.renumber([*page.modules, module])
        return page.modules[-1]

    def update_module(self, module_id: str, **changes: Any) -> PageModule:
        """Change a module's title, content or layout."""
        page = self._require_page("edit")
        changes = {k: v for k, v in changes.items() if k not in ("id", "order")}
        modules = list(page.modules)
        for index, module in enumerate(modules):
            if module.id == module_id:
                modules[index] = PageModule.model_validate({**module.model_dump(), **changes})
                page.modules = modules
                return modules[index]
        raise KeyError(module_id)

    def delete_module(self, module_id: str) -> None:
        """Remove a module."""
        page = self._require_page("edit")
        page.modules = field_ops.renumber(m for m in page.modules if m.id != module_id)

    def reorder_modules(self, source_id: str, target_id: str) -> list[PageModule]:
        """Drop one module onto another."""
        page = self._require_page("edit")
        page.modules = field_ops.reorder(page.modules, source_id, target_id)
        return page.modules


BUILDERS: dict[PageType, type[PageBuilder]] = {
    PageType.LOGIN: LoginPageBuilder,
    PageType.CONTACT_US: ContactPageBuilder,
    PageType.REGISTER: RegistrationPageBuilder,
    PageType.CUSTOM: CustomPageBuilder,
}


def builder_for(page_type: PageType | str, repository: PageRepository, **kwargs: Any) -> PageBuilder:
    """Create the builder for a page type.

    Raises:
        ValueError: If the page type is unknown.
    """
    resolved = PageType.coerce(page_type)
    if resolved is None:
        raise ValueError(f"Unknown page type: {page_type!r}")
    return BUILDERS[resolved](repository, **kwargs)
