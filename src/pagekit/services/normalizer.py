"""Conversion between stored page records and PageDefinition.

Records written by older versions of the admin screens are inconsistent:
``form_config`` and ``settings`` may be JSON text or already-parsed
structures, the field list may be bare or wrapped in ``{"fields": [...]}``,
and some labels only live in ``settings``. ``parse`` accepts all of these
and always returns an editable definition; it never raises on bad data.
``serialize`` writes one canonical shape back.
"""

import json
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from pagekit.models.form import FormField, FormFieldType, placeholder_for, protected_fields_for
from pagekit.models.page import PageDefinition, PageModule, PageStatus, PageType, sanitize_slug
from pagekit.services.fields import renumber, sort_by_order
from pagekit.services.page_templates import (
    boolean_settings,
    default_field,
    default_fields,
    default_settings,
    get_template,
)

logger = structlog.get_logger()

_FALSE_STRINGS = {"", "0", "false", "no", "off", "null", "none"}

# Settings key -> field names that hold the same label, checked in order.
_LABEL_FIELDS: dict[PageType, dict[str, tuple[str, ...]]] = {
    PageType.LOGIN: {
        "usernameLabel": ("username",),
        "passwordLabel": ("password",),
    },
    PageType.CONTACT_US: {
        "nameLabel": ("name",),
        "emailLabel": ("email",),
        "phoneLabel": ("phone",),
        "messageLabel": ("message",),
    },
}

# Page attributes folded into the settings blob on save.
_FOLDED_ATTRIBUTES: dict[PageType, tuple[str, ...]] = {
    PageType.LOGIN: ("description",),
    PageType.CUSTOM: ("description", "name"),
}

# Page types whose form_config is written as {"fields": [...]}.
_WRAPPED_FORM_CONFIG = {PageType.REGISTER}


# ----------------------------------------------------------------------
# Decoding helpers
# ----------------------------------------------------------------------


def decode_json(value: Any, default: Any) -> Any:
    """Decode a value that may be JSON text.

    Strings are parsed (twice at most, for double-encoded values). Parse
    failures, blank strings and None all yield ``default``; anything that is
    not a string is returned unchanged.
    """
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")

    for _ in range(2):
        if not isinstance(value, str):
            return value
        if not value.strip():
            return default
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Stored JSON could not be decoded", preview=value[:80])
            return default

    return default if isinstance(value, str) else value


def coerce_bool(value: Any, default: bool = False) -> bool:
    """Coerce a loosely stored truthy/falsy value to a strict bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


# ----------------------------------------------------------------------
# Field lists
# ----------------------------------------------------------------------


def extract_field_list(config: Any) -> list | None:
    """Unwrap the two accepted field list shapes.

    Returns:
        The raw list for a bare array or a ``{"fields": [...]}`` wrapper,
        otherwise None.
    """
    if isinstance(config, list):
        return config
    if isinstance(config, dict) and isinstance(config.get("fields"), list):
        return config["fields"]
    return None


def _coerce_options(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    options = []
    for option in raw:
        if isinstance(option, dict):
            option = option.get("value", option.get("label"))
        if option is not None:
            options.append(_text(option))
    return options


def coerce_field(raw: Any, position: int, page_type: PageType | str | None = None) -> FormField | None:
    """Build a FormField from one loosely shaped entry, or None to drop it."""
    if not isinstance(raw, dict):
        return None

    name = raw.get("name") or raw.get("id")
    if name is None or name == "":
        return None
    name = _text(name)

    label = _text(raw.get("label"))
    placeholder = raw.get("placeholder")
    if not isinstance(placeholder, str) or not placeholder.strip():
        placeholder = None
    elif placeholder == placeholder_for(label, page_type):
        placeholder = None

    order = _as_int(raw.get("order"))
    validation = raw.get("validation")

    try:
        return FormField(
            id=_text(raw.get("id") or name),
            name=name,
            label=label,
            type=FormFieldType.coerce(raw.get("type")),
            required=coerce_bool(raw.get("required"), False),
            placeholder=placeholder,
            options=_coerce_options(raw.get("options")),
            order=order if order is not None and order >= 0 else position,
            validation=validation if isinstance(validation, dict) else None,
        )
    except PydanticValidationError as e:
        logger.warning("Dropping unreadable form field", field_name=name, error=str(e))
        return None


def coerce_fields(raw_fields: list, page_type: PageType | str | None = None) -> list[FormField]:
    """Coerce a raw field list: drop junk, dedupe by name, dense orders."""
    fields: list[FormField] = []
    seen: set[str] = set()
    for position, raw in enumerate(raw_fields):
        field = coerce_field(raw, position, page_type)
        if field is None or field.name in seen:
            continue
        seen.add(field.name)
        fields.append(field)
    return renumber(sort_by_order(fields))


def _find_field(fields: list[FormField], key: str) -> FormField | None:
    for field in fields:
        if field.name == key:
            return field
    for field in fields:
        if field.id == key:
            return field
    return None


def _coerce_modules(raw: Any) -> list[PageModule]:
    if isinstance(raw, dict) and isinstance(raw.get("modules"), list):
        raw = raw["modules"]
    if not isinstance(raw, list):
        return []

    modules = []
    for position, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        order = _as_int(item.get("order"))
        data = {**item, "order": order if order is not None and order >= 0 else position}
        if data.get("id") is not None:
            data["id"] = _text(data["id"])
        if not isinstance(data.get("content"), dict):
            data["content"] = {}
        try:
            modules.append(PageModule.model_validate(data))
        except PydanticValidationError as e:
            logger.warning("Dropping unreadable page module", module_type=item.get("type"), error=str(e))
    return renumber(sort_by_order(modules))


# ----------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------


def _derive_settings(
    page_type: PageType,
    fields: list[FormField],
    stored: dict[str, Any],
    fields_from_record: bool,
) -> dict[str, Any]:
    """Merge stored settings with type defaults and field-derived labels."""
    defaults = default_settings(page_type)
    settings = dict(stored)

    for key, default in defaults.items():
        value = settings.get(key)
        if value is None or (isinstance(value, str) and not value.strip() and default):
            settings[key] = default

    for key, names in _LABEL_FIELDS.get(page_type, {}).items():
        field = None
        if fields_from_record:
            for name in names:
                field = _find_field(fields, name)
                if field:
                    break
            if field is None and key == "passwordLabel":
                field = next((f for f in fields if f.type == FormFieldType.PASSWORD), None)

        if field is not None and field.label:
            settings[key] = field.label
        elif isinstance(stored.get(key), str) and stored[key].strip():
            settings[key] = stored[key]
        else:
            settings[key] = defaults[key]

    if page_type == PageType.CONTACT_US and stored.get("phoneEnabled") is None and fields_from_record:
        settings["phoneEnabled"] = _find_field(fields, "phone") is not None

    for key in boolean_settings(page_type):
        settings[key] = coerce_bool(settings.get(key), coerce_bool(defaults.get(key), False))

    return settings


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------


def resolve_page_type(payload: dict[str, Any], page_type: PageType | str | None = None) -> PageType:
    """Pick the page type: explicit argument, then the record's type keys, else custom."""
    for candidate in (page_type, payload.get("page_type"), payload.get("type"), payload.get("form_type")):
        resolved = PageType.coerce(candidate)
        if resolved is not None:
            return resolved
    return PageType.CUSTOM


def parse(payload: Any, page_type: PageType | str | None = None) -> PageDefinition:
    """Normalize a stored page record into a PageDefinition.

    Args:
        payload: Page record from the API (a ``{"data": {...}}`` envelope is
            unwrapped). Anything that is not a dict is treated as empty.
        page_type: Page type to assume; overrides the record's own type keys.

    Returns:
        A usable definition. Unreadable parts fall back to the type's defaults.
    """
    if not isinstance(payload, dict):
        payload = {}
    if isinstance(payload.get("data"), dict) and "id" not in payload:
        payload = payload["data"]

    resolved_type = resolve_page_type(payload, page_type)
    template = get_template(resolved_type)

    stored_settings = decode_json(payload.get("settings"), {})
    if not isinstance(stored_settings, dict):
        stored_settings = {}

    raw_fields = extract_field_list(decode_json(payload.get("form_config"), None))
    if raw_fields is None:
        fields = default_fields(resolved_type)
    else:
        fields = coerce_fields(raw_fields, resolved_type)

    settings = _derive_settings(resolved_type, fields, stored_settings, raw_fields is not None)
    for attribute in _FOLDED_ATTRIBUTES.get(resolved_type, ()):
        settings.pop(attribute, None)
    fields = _rebuild_fields(resolved_type, fields, settings)

    modules: list[PageModule] = []
    if resolved_type == PageType.CUSTOM:
        modules = _coerce_modules(decode_json(payload.get("modules"), []))

    page_id = payload.get("id")
    description = payload.get("description")
    if description is None:
        description = stored_settings.get("description", template["description"])

    status = payload.get("status")
    if status not in {s.value for s in PageStatus}:
        status = PageStatus.DRAFT

    definition = PageDefinition(
        id=_text(page_id) if page_id not in (None, "") else None,
        title=_text(payload.get("title")) or template["title"],
        name=_text(payload.get("name")) or _text(stored_settings.get("name")) or template["name"],
        slug=_text(payload.get("slug")) or template["slug"],
        description=_text(description),
        page_type=resolved_type,
        fields=fields,
        modules=modules,
        settings=settings,
        status=status,
        created_at=_parse_timestamp(payload.get("created_at")),
        updated_at=_parse_timestamp(payload.get("updated_at")),
    )

    logger.debug(
        "Page record normalized",
        page_id=definition.id,
        page_type=resolved_type.value,
        field_count=len(fields),
        used_default_fields=raw_fields is None,
    )
    return definition


def _sync_login(fields: list[FormField], settings: dict[str, Any]) -> list[FormField]:
    labels = {
        "username": _text(settings.get("usernameLabel")).strip(),
        "password": _text(settings.get("passwordLabel")).strip(),
    }
    return [
        f.model_copy(update={"label": labels[f.name]}) if labels.get(f.name) else f
        for f in fields
    ]


def _sync_contact(fields: list[FormField], settings: dict[str, Any]) -> list[FormField]:
    labels = {
        name: _text(settings.get(key)).strip()
        for key, (name,) in _LABEL_FIELDS[PageType.CONTACT_US].items()
    }
    phone_enabled = coerce_bool(settings.get("phoneEnabled"), True)
    has_phone = any(f.name == "phone" for f in fields)

    if phone_enabled and not has_phone:
        phone = default_field(PageType.CONTACT_US, "phone")
        message_at = next((i for i, f in enumerate(fields) if f.name == "message"), len(fields))
        fields = [*fields[:message_at], phone, *fields[message_at:]]
    elif not phone_enabled and has_phone:
        fields = [f for f in fields if f.name != "phone"]

    return [
        f.model_copy(update={"label": labels[f.name]}) if labels.get(f.name) else f
        for f in fields
    ]


_FIELD_SYNC = {
    PageType.LOGIN: _sync_login,
    PageType.CONTACT_US: _sync_contact,
}


def enforce_protected(page_type: PageType, fields: list[FormField]) -> list[FormField]:
    """Restore missing protected defaults and keep them required.

    Missing fields are reinserted at their template position. The result is
    renumbered.
    """
    protected = protected_fields_for(page_type)
    fields = list(fields)
    present = {f.name for f in fields}
    for position, template_field in enumerate(default_fields(page_type)):
        if template_field.name in protected and template_field.name not in present:
            fields.insert(min(position, len(fields)), template_field)

    return renumber(
        f.model_copy(update={"required": True}) if f.name in protected and not f.required else f
        for f in fields
    )


def build_fields(page: PageDefinition) -> list[FormField]:
    """Rebuild the authoritative field list for saving.

    Applies the protected-field rules and the type's label settings, then
    renumbers in display order.
    """
    return _rebuild_fields(PageType.coerce(page.page_type), page.fields, page.settings)


def _rebuild_fields(
    page_type: PageType,
    fields: list[FormField],
    settings: dict[str, Any],
) -> list[FormField]:
    fields = enforce_protected(page_type, sort_by_order(fields))
    sync = _FIELD_SYNC.get(page_type)
    if sync is not None:
        fields = sync(fields, settings)
    return renumber(fields)


def _field_to_wire(field: FormField, page_type: PageType) -> dict[str, Any]:
    data = field.model_dump(mode="json", exclude_none=True)
    data["placeholder"] = field.effective_placeholder(page_type)
    return data


def serialize(page: PageDefinition) -> dict[str, str]:
    """Serialize a definition to the two JSON text columns.

    Returns:
        ``{"form_config": str, "settings": str}``.
    """
    page_type = PageType.coerce(page.page_type)
    wire_fields = [_field_to_wire(f, page_type) for f in build_fields(page)]
    form_config: Any = {"fields": wire_fields} if page_type in _WRAPPED_FORM_CONFIG else wire_fields

    settings = dict(page.settings)
    for key in boolean_settings(page_type):
        if key in settings:
            settings[key] = coerce_bool(settings[key])
    for attribute in _FOLDED_ATTRIBUTES.get(page_type, ()):
        settings[attribute] = getattr(page, attribute)

    return {
        "form_config": json.dumps(form_config),
        "settings": json.dumps(settings, default=str),
    }


def resolve_slug(page: PageDefinition) -> str:
    """Sanitized slug for saving, falling back to the name, then the type default."""
    return (
        sanitize_slug(page.slug)
        or sanitize_slug(page.name)
        or get_template(page.page_type)["slug"]
    )


def to_request_body(page: PageDefinition) -> dict[str, Any]:
    """Full wire body for a create or update request."""
    page_type = PageType.coerce(page.page_type)
    body: dict[str, Any] = {
        "title": page.title.strip(),
        "name": page.name.strip(),
        "slug": resolve_slug(page),
        "page_type": page_type.value,
        "status": page.status,
        "description": page.description.strip(),
        **serialize(page),
    }

    if page_type == PageType.CUSTOM:
        modules = renumber(sort_by_order(page.modules))
        body["form_type"] = page_type.value
        body["modules"] = json.dumps([m.model_dump(mode="json") for m in modules])

    return body
