"""Per page type defaults.

Each builder starts from one of these templates when there is no saved page
to load, and the normalizer falls back to them whenever a stored record is
missing or unreadable.
"""

import copy
from typing import Any

from pagekit.models.form import FormField, FormFieldType
from pagekit.models.page import ModuleLayout, ModuleType, PageDefinition, PageModule, PageType


def _field(name: str, label: str, field_type: FormFieldType, required: bool = True) -> dict:
    return {"id": name, "name": name, "label": label, "type": field_type.value, "required": required}


TEMPLATES: dict[PageType, dict[str, Any]] = {
    PageType.LOGIN: {
        "name": "Login Page",
        "title": "Login to Your Account",
        "slug": "login",
        "description": "Please enter your credentials to access your account",
        "fields": [
            _field("username", "Username or Email", FormFieldType.TEXT),
            _field("password", "Password", FormFieldType.PASSWORD),
        ],
        "settings": {
            "usernameLabel": "Username or Email",
            "passwordLabel": "Password",
            "submitButtonText": "Sign In",
            "forgotPasswordLink": True,
            "registerLink": True,
            "rememberMeOption": True,
        },
        "boolean_settings": ("forgotPasswordLink", "registerLink", "rememberMeOption"),
    },
    PageType.CONTACT_US: {
        "name": "Contact Page",
        "title": "Contact Us",
        "slug": "contact",
        "description": "We'd love to hear from you. Fill out the form and we'll respond soon.",
        "fields": [
            _field("name", "Your Name", FormFieldType.TEXT),
            _field("email", "Email", FormFieldType.EMAIL),
            _field("phone", "Phone", FormFieldType.TEL, required=False),
            _field("message", "Message", FormFieldType.TEXTAREA),
        ],
        "settings": {
            "nameLabel": "Your Name",
            "emailLabel": "Email",
            "phoneEnabled": True,
            "phoneLabel": "Phone",
            "messageLabel": "Message",
            "submitButtonText": "Send Message",
        },
        "boolean_settings": ("phoneEnabled",),
    },
    PageType.REGISTER: {
        "name": "Registration Page",
        "title": "Event Registration",
        "slug": "event-registration",
        "description": "",
        "fields": [
            _field("first_name", "First Name", FormFieldType.TEXT),
            _field("last_name", "Last Name", FormFieldType.TEXT),
            _field("email", "Email Address", FormFieldType.EMAIL),
            _field("password", "Password", FormFieldType.PASSWORD),
            _field("phone", "Phone", FormFieldType.TEL),
        ],
        "settings": {
            "submitButtonText": "Register Now",
            "successMessage": "Thank you for registering! We will contact you soon.",
            "redirectUrl": "",
            "show_in_nav": False,
        },
        "boolean_settings": ("show_in_nav",),
    },
    PageType.CUSTOM: {
        "name": "New Custom Page",
        "title": "Custom Page",
        "slug": "custom-page",
        "description": "A custom page built with drag and drop",
        "fields": [],
        "settings": {
            "headerStyle": "default",
            "footerStyle": "default",
            "backgroundColor": "#ffffff",
            "textColor": "#1f2937",
        },
        "boolean_settings": (),
    },
}


MODULE_TEMPLATES: dict[ModuleType, dict[str, Any]] = {
    ModuleType.HERO: {
        "name": "Hero Section",
        "description": "Large banner with title and call-to-action",
        "content": {
            "title": "Welcome to Our Event",
            "subtitle": "Join us for an amazing experience",
            "buttonText": "Get Started",
            "buttonLink": "#",
            "backgroundImage": "",
            "overlay": True,
        },
    },
    ModuleType.TEXT: {
        "name": "Text Block",
        "description": "Rich text content section",
        "content": {
            "title": "About Our Event",
            "content": "This is where you can add detailed information about your event.",
            "alignment": "left",
        },
    },
    ModuleType.IMAGE: {
        "name": "Image Gallery",
        "description": "Image showcase with captions",
        "content": {"images": [], "layout": "grid"},
    },
    ModuleType.EVENTS: {
        "name": "Events List",
        "description": "Display upcoming events",
        "content": {
            "title": "Upcoming Events",
            "showDate": True,
            "showLocation": True,
            "showPrice": True,
            "limit": 6,
        },
    },
    ModuleType.SPEAKERS: {
        "name": "Speakers",
        "description": "Showcase event speakers",
        "content": {
            "title": "Our Speakers",
            "showBio": True,
            "showSocial": True,
            "layout": "grid",
            "limit": 8,
        },
    },
    ModuleType.TICKETS: {
        "name": "Ticket Options",
        "description": "Display ticket types and pricing",
        "content": {
            "title": "Get Your Tickets",
            "showFeatures": True,
            "showAvailability": True,
            "layout": "cards",
        },
    },
}


def get_template(page_type: PageType | str) -> dict[str, Any]:
    """Get the template for a page type.

    Raises:
        ValueError: If the page type is unknown.
    """
    resolved = PageType.coerce(page_type)
    if resolved is None:
        raise ValueError(f"Unknown page type: {page_type!r}")
    return TEMPLATES[resolved]


def default_fields(page_type: PageType | str) -> list[FormField]:
    """Fresh default field list for a page type, orders assigned."""
    return [
        FormField.model_validate({**raw, "order": index})
        for index, raw in enumerate(get_template(page_type)["fields"])
    ]


def default_field(page_type: PageType | str, name: str) -> FormField | None:
    """The template's definition of one field, if the type has it."""
    for field in default_fields(page_type):
        if field.name == name:
            return field
    return None


def default_settings(page_type: PageType | str) -> dict[str, Any]:
    """Deep copy of the type's default settings."""
    return copy.deepcopy(get_template(page_type)["settings"])


def boolean_settings(page_type: PageType | str) -> tuple[str, ...]:
    """Settings keys that are coerced to strict booleans."""
    return get_template(page_type)["boolean_settings"]


def new_page(page_type: PageType | str) -> PageDefinition:
    """Synthesize an unsaved page with the type's defaults."""
    template = get_template(page_type)
    return PageDefinition(
        id=None,
        title=template["title"],
        name=template["name"],
        slug=template["slug"],
        description=template["description"],
        page_type=PageType.coerce(page_type),
        fields=default_fields(page_type),
        settings=default_settings(page_type),
    )


def list_module_templates() -> list[dict[str, Any]]:
    """List available custom page modules."""
    return [
        {"type": module_type.value, "name": t["name"], "description": t["description"]}
        for module_type, t in MODULE_TEMPLATES.items()
    ]


def new_module(module_type: ModuleType | str, order: int = 0) -> PageModule:
    """Create a module from its template.

    Raises:
        ValueError: If there is no template for the module type.
    """
    resolved = ModuleType(module_type)
    template = MODULE_TEMPLATES.get(resolved)
    if template is None:
        raise ValueError(f"No template for module type: {module_type!r}")
    return PageModule(
        type=resolved,
        title=template["name"],
        content=copy.deepcopy(template["content"]),
        order=order,
        layout=ModuleLayout.CONTAINER,
    )
