"""Base Pydantic models shared by page and form definitions."""

from pydantic import BaseModel as PydanticBaseModel, ConfigDict
from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


class BaseModel(PydanticBaseModel):
    """Base model for client-side entities.

    Server payloads are loosely shaped, so unknown keys are ignored rather
    than rejected. Enum fields are stored by value so a dumped model is
    ready for ``json.dumps``.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
        extra="ignore",
    )
