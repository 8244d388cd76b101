"""Pure list operations for ordered form fields and page modules.

Every function returns a new list and leaves its input untouched, so a
rejected edit never leaves a half-applied list behind. Items only need an
``id`` and an ``order`` attribute, which both FormField and PageModule have.
"""

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from pagekit.models.form import FormField, FormFieldType
from pagekit.utils.exceptions import (
    DuplicateFieldError,
    FieldNotFoundError,
    ProtectedFieldError,
)

T = TypeVar("T")

# Attributes callers may not set through update_field.
_UNEDITABLE = ("id", "order")


def move(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Move one item to a new index (array move, not swap).

    Args:
        items: Source list.
        from_index: Current index of the item.
        to_index: Index the item should occupy afterwards.

    Returns:
        A new list. Unchanged copy for equal or out-of-range indexes.
    """
    result = list(items)
    size = len(result)
    if from_index == to_index:
        return result
    if not (0 <= from_index < size and 0 <= to_index < size):
        return result
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


def renumber(items: Iterable[T]) -> list[T]:
    """Rewrite ``order`` to the dense zero-based list position."""
    return [item.model_copy(update={"order": index}) for index, item in enumerate(items)]


def sort_by_order(items: Iterable[T]) -> list[T]:
    """Stable sort by ``order``."""
    return sorted(items, key=lambda item: item.order)


def _index_of(items: Sequence[Any], item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return -1


def reorder(items: Sequence[T], source_id: str, target_id: str) -> list[T]:
    """Drop the source item onto the target item.

    The source is taken out of the list and reinserted at the target's
    position in the remaining list, so it lands immediately before the
    target. A forward drop therefore lands one slot before the target's
    original index, and calling again with the same ids changes nothing.

    Args:
        items: Items in display order.
        source_id: ID of the dragged item.
        target_id: ID of the item it was dropped on.

    Returns:
        A renumbered list, or an unchanged copy when the ids are equal or
        either one is missing.
    """
    if source_id == target_id:
        return list(items)

    source_index = _index_of(items, source_id)
    target_index = _index_of(items, target_id)
    if source_index < 0 or target_index < 0:
        return list(items)

    # Target index once the source has been popped out.
    landing = target_index if target_index < source_index else target_index - 1
    return renumber(move(items, source_index, landing))


def _unique_name(base: str, taken: set[str]) -> str:
    if base not in taken:
        return base
    suffix = 2
    while f"{base}_{suffix}" in taken:
        suffix += 1
    return f"{base}_{suffix}"


def add_field(fields: Sequence[FormField], field: FormField | None = None) -> list[FormField]:
    """Append a field and renumber.

    Args:
        fields: Current fields in display order.
        field: Field to add. Defaults to an optional "Company" text field.

    Returns:
        New field list.

    Raises:
        DuplicateFieldError: If a field with the same name exists.
    """
    taken = {f.name for f in fields}
    if field is None:
        field = FormField(
            name=_unique_name("company", taken),
            label="Company",
            type=FormFieldType.TEXT,
            required=False,
        )
    elif field.name in taken:
        raise DuplicateFieldError(field.name)

    return renumber([*fields, field])


def update_field(
    fields: Sequence[FormField],
    field_id: str,
    protected: frozenset[str] = frozenset(),
    **changes: Any,
) -> list[FormField]:
    """Apply attribute changes to one field.

    Args:
        fields: Current fields.
        field_id: Client-side ID of the field to change.
        protected: Names of the page type's protected fields.
        **changes: Attributes to set (name, label, type, required, ...).

    Returns:
        New field list.

    Raises:
        FieldNotFoundError: Unknown field id.
        ProtectedFieldError: Renaming or un-requiring a protected field.
        DuplicateFieldError: Renaming onto an existing name.
    """
    index = _index_of(fields, field_id)
    if index < 0:
        raise FieldNotFoundError(field_id)

    current = fields[index]
    changes = {k: v for k, v in changes.items() if k not in _UNEDITABLE}

    new_name = changes.get("name", current.name)
    if current.name in protected:
        if new_name != current.name:
            raise ProtectedFieldError(current.name, "rename")
        if "required" in changes and not changes["required"]:
            raise ProtectedFieldError(current.name, "make optional")

    if new_name != current.name and any(f.name == new_name for f in fields):
        raise DuplicateFieldError(new_name)

    if "type" in changes:
        changes["type"] = FormFieldType.coerce(changes["type"])

    updated = FormField.model_validate({**current.model_dump(), **changes})
    result = list(fields)
    result[index] = updated
    return result


def delete_field(
    fields: Sequence[FormField],
    field_id: str,
    protected: frozenset[str] = frozenset(),
) -> list[FormField]:
    """Remove a field and renumber.

    Raises:
        FieldNotFoundError: Unknown field id.
        ProtectedFieldError: The field is one of the page type's defaults.
    """
    index = _index_of(fields, field_id)
    if index < 0:
        raise FieldNotFoundError(field_id)

    if fields[index].name in protected:
        raise ProtectedFieldError(fields[index].name, "delete")

    return renumber(f for i, f in enumerate(fields) if i != index)
