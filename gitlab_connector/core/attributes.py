"""Attribute extraction and coercion helpers.

Every helper raises InvalidAttributeValueError for values the connector
cannot map to a GitLab field.
"""
from __future__ import annotations
from typing import Any, Iterable, List, Optional, Type, TypeVar

from .exceptions import InvalidAttributeValueError
from .objects import Attribute, GuardedString, PASSWORD

T = TypeVar("T")


def find_attr(attributes: Iterable[Attribute], name: str) -> Optional[Attribute]:
    """Return the first attribute named ``name`` or None."""
    for attr in attributes:
        if attr.name == name:
            return attr
    return None


def _matches_type(value: Any, expected: type) -> bool:
    # bool is an int subclass; never accept it as a number
    if expected is int and isinstance(value, bool):
        return False
    return isinstance(value, expected)


def get_attr(
    attributes: Iterable[Attribute],
    name: str,
    expected: Type[T],
    default: Optional[T] = None,
) -> Optional[T]:
    """Return the single value of attribute ``name``.

    Args:
        attributes: Attribute set from the host
        name: Attribute name
        expected: Required Python type of the value
        default: Returned when the attribute is absent, empty or None

    Returns:
        The attribute value or ``default``

    Raises:
        InvalidAttributeValueError: If the attribute has several values or
            a value of the wrong type
    """
    attr = find_attr(attributes, name)
    if attr is None or not attr.values:
        return default
    if len(attr.values) > 1:
        raise InvalidAttributeValueError(f"More than one value for attribute {name}")
    value = attr.values[0]
    if value is None:
        return default
    if not _matches_type(value, expected):
        raise InvalidAttributeValueError(
            f"Unsupported type {type(value).__name__} for attribute {name}"
        )
    return value


def get_string_attr(
    attributes: Iterable[Attribute],
    name: str,
    default: Optional[str] = None,
) -> Optional[str]:
    return get_attr(attributes, name, str, default)


def require_attr(attributes: Iterable[Attribute], name: str, expected: Type[T]) -> T:
    """Like get_attr, but a missing value is an error."""
    value = get_attr(attributes, name, expected)
    if value is None:
        raise InvalidAttributeValueError(f"Missing mandatory attribute {name}")
    return value


def get_password(attributes: Iterable[Attribute]) -> Optional[str]:
    """Reveal the ``__PASSWORD__`` attribute, if present."""
    guarded = get_attr(attributes, PASSWORD, GuardedString)
    if guarded is None:
        return None
    revealed: List[str] = []
    guarded.access(revealed.append)
    return revealed[0] if revealed else None


def to_int(value: Any, name: str) -> int:
    """Coerce an int or a decimal string to int."""
    if isinstance(value, bool):
        raise InvalidAttributeValueError(f"Invalid value {value!r} for attribute {name}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidAttributeValueError(f"Invalid value {value!r} for attribute {name}") from None
    raise InvalidAttributeValueError(f"Invalid value {value!r} for attribute {name}")



def get_member_ids(attr: Attribute) -> List[int]:
    """Parse the values of a multi-valued member attribute into user IDs."""
    return [to_int(value, attr.name) for value in attr.values if value is not None]
