"""Object model exchanged with the identity-governance host.

These are the minimal shapes the connector operations take and return:
object classes, attributes, UIDs, connector objects and schema descriptors.

Usage:
    attrs = [
        Attribute.of(NAME, "alice"),
        Attribute.of("email", "alice@example.com"),
        Attribute.of(PASSWORD, GuardedString("s3cret")),
    ]
    uid = connector.create(ObjectClass.ACCOUNT, attrs)
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

# Special attribute names
UID = "__UID__"
NAME = "__NAME__"
PASSWORD = "__PASSWORD__"
ENABLE = "__ENABLE__"


@dataclass(frozen=True)
class ObjectClass:
    """Named object class; names compare case-insensitively."""
    name: str

    def is_(self, name: str) -> bool:
        return self.name.lower() == name.lower()

    def __str__(self) -> str:
        return self.name


ObjectClass.ACCOUNT = ObjectClass("__ACCOUNT__")
ObjectClass.GROUP = ObjectClass("__GROUP__")
ObjectClass.PROJECT = ObjectClass("Project")
ObjectClass.GROUP_MEMBERSHIP = ObjectClass("GroupMembership")


@dataclass(frozen=True)
class Uid:
    value: str

    def __str__(self) -> str:
        return self.value


class GuardedString:
    """Secret value that stays masked in reprs and logs."""

    def __init__(self, clear_text: str):
        self._chars = list(clear_text)

    def access(self, accessor: Callable[[str], None]) -> None:
        accessor("".join(self._chars))

    def reveal(self) -> str:
        return "".join(self._chars)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, GuardedString) and other._chars == self._chars

    def __hash__(self) -> int:
        return hash("".join(self._chars))

    def __repr__(self) -> str:
        return "GuardedString('***')"


@dataclass
class Attribute:
    name: str
    values: List[Any] = field(default_factory=list)

    @classmethod
    def of(cls, name: str, *values: Any) -> "Attribute":
        return cls(name, list(values))


@dataclass
class ConnectorObject:
    """Object returned to the host from searches."""
    object_class: ObjectClass
    uid: str
    name: str
    attributes: Dict[str, List[Any]] = field(default_factory=dict)

    def add(self, name: str, *values: Any) -> None:
        """Append values, skipping None."""
        present = [value for value in values if value is not None]
        if present:
            self.attributes.setdefault(name, []).extend(present)

    def get(self, name: str) -> Optional[List[Any]]:
        if name == UID:
            return [self.uid]
        if name == NAME:
            return [self.name]
        return self.attributes.get(name)

    def get_single(self, name: str) -> Any:
        values = self.get(name)
        return values[0] if values else None


@dataclass(frozen=True)
class AttributeInfo:
    name: str
    type: type = str
    required: bool = False
    creatable: bool = True
    updateable: bool = True
    readable: bool = True
    multi_valued: bool = False
    returned_by_default: bool = True


@dataclass
class ObjectClassInfo:
    type: str
    attributes: List[AttributeInfo] = field(default_factory=list)

    def attribute(self, name: str) -> Optional[AttributeInfo]:
        for info in self.attributes:
            if info.name == name:
                return info
        return None


@dataclass
class Schema:
    object_classes: List[ObjectClassInfo] = field(default_factory=list)

    def find(self, object_class: ObjectClass) -> Optional[ObjectClassInfo]:
        for info in self.object_classes:
            if object_class.is_(info.type):
                return info
        return None


@dataclass
class OperationOptions:
    """Per-call options passed by the host.

    Attributes:
        attributes_to_get: Attribute names the caller wants; None means defaults
        page_size: Page size for GitLab list calls; None uses the configured one
    """
    attributes_to_get: Optional[List[str]] = None
    page_size: Optional[int] = None

    def wants(self, name: str) -> bool:
        return self.attributes_to_get is None or name in self.attributes_to_get


@dataclass(frozen=True)
class EqualsFilter:
    """Search filter matching a single attribute value (``__UID__`` or ``__NAME__``)."""
    name: str
    value: Any


# Returning False from the handler stops the search.
ResultsHandler = Callable[[ConnectorObject], Optional[bool]]
