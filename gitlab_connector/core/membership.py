"""Group/project membership reconciliation.

Computes the add/remove sets that converge the current member IDs of a
group or project to the desired ones. Applying the delta is left to the
caller, one remote call per ID.

Usage:
    delta = reconcile(desired=[1, 2, 4], current=[1, 2, 3])
    delta.to_add     # frozenset({4})
    delta.to_remove  # frozenset({3})
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Iterable

MEMBER_OF_UID_SEPARATOR = "|"


@dataclass(frozen=True)
class MembershipDelta:
    """Member IDs to add and to remove; the two sets are disjoint."""
    to_add: FrozenSet[int]
    to_remove: FrozenSet[int]

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def reconcile(desired: Iterable[int], current: Iterable[int]) -> MembershipDelta:
    """Return the minimal delta turning ``current`` into ``desired``.

    Duplicates in either input collapse.
    """
    desired_ids = set(desired)
    current_ids = set(current)
    return MembershipDelta(
        to_add=frozenset(desired_ids - current_ids),
        to_remove=frozenset(current_ids - desired_ids),
    )


def assemble_member_of_uid(user_id: int, group_id: int) -> str:
    """Build the UID of a group membership, e.g. ``"36|61"``."""
    return f"{user_id}{MEMBER_OF_UID_SEPARATOR}{group_id}"


def _split_member_of_uid(uid: str) -> tuple[int, int]:
    parts = uid.split(MEMBER_OF_UID_SEPARATOR)
    if len(parts) != 2:
        raise ValueError(f"Invalid membership UID '{uid}': expected '<userId>|<groupId>'")
    return int(parts[0]), int(parts[1])


def user_id_from_member_of_uid(uid: str) -> int:
    return _split_member_of_uid(uid)[0]


def group_id_from_member_of_uid(uid: str) -> int:
    return _split_member_of_uid(uid)[1]
