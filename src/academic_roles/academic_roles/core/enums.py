from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """Kind of thing a role is attached to."""

    DEPARTMENT = "department"
    PROGRAM = "program"


class RoleTag(str, Enum):
    """Position-like roles held by at most one person at a time."""

    HEAD = "head"
    COORDINATOR = "coordinator"


class StaffType(str, Enum):
    ACADEMIC = "academic"
    NON_ACADEMIC = "non_academic"
