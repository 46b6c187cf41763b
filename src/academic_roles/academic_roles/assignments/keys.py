from __future__ import annotations

from typing import Optional

from ..common.validators import require_enum, require_non_empty
from ..core.constants import ROLE_BY_ENTITY_KIND
from ..core.enums import EntityKind, RoleTag
from ..core.exceptions import ValidationError
from .model import AssignmentKey


def make_key(entity_kind, entity_id: Optional[str], role=None) -> AssignmentKey:
    """Validate raw inputs into an AssignmentKey.

    `role` defaults to the one role the entity kind carries (department -> head,
    program -> coordinator).
    """
    kind = require_enum(entity_kind, EntityKind, "entity_kind")
    entity_id = require_non_empty(entity_id, f"{kind.value}_id")
    expected = ROLE_BY_ENTITY_KIND[kind]
    tag = expected if role is None or role == "" else require_enum(role, RoleTag, "role")
    if tag != expected:
        raise ValidationError(f"A {kind.value} has no '{tag.value}' role (expected '{expected.value}')")
    return AssignmentKey(entity_kind=kind, entity_id=entity_id, role=tag)
