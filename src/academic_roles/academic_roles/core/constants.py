"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import EntityKind, RoleTag

# Role each entity kind exposes through the assignment endpoints.
ROLE_BY_ENTITY_KIND = {
    EntityKind.DEPARTMENT: RoleTag.HEAD,
    EntityKind.PROGRAM: RoleTag.COORDINATOR,
}

# A conflicting transition is retried at most this many times before surfacing.
TRANSITION_CONFLICT_RETRIES = 1

ISO_DATE_FORMAT = "%Y-%m-%d"

# MySQL server error codes treated as a lost race between writers.
MYSQL_DUPLICATE_KEY = 1062
MYSQL_LOCK_WAIT_TIMEOUT = 1205
MYSQL_DEADLOCK = 1213
