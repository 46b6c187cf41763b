"""Example: use the service layer directly (no Flask).

Hands the IT department over from one head to another, then prints the
current head and the full history.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.academic_roles.academic_roles.container import build_container
from src.academic_roles.academic_roles.core.enums import EntityKind

IT_DEPARTMENT = "d3b07384-0000-4000-8000-000000000001"
ALICE = "5a7e2d10-0000-4000-8000-000000000001"
BOB = "5a7e2d10-0000-4000-8000-000000000002"


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    container.assignment_service.assign_department_head(IT_DEPARTMENT, ALICE, effective_date=date(2024, 1, 1))
    container.assignment_service.assign_department_head(
        IT_DEPARTMENT, BOB, effective_date=date(2024, 6, 1), make_coordinator=True
    )

    print(container.current_holder_resolver.current_holder_view(EntityKind.DEPARTMENT, IT_DEPARTMENT))
    for entry in container.history_reader.history_view(EntityKind.DEPARTMENT, IT_DEPARTMENT):
        print(entry)


if __name__ == "__main__":
    main()
