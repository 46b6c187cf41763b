from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .assignments.history import HistoryReader
from .assignments.mysql_assignment_repository import MySQLRoleAssignmentRepository
from .assignments.repository import RoleAssignmentRepository
from .assignments.resolver import CurrentHolderResolver
from .assignments.service import AssignmentService
from .common.datetime_utils import today_local
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import MySQLProgramDirectory, MySQLStaffDirectory
from .directory.repository import ProgramDirectory, StaffDirectory
from .employments.mysql_employment_repository import MySQLEmploymentRepository
from .employments.repository import EmploymentRepository
from .employments.service import EmploymentService


@dataclass(frozen=True)
class Container:
    assignments_repo: RoleAssignmentRepository
    employments_repo: EmploymentRepository
    staff_directory: StaffDirectory
    program_directory: ProgramDirectory

    assignment_service: AssignmentService
    current_holder_resolver: CurrentHolderResolver
    history_reader: HistoryReader
    employment_service: EmploymentService

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    assignments_repo: RoleAssignmentRepository,
    employments_repo: EmploymentRepository,
    staff_directory: StaffDirectory,
    program_directory: ProgramDirectory,
    conn: Optional[DatabaseConnection] = None,
    today=today_local,
) -> Container:
    return Container(
        conn=conn,
        assignments_repo=assignments_repo,
        employments_repo=employments_repo,
        staff_directory=staff_directory,
        program_directory=program_directory,
        assignment_service=AssignmentService(assignments_repo, program_directory, today=today),
        current_holder_resolver=CurrentHolderResolver(assignments_repo, staff_directory),
        history_reader=HistoryReader(assignments_repo, staff_directory),
        employment_service=EmploymentService(employments_repo, today=today),
    )


def build_container(*, db_config: dict) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection(config)

    return wire(
        conn=conn,
        assignments_repo=MySQLRoleAssignmentRepository(conn),
        employments_repo=MySQLEmploymentRepository(conn),
        staff_directory=MySQLStaffDirectory(conn),
        program_directory=MySQLProgramDirectory(conn),
    )
