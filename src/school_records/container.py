from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .common.unit_of_work import UnitOfWork
from .core.constants import DEFAULT_ACADEMIC_YEAR
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .marks.mysql_mark_repository import MySQLMarkRepository
from .marks.repository import MarkRepository
from .marks.service import MarkService
from .roster.mysql_roster_repository import MySQLAssignmentRepository, MySQLEnrollmentRepository
from .roster.repository import AssignmentRepository, EnrollmentRepository
from .roster.service import RosterService
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.repository import SubjectRepository
from .subjects.service import SubjectService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, IdentityDirectory, UserService


@dataclass(frozen=True)
class Container:
    conn: UnitOfWork

    users_repo: UserRepository
    classes_repo: ClassRepository
    subjects_repo: SubjectRepository
    enrollments_repo: EnrollmentRepository
    assignments_repo: AssignmentRepository
    attendance_repo: AttendanceRepository
    marks_repo: MarkRepository

    identity_directory: IdentityDirectory
    auth_service: AuthService
    user_service: UserService
    class_service: ClassService
    subject_service: SubjectService
    roster_service: RosterService
    attendance_service: AttendanceService
    mark_service: MarkService
    dashboard_service: DashboardService


def wire(
    *,
    uow: UnitOfWork,
    users_repo: UserRepository,
    classes_repo: ClassRepository,
    subjects_repo: SubjectRepository,
    enrollments_repo: EnrollmentRepository,
    assignments_repo: AssignmentRepository,
    attendance_repo: AttendanceRepository,
    marks_repo: MarkRepository,
    default_academic_year: str = DEFAULT_ACADEMIC_YEAR,
) -> Container:
    """Build the services on top of any set of repositories."""

    directory = IdentityDirectory(users_repo)

    return Container(
        conn=uow,
        users_repo=users_repo,
        classes_repo=classes_repo,
        subjects_repo=subjects_repo,
        enrollments_repo=enrollments_repo,
        assignments_repo=assignments_repo,
        attendance_repo=attendance_repo,
        marks_repo=marks_repo,
        identity_directory=directory,
        auth_service=AuthService(users_repo, uow),
        user_service=UserService(users_repo, uow),
        class_service=ClassService(
            classes_repo,
            enrollments_repo,
            uow,
            default_academic_year=default_academic_year,
        ),
        subject_service=SubjectService(subjects_repo, uow),
        roster_service=RosterService(
            directory,
            classes_repo,
            subjects_repo,
            enrollments_repo,
            assignments_repo,
            uow,
        ),
        attendance_service=AttendanceService(attendance_repo, directory, classes_repo, uow),
        mark_service=MarkService(marks_repo, directory, classes_repo, subjects_repo, uow),
        dashboard_service=DashboardService(users_repo, classes_repo, subjects_repo),
    )


def build_container(*, db_config: dict, default_academic_year: str = DEFAULT_ACADEMIC_YEAR) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        uow=conn,
        users_repo=MySQLUserRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        subjects_repo=MySQLSubjectRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        assignments_repo=MySQLAssignmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        marks_repo=MySQLMarkRepository(conn),
        default_academic_year=default_academic_year,
    )
