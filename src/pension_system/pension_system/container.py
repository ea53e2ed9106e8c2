from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .applications.mysql_application_repository import MySQLApplicationRepository
from .applications.repository import ApplicationRepository
from .applications.service import ApplicationService
from .complaints.mysql_complaint_repository import MySQLComplaintRepository
from .complaints.repository import ComplaintRepository
from .complaints.service import ComplaintService
from .core.constants import DEFAULT_TOKEN_DAYS
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .pension.calculator.standard_calculator import StandardPensionCalculator
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    applications_repo: ApplicationRepository
    complaints_repo: ComplaintRepository

    tokens: TokenService
    auth_service: AuthService
    user_service: UserService
    application_service: ApplicationService
    complaint_service: ComplaintService
    dashboard_service: DashboardService

    conn: Optional[DatabaseConnection] = None


def wire_container(
    *,
    users_repo: UserRepository,
    applications_repo: ApplicationRepository,
    complaints_repo: ComplaintRepository,
    jwt_secret: str,
    jwt_expire_days: int = DEFAULT_TOKEN_DAYS,
    conn: Optional[DatabaseConnection] = None,
    clock=None,
) -> Container:
    """Build services on top of any repository implementations."""
    clock_kw = {"clock": clock} if clock else {}

    tokens = TokenService(jwt_secret, expire_days=jwt_expire_days)
    auth_service = AuthService(users_repo, tokens, **clock_kw)
    user_service = UserService(users_repo)
    application_service = ApplicationService(
        applications_repo,
        users_repo,
        StandardPensionCalculator(),
        **clock_kw,
    )
    complaint_service = ComplaintService(complaints_repo, users_repo, applications_repo, **clock_kw)
    dashboard_service = DashboardService(users_repo, complaints_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        applications_repo=applications_repo,
        complaints_repo=complaints_repo,
        tokens=tokens,
        auth_service=auth_service,
        user_service=user_service,
        application_service=application_service,
        complaint_service=complaint_service,
        dashboard_service=dashboard_service,
    )


def build_container(*, db_config: dict, jwt_secret: str, jwt_expire_days: int = DEFAULT_TOKEN_DAYS) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        pool_size=int(db_config.get("pool_size", 5)),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        applications_repo=MySQLApplicationRepository(conn),
        complaints_repo=MySQLComplaintRepository(conn),
        jwt_secret=jwt_secret,
        jwt_expire_days=jwt_expire_days,
        conn=conn,
    )
