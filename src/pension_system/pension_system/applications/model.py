from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import days_since, iso, parse_iso_date
from ..core.constants import OVERDUE_DAYS
from ..core.enums import (
    ApplicationPriority,
    ApplicationStatus,
    NomineeRelation,
    PensionType,
)


def _float_or_none(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _date_or_none(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))


@dataclass(frozen=True)
class PersonalInfo:
    full_name: str
    nid: str
    phone: Optional[str] = None
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "fullName": self.full_name,
            "nid": self.nid,
            "phone": self.phone,
            "email": self.email,
            "dateOfBirth": iso(self.date_of_birth),
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PersonalInfo":
        return cls(
            full_name=data.get("fullName") or "",
            nid=data.get("nid") or "",
            phone=data.get("phone"),
            email=data.get("email"),
            date_of_birth=_date_or_none(data.get("dateOfBirth")),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class ServiceInfo:
    employee_id: str
    last_basic_salary: float
    service_years: Optional[float] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    retirement_date: Optional[date] = None
    pension_type: PensionType = PensionType.RETIREMENT

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "department": self.department,
            "designation": self.designation,
            "joiningDate": iso(self.joining_date),
            "retirementDate": iso(self.retirement_date),
            "lastBasicSalary": self.last_basic_salary,
            "serviceYears": self.service_years,
            "pensionType": self.pension_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ServiceInfo":
        return cls(
            employee_id=data.get("employeeId") or "",
            department=data.get("department"),
            designation=data.get("designation"),
            joining_date=_date_or_none(data.get("joiningDate")),
            retirement_date=_date_or_none(data.get("retirementDate")),
            last_basic_salary=float(data.get("lastBasicSalary") or 0),
            service_years=_float_or_none(data.get("serviceYears")),
            pension_type=PensionType(data.get("pensionType") or PensionType.RETIREMENT.value),
        )


@dataclass(frozen=True)
class BankInfo:
    bank_name: Optional[str] = None
    branch_name: Optional[str] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "bankName": self.bank_name,
            "branchName": self.branch_name,
            "accountNumber": self.account_number,
            "routingNumber": self.routing_number,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BankInfo":
        return cls(
            bank_name=data.get("bankName"),
            branch_name=data.get("branchName"),
            account_number=data.get("accountNumber"),
            routing_number=data.get("routingNumber"),
        )


@dataclass(frozen=True)
class NomineeInfo:
    nominee_name: Optional[str] = None
    nominee_relation: Optional[NomineeRelation] = None
    nominee_nid: Optional[str] = None
    nominee_address: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "nomineeName": self.nominee_name,
            "nomineeRelation": self.nominee_relation.value if self.nominee_relation else None,
            "nomineeNid": self.nominee_nid,
            "nomineeAddress": self.nominee_address,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NomineeInfo":
        relation = data.get("nomineeRelation")
        return cls(
            nominee_name=data.get("nomineeName"),
            nominee_relation=NomineeRelation(relation) if relation else None,
            nominee_nid=data.get("nomineeNid"),
            nominee_address=data.get("nomineeAddress"),
        )


@dataclass(frozen=True)
class FeedbackEntry:
    message: str
    created_by: int
    field: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PensionDetails:
    monthly_pension: int
    gratuity: int
    provident_fund: int
    calculated_at: datetime


@dataclass(frozen=True)
class ApplicationDetails:
    """Everything a pension holder submits; replaced wholesale on resubmission."""

    personal_info: PersonalInfo
    service_info: ServiceInfo
    bank_info: BankInfo = field(default_factory=BankInfo)
    nominee_info: NomineeInfo = field(default_factory=NomineeInfo)
    special_circumstances: Optional[str] = None


@dataclass(frozen=True)
class PensionApplication:
    application_id: int
    pension_holder_id: int
    details: ApplicationDetails
    status: ApplicationStatus
    created_at: datetime
    priority: ApplicationPriority = ApplicationPriority.MEDIUM
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_comments: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    pension_details: Optional[PensionDetails] = None
    feedback: tuple[FeedbackEntry, ...] = ()
    updated_at: Optional[datetime] = None

    def days_since_submission(self, now: Optional[datetime] = None) -> int:
        return days_since(self.created_at, now=now)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return self.status == ApplicationStatus.PENDING and self.days_since_submission(now) > OVERDUE_DAYS
