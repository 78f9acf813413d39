"""Employee records as stored in the ``employees`` collection."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _from_epoch_ms(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return value


# Stored documents carry epoch milliseconds; ISO strings are accepted as well.
Timestamp = Annotated[
    datetime,
    BeforeValidator(_from_epoch_ms),
    AfterValidator(_ensure_utc),
    PlainSerializer(to_epoch_ms, return_type=int, when_used="json"),
]


class Role(StrEnum):
    SALES_DIRECTOR = "Sales Director"
    SALES_MANAGER = "Sales Manager"
    TEAM_LEAD = "Team Lead"
    AGENT = "Agent"


class Site(StrEnum):
    AUSTIN = "Austin"
    CHARLOTTE = "Charlotte"


class EmployeeStatus(StrEnum):
    ACTIVE = "active"
    TERMINATED = "terminated"


class CommissionTier(StrEnum):
    NEW = "new"
    VETERAN = "veteran"


class TerminationReason(StrEnum):
    VOLUNTARY_RESIGNATION = "voluntary_resignation"
    INVOLUNTARY_TERMINATION = "involuntary_termination"
    PERFORMANCE_ISSUES = "performance_issues"
    MISCONDUCT = "misconduct"
    LAYOFF = "layoff"
    POSITION_ELIMINATION = "position_elimination"
    END_OF_CONTRACT = "end_of_contract"
    RETIREMENT = "retirement"
    OTHER = "other"


class ChangeType(StrEnum):
    EMPLOYEE_MOVE = "employee_move"
    EMPLOYEE_PROMOTE = "employee_promote"
    EMPLOYEE_TRANSFER = "employee_transfer"
    EMPLOYEE_TERMINATE = "employee_terminate"
    EMPLOYEE_CREATE = "employee_create"
    BULK_ACTION = "bulk_action"


class DocumentCategory(StrEnum):
    TERMINATION_LETTER = "termination_letter"
    RESIGNATION_LETTER = "resignation_letter"
    FINAL_PAY_STUB = "final_pay_stub"
    EXIT_INTERVIEW = "exit_interview"
    EQUIPMENT_RETURN = "equipment_return"
    OTHER = "other"


# Reasons that make a former employee ineligible for rehire by default.
_NO_REHIRE_REASONS = frozenset({TerminationReason.MISCONDUCT, TerminationReason.PERFORMANCE_ISSUES})

_REQUIRED_EMPLOYEE_FIELDS = ("name", "role", "site", "start_date")


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class TerminationDocument(CamelModel):
    """Metadata for a document uploaded with a termination; the file itself lives elsewhere."""

    id: str
    file_name: str
    file_url: str
    file_type: str = "application/octet-stream"
    upload_date: Timestamp
    uploaded_by: str
    category: DocumentCategory = DocumentCategory.OTHER


class TerminationDetails(CamelModel):
    termination_date: Timestamp
    last_working_day: Timestamp
    reason: TerminationReason
    terminated_by: str = "unknown"
    notes: str = Field(..., min_length=1)
    documents: list[TerminationDocument] = []
    final_payout_amount: float | None = Field(default=None, ge=0)
    exit_survey_completed: bool = False
    exit_interview_completed: bool = False
    equipment_returned: bool = True
    eligible_for_rehire: bool | None = None

    @field_validator("notes")
    @classmethod
    def _notes_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Termination notes are required")
        return value

    @field_validator("termination_date")
    @classmethod
    def _not_in_future(cls, value: datetime) -> datetime:
        if value > datetime.now(timezone.utc):
            raise ValueError("Termination date cannot be in the future")
        return value

    @model_validator(mode="after")
    def _default_rehire_eligibility(self) -> TerminationDetails:
        if self.eligible_for_rehire is None:
            self.eligible_for_rehire = self.reason not in _NO_REHIRE_REASONS
        return self


class Employee(CamelModel):
    id: str
    name: str
    role: Role
    site: Site
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    start_date: Timestamp
    birth_date: Timestamp | None = None
    manager_id: str | None = None
    team_id: str | None = None
    commission_tier: CommissionTier | None = None
    notes: str | None = None
    termination: TerminationDetails | None = None

    @model_validator(mode="after")
    def _terminated_needs_record(self) -> Employee:
        if self.status == EmployeeStatus.TERMINATED and self.termination is None:
            raise ValueError(f"Terminated employee {self.id} has no termination record")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    @property
    def is_agent(self) -> bool:
        return self.role == Role.AGENT

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EmployeeCreate(CamelModel):
    """Fields accepted when hiring; the id is assigned by the store."""

    name: str = Field(..., min_length=1)
    role: Role
    site: Site
    start_date: Timestamp
    birth_date: Timestamp | None = None
    manager_id: str | None = None
    team_id: str | None = None
    commission_tier: CommissionTier | None = None
    notes: str | None = None


class EmployeeUpdate(CamelModel):
    """Partial update; only fields that were explicitly set are written.

    Optional fields may be cleared with ``null``; the fields every employee
    must carry may not.
    """

    name: str | None = Field(default=None, min_length=1)
    role: Role | None = None
    site: Site | None = None
    start_date: Timestamp | None = None
    birth_date: Timestamp | None = None
    manager_id: str | None = None
    team_id: str | None = None
    commission_tier: CommissionTier | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _required_fields_not_cleared(self) -> EmployeeUpdate:
        cleared = [
            to_camel(field)
            for field in _REQUIRED_EMPLOYEE_FIELDS
            if field in self.model_fields_set and getattr(self, field) is None
        ]
        if cleared:
            raise ValueError(f"Required fields cannot be cleared: {', '.join(cleared)}")
        return self

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Team(CamelModel):
    team_id: str
    name: str
    manager_id: str
    site: Site
    agent_count: int = 0


class ChangeLogEntry(CamelModel):
    change_id: str
    timestamp: Timestamp
    change_type: ChangeType
    employee_id: str
    old_data: dict[str, Any] = {}
    new_data: dict[str, Any] = {}
    initiated_by: str = "dragon_drop_app"
