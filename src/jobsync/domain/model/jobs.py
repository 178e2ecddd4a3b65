"""Job lifecycle snapshots and the persisted parent aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime  # noqa: TC003
from typing import Final
from uuid import UUID, uuid4

from .averages import HistoricalAverageSnapshot  # noqa: TC001
from .enums import JobStatus

UNKNOWN_CATEGORY: Final[str] = "Unknown"
COMBINED_ID_SEPARATOR: Final[str] = ","


@dataclass(frozen=True, slots=True, kw_only=True)
class CustomerSnapshot:
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    mobile_number: str | None = None
    home_number: str | None = None

    @property
    def phone_numbers(self) -> tuple[str, ...]:
        """Raw (un-normalized) numbers in search order."""

        return tuple(number for number in (self.mobile_number, self.home_number) if number)


@dataclass(frozen=True, slots=True, kw_only=True)
class Address:
    street: str | None = None
    street_line_2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None

    def as_query(self) -> str:
        parts = (self.street, self.street_line_2, self.city, self.state, self.zip, self.country)
        return ", ".join(part.strip() for part in parts if part and part.strip())


@dataclass(frozen=True, slots=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True, kw_only=True)
class Schedule:
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    arrival_window_minutes: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AssignedEmployee:
    id: str
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None


@dataclass(slots=True, kw_only=True)
class JobComponent:
    """One external job's lifecycle snapshot inside a parent record."""

    job_id: str
    revenue: float = 0.0
    status: JobStatus = JobStatus.CREATED
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    schedule: Schedule | None = None
    customer: CustomerSnapshot | None = None
    assigned_employees: tuple[AssignedEmployee, ...] = ()
    category: str = UNKNOWN_CATEGORY
    job_type: str = ""


COMPONENT_FIELDS: Final[frozenset[str]] = frozenset(f.name for f in fields(JobComponent))


@dataclass(slots=True, kw_only=True)
class ParentJobRecord:
    """Persisted aggregate for one or more related external jobs.

    ``components is None`` marks a standalone record: the top-level fields are the
    job itself. Once combined, ``revenue`` is the sum of component revenues and the
    mirrored fields (status, schedule, customer, employees, category, type and the
    three timestamps) are copied from the primary component.
    """

    job_id: str
    company_id: str
    id: UUID = field(default_factory=uuid4)
    linked_call_id: str | None = None
    match_reason: str | None = None
    match_details: dict[str, object] = field(default_factory=dict[str, object])
    components: list[JobComponent] | None = None
    revenue: float = 0.0
    status: JobStatus = JobStatus.CREATED
    schedule: Schedule | None = None
    customer: CustomerSnapshot | None = None
    assigned_employees: tuple[AssignedEmployee, ...] = ()
    category: str = UNKNOWN_CATEGORY
    job_type: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    address: Address | None = None
    location: GeoPoint | None = None
    average: HistoricalAverageSnapshot | None = None

    @property
    def is_combined(self) -> bool:
        return bool(self.components)

    @property
    def combined_job_ids(self) -> tuple[str, ...]:
        return tuple(
            part.strip() for part in self.job_id.split(COMBINED_ID_SEPARATOR) if part.strip()
        )

    def contains_job(self, job_id: str) -> bool:
        return job_id in self.combined_job_ids

    def component_for(self, job_id: str) -> JobComponent | None:
        for component in self.components or ():
            if component.job_id == job_id:
                return component
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class JobPayload:
    """Transient job event body as delivered by the webhook transport.

    Timestamps stay raw; they are validated by the reconciliation core.
    """

    job_id: str
    created_at: str | datetime | None = None
    updated_at: str | datetime | None = None
    completed_at: str | datetime | None = None
    customer: CustomerSnapshot | None = None
    address: Address | None = None
    schedule: Schedule | None = None
    assigned_employees: tuple[AssignedEmployee, ...] = ()
    total_amount: float = 0.0
    category: str = UNKNOWN_CATEGORY
    job_type: str = ""
    work_status: str | None = None
