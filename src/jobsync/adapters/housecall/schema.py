"""Pydantic models describing Housecall Pro job webhook bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class HousecallBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CustomerPayload(HousecallBaseModel):
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    mobile_number: str | None = None
    home_number: str | None = None
    work_number: str | None = None

    normalize_blanks = field_validator(
        "id",
        "first_name",
        "last_name",
        "email",
        "mobile_number",
        "home_number",
        "work_number",
        mode="before",
    )(_blank_to_none)


class AddressPayload(HousecallBaseModel):
    street: str | None = None
    street_line_2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None

    normalize_blanks = field_validator(
        "street", "street_line_2", "city", "state", "zip", "country", mode="before"
    )(_blank_to_none)


class SchedulePayload(HousecallBaseModel):
    scheduled_start: str | None = None
    scheduled_end: str | None = None
    arrival_window: int | None = None

    normalize_blanks = field_validator("scheduled_start", "scheduled_end", mode="before")(
        _blank_to_none
    )


class EmployeePayload(HousecallBaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None


class NamedReference(HousecallBaseModel):
    id: str | None = None
    name: str | None = None

    normalize_name = field_validator("name", mode="before")(_blank_to_none)


class JobFieldsPayload(HousecallBaseModel):
    job_type: NamedReference | None = None
    business_unit: NamedReference | None = None


class WorkTimestampsPayload(HousecallBaseModel):
    on_my_way_at: str | None = None
    started_at: str | None = None
    completed_at: str | None = None


class JobWebhookPayload(HousecallBaseModel):
    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    completed_at: str | None = None
    work_status: str | None = None
    total_amount: float | None = None
    customer: CustomerPayload | None = None
    address: AddressPayload | None = None
    schedule: SchedulePayload | None = None
    assigned_employees: list[EmployeePayload] = Field(default_factory=list["EmployeePayload"])
    job_fields: JobFieldsPayload | None = None
    work_timestamps: WorkTimestampsPayload | None = None

    normalize_blanks = field_validator(
        "created_at", "updated_at", "completed_at", "work_status", mode="before"
    )(_blank_to_none)
