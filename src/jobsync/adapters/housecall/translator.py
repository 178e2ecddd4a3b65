"""Translate Housecall Pro job payloads into domain job payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from jobsync.domain.model import (
    UNKNOWN_CATEGORY,
    Address,
    AssignedEmployee,
    CustomerSnapshot,
    JobPayload,
    Schedule,
)
from jobsync.domain.reconciliation.timestamps import parse_optional_timestamp

from .schema import JobWebhookPayload

if TYPE_CHECKING:
    from .schema import (
        AddressPayload,
        CustomerPayload,
        EmployeePayload,
        JobFieldsPayload,
        SchedulePayload,
    )

type JobPayloadInput = Mapping[str, object] | JobWebhookPayload


def parse_job_payload(payload: JobPayloadInput, *, job_id: str | None = None) -> JobPayload:
    """Build a ``JobPayload``; ``job_id`` overrides the id carried in the body."""

    model = (
        payload
        if isinstance(payload, JobWebhookPayload)
        else JobWebhookPayload.model_validate(payload)
    )
    completed_at = model.completed_at
    if completed_at is None and model.work_timestamps is not None:
        completed_at = model.work_timestamps.completed_at

    resolved_id = job_id or model.id
    if not resolved_id:
        raise ValueError("Job payload carries no id and none was given")

    category, job_type = _classification(model.job_fields)
    return JobPayload(
        job_id=resolved_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
        completed_at=completed_at,
        customer=_customer(model.customer),
        address=_address(model.address),
        schedule=_schedule(model.schedule),
        assigned_employees=tuple(_employee(item) for item in model.assigned_employees),
        total_amount=model.total_amount or 0.0,
        category=category,
        job_type=job_type,
        work_status=model.work_status,
    )


def _customer(payload: CustomerPayload | None) -> CustomerSnapshot | None:
    if payload is None:
        return None
    return CustomerSnapshot(
        id=payload.id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        mobile_number=payload.mobile_number,
        home_number=payload.home_number,
    )


def _address(payload: AddressPayload | None) -> Address | None:
    if payload is None:
        return None
    return Address(
        street=payload.street,
        street_line_2=payload.street_line_2,
        city=payload.city,
        state=payload.state,
        zip=payload.zip,
        country=payload.country,
    )


def _schedule(payload: SchedulePayload | None) -> Schedule | None:
    if payload is None:
        return None
    return Schedule(
        scheduled_start=parse_optional_timestamp(payload.scheduled_start),
        scheduled_end=parse_optional_timestamp(payload.scheduled_end),
        arrival_window_minutes=payload.arrival_window,
    )


def _employee(payload: EmployeePayload) -> AssignedEmployee:
    return AssignedEmployee(
        id=payload.id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
    )


def _classification(payload: JobFieldsPayload | None) -> tuple[str, str]:
    if payload is None:
        return UNKNOWN_CATEGORY, ""
    business_unit = payload.business_unit.name if payload.business_unit else None
    job_type = payload.job_type.name if payload.job_type else None
    return business_unit or UNKNOWN_CATEGORY, job_type or ""
