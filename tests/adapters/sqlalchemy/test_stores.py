from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from jobsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCallStore,
    SqlAlchemyEstimateStore,
    SqlAlchemyHistoricalAverageStore,
)
from jobsync.domain.model import (
    Address,
    AssignedEmployee,
    CustomerSnapshot,
    GeoPoint,
    HistoricalAverageSnapshot,
    JobStatus,
    Schedule,
)
from jobsync.domain.time_windows import TimeWindow

from tests.helpers.jobs import (
    COMPANY,
    JOB_CREATED,
    PHONE,
    make_call,
    make_component,
    make_record,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from jobsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

    type Runner = Callable[[Callable[[Callable[[], SqlAlchemyUnitOfWork]], Any]], Any]


def test_call_window_query_is_closed_open(run_with_database: Runner) -> None:
    window = TimeWindow.around(JOB_CREATED, before=timedelta(days=31), after=timedelta(days=31))

    async def scenario(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> list[str]:
        async with uow_factory() as uow:
            calls = SqlAlchemyCallStore(uow.session)
            await calls.add(make_call("at-start", created_at=window.start))
            await calls.add(make_call("inside", created_at=JOB_CREATED))
            await calls.add(make_call("at-end", created_at=window.end))
            await calls.add(make_call("other-phone", phone_number="5550109999"))
            await calls.add(make_call("other-company", company_id="company-2"))
            await uow.commit()

        async with uow_factory() as uow:
            found = await uow.repositories.calls.find_in_window(
                company_id=COMPANY.id, phone_number=PHONE, window=window
            )
        return [call.id for call in found]

    assert run_with_database(scenario) == ["at-start", "inside"]


def test_conditional_tag_append(run_with_database: Runner) -> None:
    excluded = ("qualified", "booked")

    async def scenario(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> tuple[Any, ...]:
        async with uow_factory() as uow:
            await SqlAlchemyCallStore(uow.session).add(make_call("plain", tags=("voicemail",)))
            await SqlAlchemyCallStore(uow.session).add(make_call("booked", tags=(" Booked ",)))
            await uow.commit()

        async with uow_factory() as uow:
            calls = uow.repositories.calls
            first = await calls.append_tag_unless_present(
                "plain", excluded_tags=excluded, tag="later qualified"
            )
            second = await calls.append_tag_unless_present(
                "plain", excluded_tags=excluded, tag="later qualified"
            )
            blocked = await calls.append_tag_unless_present(
                "booked", excluded_tags=excluded, tag="later qualified"
            )
            missing = await calls.append_tag_unless_present(
                "missing", excluded_tags=excluded, tag="later qualified"
            )
            await uow.commit()

        async with uow_factory() as uow:
            window = TimeWindow.around(
                JOB_CREATED, before=timedelta(days=31), after=timedelta(days=31)
            )
            stored = await uow.repositories.calls.find_in_window(
                company_id=COMPANY.id, phone_number=PHONE, window=window
            )
        tags = {call.id: call.tags for call in stored}
        return first, second, blocked, missing, tags

    first, second, blocked, missing, tags = run_with_database(scenario)

    assert (first, second, blocked, missing) == (True, False, False, False)
    assert tags["plain"] == ("voicemail", "later qualified")
    assert tags["booked"] == (" Booked ",)


def test_job_record_round_trip_preserves_nested_values(run_with_database: Runner) -> None:
    scheduled = datetime(2025, 3, 14, 14, tzinfo=UTC)
    component = make_component("job_1", revenue=250.0, scheduled_start=scheduled)
    component.customer = CustomerSnapshot(id="cus_1", mobile_number="555-010-2000")
    component.assigned_employees = (AssignedEmployee(id="pro_1", first_name="Sam"),)
    record = make_record("job_1", components=[component], linked_call_id="call-1", revenue=250.0)
    record.status = JobStatus.COMPLETED
    record.schedule = component.schedule
    record.customer = component.customer
    record.assigned_employees = component.assigned_employees
    record.match_reason = "best_score"
    record.match_details = {"score": 0.9, "checked_at": "2025-03-10T15:00:00+00:00"}
    record.address = Address(street="12 Elm St", city="Springfield")
    record.location = GeoPoint(latitude=39.8, longitude=-89.6)
    record.average = HistoricalAverageSnapshot(
        company_id=COMPANY.id,
        snapshot_date=date(2025, 3, 1),
        overall_average_revenue=310.0,
        source_averages={"google": 280.0},
    )

    async def scenario(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> Any:
        async with uow_factory() as uow:
            await uow.repositories.jobs.insert(record)
            await uow.commit()
        async with uow_factory() as uow:
            return await uow.repositories.jobs.find_by_job_id(
                company_id=COMPANY.id, job_id="job_1"
            )

    loaded = run_with_database(scenario)

    assert loaded is not None
    assert loaded.id == record.id
    assert loaded.status is JobStatus.COMPLETED
    assert loaded.components == [component]
    assert loaded.components[0].schedule == Schedule(scheduled_start=scheduled)
    assert loaded.assigned_employees == component.assigned_employees
    assert loaded.match_details == record.match_details
    assert loaded.address == record.address
    assert loaded.location == record.location
    assert loaded.average == record.average
    assert loaded.created_at == record.created_at


def test_containing_lookup_matches_whole_ids_only(run_with_database: Runner) -> None:
    async def scenario(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> tuple[Any, Any]:
        async with uow_factory() as uow:
            await uow.repositories.jobs.insert(make_record("job_10,job_2"))
            await uow.commit()
        async with uow_factory() as uow:
            jobs = uow.repositories.jobs
            hit = await jobs.find_containing_job_id(company_id=COMPANY.id, job_id="job_2")
            miss = await jobs.find_containing_job_id(company_id=COMPANY.id, job_id="job_1")
        return hit, miss

    hit, miss = run_with_database(scenario)

    assert hit is not None
    assert hit.job_id == "job_10,job_2"
    assert miss is None


def test_linked_to_call_returns_most_recent(run_with_database: Runner) -> None:
    async def scenario(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> Any:
        async with uow_factory() as uow:
            jobs = uow.repositories.jobs
            await jobs.insert(
                make_record("old", linked_call_id="c1", created_at=JOB_CREATED - timedelta(days=9))
            )
            await jobs.insert(
                make_record("new", linked_call_id="c1", created_at=JOB_CREATED - timedelta(days=1))
            )
            await uow.commit()
        async with uow_factory() as uow:
            return await uow.repositories.jobs.find_linked_to_call(
                company_id=COMPANY.id, call_id="c1"
            )

    linked = run_with_database(scenario)

    assert linked is not None
    assert linked.job_id == "new"


def test_save_and_update_fields(run_with_database: Runner) -> None:
    record = make_record("job_0")

    async def scenario(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> Any:
        async with uow_factory() as uow:
            await uow.repositories.jobs.insert(record)
            await uow.commit()
        async with uow_factory() as uow:
            jobs = uow.repositories.jobs
            stored = await jobs.find_by_job_id(company_id=COMPANY.id, job_id="job_0")
            assert stored is not None
            stored.job_id = "job_0,job_1"
            stored.components = [make_component("job_0"), make_component("job_1")]
            stored.revenue = 200.0
            await jobs.save(stored)
            await jobs.update_fields(
                stored.id, {"status": JobStatus.CANCELED, "updated_at": JOB_CREATED}
            )
            await uow.commit()
        async with uow_factory() as uow:
            return await uow.repositories.jobs.find_containing_job_id(
                company_id=COMPANY.id, job_id="job_1"
            )

    loaded = run_with_database(scenario)

    assert loaded is not None
    assert loaded.revenue == 200.0
    assert loaded.status is JobStatus.CANCELED
    assert loaded.updated_at == JOB_CREATED
    assert [component.job_id for component in loaded.components or ()] == ["job_0", "job_1"]


def test_estimate_and_average_lookups(run_with_database: Runner) -> None:
    async def scenario(uow_factory: Callable[[], SqlAlchemyUnitOfWork]) -> tuple[Any, ...]:
        async with uow_factory() as uow:
            estimates = SqlAlchemyEstimateStore(uow.session)
            await estimates.add(estimate_id="est_1", company_id=COMPANY.id, linked_call_id="c1")
            averages = SqlAlchemyHistoricalAverageStore(uow.session)
            for day, value in ((1, 100.0), (15, 150.0)):
                await averages.add(
                    HistoricalAverageSnapshot(
                        company_id=COMPANY.id,
                        snapshot_date=date(2025, 3, day),
                        overall_average_revenue=value,
                    )
                )
            await uow.commit()
        async with uow_factory() as uow:
            repos = uow.repositories
            return (
                await repos.estimates.find_linked_to_call(company_id=COMPANY.id, call_id="c1"),
                await repos.estimates.find_linked_to_call(company_id=COMPANY.id, call_id="c2"),
                await repos.historical_averages.find_exact(
                    company_id=COMPANY.id, snapshot_date=date(2025, 3, 1)
                ),
                await repos.historical_averages.find_exact(
                    company_id=COMPANY.id, snapshot_date=date(2025, 3, 2)
                ),
                await repos.historical_averages.find_most_recent(company_id=COMPANY.id),
            )

    linked, unlinked, exact, absent, latest = run_with_database(scenario)

    assert linked == "est_1"
    assert unlinked is None
    assert exact is not None
    assert exact.overall_average_revenue == 100.0
    assert absent is None
    assert latest is not None
    assert latest.snapshot_date == date(2025, 3, 15)
