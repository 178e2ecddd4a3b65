from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from jobsync.domain.reconciliation import EventOutcome, OutcomeAction
from jobsync.ui import cli as cli_module

from tests.helpers.jobs import raw_job
from tests.helpers.stores import match_nothing

if TYPE_CHECKING:
    from pathlib import Path

    from jobsync.domain.model import Company
    from jobsync.domain.reconciliation import Collaborators

MATCHER = "tests.helpers.stores:match_nothing"


@pytest.fixture
def payload_file(tmp_path: Path) -> Path:
    path = tmp_path / "job.json"
    path.write_text(json.dumps(raw_job("job_7")), encoding="utf-8")
    return path


@pytest.fixture
def no_database(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    lifecycle: list[str] = []

    async def fake_startup(**_: object) -> None:
        lifecycle.append("startup")

    async def fake_shutdown() -> None:
        lifecycle.append("shutdown")

    monkeypatch.setattr(cli_module, "startup", fake_startup)
    monkeypatch.setattr(cli_module, "shutdown", fake_shutdown)
    return lifecycle


def test_init_db_starts_and_stops(no_database: list[str]) -> None:
    cli_module.main(["init-db"])

    assert no_database == ["startup", "shutdown"]


def test_replay_uses_payload_id(
    monkeypatch: pytest.MonkeyPatch, payload_file: Path, no_database: list[str]
) -> None:
    captured: dict[str, object] = {}

    async def fake_handle(
        raw: dict[str, object],
        event_type: str | None,
        job_id: str,
        company: Company,
        *,
        collaborators: Collaborators,
    ) -> EventOutcome:
        captured.update(
            raw=raw,
            event_type=event_type,
            job_id=job_id,
            company=company,
            collaborators=collaborators,
        )
        return EventOutcome(kind=None, job_id=job_id, action=OutcomeAction.CREATED)

    monkeypatch.setattr(cli_module, "handle_job_event", fake_handle)
    monkeypatch.delenv("JOBSYNC_GEOCODER_CONTACT", raising=False)

    cli_module.main(
        [
            "replay",
            str(payload_file),
            "--event-type",
            "job.created",
            "--company-id",
            "company-9",
            "--timezone",
            "America/Denver",
            "--matcher",
            MATCHER,
        ]
    )

    assert captured["job_id"] == "job_7"
    assert captured["event_type"] == "job.created"
    company = captured["company"]
    assert company == cli_module.Company(id="company-9", timezone="America/Denver")
    collaborators = captured["collaborators"]
    assert collaborators.match_best_call is match_nothing  # type: ignore[attr-defined]
    assert collaborators.geocode is None  # type: ignore[attr-defined]
    assert no_database == ["startup", "shutdown"]


def test_replay_missing_payload_exits_with_usage_error(
    tmp_path: Path, no_database: list[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(
            ["replay", str(tmp_path / "absent.json"), "--company-id", "c", "--matcher", MATCHER]
        )

    assert excinfo.value.code == 2
    assert no_database == []


@pytest.mark.parametrize("reference", ["no_colon", "tests.helpers.stores:absent", "nope.x:y"])
def test_replay_bad_matcher_reference(
    reference: str, payload_file: Path, no_database: list[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(
            ["replay", str(payload_file), "--company-id", "c", "--matcher", reference]
        )

    assert excinfo.value.code == 2
    assert no_database == []


def test_unknown_log_level_is_usage_error(no_database: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["--log-level", "chatty", "init-db"])

    assert excinfo.value.code == 2


def test_processing_failure_exits_with_one(
    monkeypatch: pytest.MonkeyPatch, payload_file: Path, no_database: list[str]
) -> None:
    async def failing_handle(*_: object, **__: object) -> EventOutcome:
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(cli_module, "handle_job_event", failing_handle)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["replay", str(payload_file), "--company-id", "c", "--matcher", MATCHER])

    assert excinfo.value.code == 1
    assert no_database == ["startup", "shutdown"]
