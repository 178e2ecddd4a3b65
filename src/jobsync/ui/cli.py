from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from jobsync.adapters.sqlalchemy.unit_of_work import shutdown, startup
from jobsync.app import build_collaborators, build_geocoder, handle_job_event
from jobsync.config import ConfigurationError, configure_logging
from jobsync.domain.model import Company

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from jobsync.domain.reconciliation import EventOutcome

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile field-service jobs with inbound calls")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create or upgrade the database schema")

    replay = subparsers.add_parser("replay", help="Replay one job payload from a JSON file")
    replay.add_argument("payload", type=Path, help="Path to the job JSON document")
    replay.add_argument(
        "--event-type",
        type=str,
        help="Webhook event name, e.g. job.created (absent means an update)",
    )
    replay.add_argument(
        "--job-id",
        type=str,
        help="Job id (defaults to the id inside the payload)",
    )
    replay.add_argument("--company-id", type=str, required=True, help="Owning company id")
    replay.add_argument(
        "--timezone",
        type=str,
        default="UTC",
        help="IANA timezone of the company (default: %(default)s)",
    )
    replay.add_argument(
        "--matcher",
        type=str,
        required=True,
        help="Best-call matcher as module:callable",
    )
    replay.add_argument(
        "--revenue-loss",
        type=str,
        help="Optional revenue-loss calculator as module:callable",
    )
    return parser.parse_args(list(argv))


def _log_level(name: str) -> int:
    level = logging.getLevelNamesMapping().get(name.strip().upper())
    if level is None:
        raise ValueError(f"Unknown log level: {name}")
    return level


def _resolve_callable(reference: str) -> Any:
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected module:callable, got {reference!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Cannot import {module_name!r}") from exc
    target = getattr(module, attribute, None)
    if not callable(target):
        raise ValueError(f"{reference!r} is not callable")
    return target


def _load_payload(path: Path) -> dict[str, object]:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read job payload from {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise ValueError(f"Job payload in {path} must be a JSON object")
    return document


def _resolve_job_id(args: argparse.Namespace, payload: dict[str, object]) -> str:
    job_id = args.job_id or payload.get("id")
    if not isinstance(job_id, str) or not job_id:
        raise ValueError("Missing --job-id and the payload carries no id")
    return job_id


async def _init_db() -> None:
    await startup(force=True)
    await shutdown()


async def _replay(
    args: argparse.Namespace, payload: dict[str, object], job_id: str
) -> EventOutcome:
    collaborators = build_collaborators(
        _resolve_callable(args.matcher),
        calculate_revenue_loss=(
            _resolve_callable(args.revenue_loss) if args.revenue_loss else None
        ),
        geocode=build_geocoder(),
    )
    await startup(force=True)
    try:
        return await handle_job_event(
            payload,
            args.event_type,
            job_id,
            Company(id=args.company_id, timezone=args.timezone),
            collaborators=collaborators,
        )
    finally:
        await shutdown()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    payload: dict[str, object] = {}
    job_id = ""
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=_log_level(parsed_args.log_level))
        if parsed_args.command == "replay":
            payload = _load_payload(parsed_args.payload)
            job_id = _resolve_job_id(parsed_args, payload)
            _resolve_callable(parsed_args.matcher)
            if parsed_args.revenue_loss:
                _resolve_callable(parsed_args.revenue_loss)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "init-db":
            asyncio.run(_init_db())
            log.info("Database schema is up to date")
        elif parsed_args.command == "replay":
            outcome = asyncio.run(_replay(parsed_args, payload, job_id))
            log.info(
                "Replayed job %s: action=%s, linked_call=%s",
                outcome.job_id,
                outcome.action,
                outcome.linked_call_id,
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error while processing job event")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
