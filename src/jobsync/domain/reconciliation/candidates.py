"""Discovery of candidate calls for a job."""

from __future__ import annotations

from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from jobsync.domain.time_windows import TimeWindow

from .timestamps import InvalidTimestampError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from jobsync.domain.model import CallRecord, CustomerSnapshot
    from jobsync.domain.ports import CallStore, PhoneNormalizer

log = getLogger(__name__)


def collect_phone_numbers(
    customer: CustomerSnapshot | None,
    *,
    normalize: PhoneNormalizer,
) -> tuple[str, ...]:
    """Normalized, de-duplicated customer numbers in search order; blanks dropped."""

    if customer is None:
        return ()
    numbers: list[str] = []
    for raw in customer.phone_numbers:
        normalized = normalize(raw).strip()
        if normalized and normalized not in numbers:
            numbers.append(normalized)
    return tuple(numbers)


def call_search_window(reference: datetime, *, days: int) -> TimeWindow:
    try:
        return TimeWindow.around(reference, before=timedelta(days=days), after=timedelta(days=days))
    except OverflowError:
        raise InvalidTimestampError("call window", reference) from None


def deduplicate_calls(calls: Iterable[CallRecord]) -> list[CallRecord]:
    """Unique calls by identity, first occurrence keeps its position."""

    unique: dict[str, CallRecord] = {}
    for call in calls:
        unique.setdefault(call.id, call)
    return list(unique.values())


async def retrieve_candidate_calls(
    calls: CallStore,
    *,
    company_id: str,
    phone_numbers: Sequence[str],
    reference: datetime,
    window_days: int,
) -> list[CallRecord]:
    """Calls for any of ``phone_numbers`` created within ``reference`` +/- ``window_days``."""

    if not phone_numbers:
        return []
    window = call_search_window(reference, days=window_days)
    found: list[CallRecord] = []
    for phone_number in phone_numbers:
        found.extend(
            await calls.find_in_window(
                company_id=company_id,
                phone_number=phone_number,
                window=window,
            )
        )
    candidates = deduplicate_calls(found)
    log.debug(
        "Found %s candidate calls (%s before dedupe) for %s phone numbers",
        len(candidates),
        len(found),
        len(phone_numbers),
    )
    return candidates
