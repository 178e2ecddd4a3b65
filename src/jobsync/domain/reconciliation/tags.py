"""Marking calls that led to a job as qualified after the fact."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jobsync.domain.ports import CallStore

log = getLogger(__name__)


async def reconcile_qualification_tags(
    calls: CallStore,
    call_id: str | None,
    *,
    excluded_tags: Iterable[str],
    tag: str,
) -> bool:
    """Add ``tag`` to the call unless it already carries it or an excluded tag.

    Safe to repeat; a missing ``call_id`` is a no-op.
    """

    if call_id is None:
        return False
    exclusions = {*excluded_tags, tag}
    added = await calls.append_tag_unless_present(call_id, excluded_tags=exclusions, tag=tag)
    if added:
        log.info(f"Tagged call {call_id} as {tag!r}")
    return added
