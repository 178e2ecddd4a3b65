"""Public interface for the Housecall Pro payload adapter."""

from __future__ import annotations

from .schema import JobWebhookPayload
from .translator import JobPayloadInput, parse_job_payload

__all__ = ["JobPayloadInput", "JobWebhookPayload", "parse_job_payload"]
