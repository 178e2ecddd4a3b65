"""Default phone-number normalization for call lookups."""

from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D+")
_US_NUMBER_LENGTH = 10


def normalize_phone(raw: str) -> str:
    """Reduce a phone number to its national digits (US-centric).

    ``"+1 (555) 010-2000"`` and ``"555.010.2000"`` both become ``"5550102000"``.
    Input without digits normalizes to ``""``.
    """

    digits = _NON_DIGITS.sub("", raw or "")
    if len(digits) == _US_NUMBER_LENGTH + 1 and digits.startswith("1"):
        return digits[1:]
    return digits
