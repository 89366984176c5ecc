# cc_core/sequences/numbering.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from django.db import models


class ResetScope(models.TextChoices):
    GLOBAL = "global", "Never resets"
    MONTHLY = "monthly", "Resets every month"
    YEARLY = "yearly", "Resets every year"


# older settings documents used month/year/never
RESET_SCOPE_ALIASES = {
    "never": ResetScope.GLOBAL,
    "month": ResetScope.MONTHLY,
    "year": ResetScope.YEARLY,
}

# keys double as document ids in the old store; keep them portable
_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,35}$")

KEY_SEPARATOR = "-"


@dataclass(frozen=True)
class NumberingRule:
    prefix: str
    reset_scope: str = ResetScope.MONTHLY
    pad: int = 4


def normalize_reset_scope(value: str | None) -> str:
    raw = (value or "").strip().lower()
    if raw in ResetScope.values:
        return raw
    return RESET_SCOPE_ALIASES.get(raw, ResetScope.GLOBAL).value


def scope_key(prefix: str, reset_scope: str, when: datetime) -> str:
    """
    INV + monthly + 2025-08-14 -> "INV-202508"
    INV + yearly               -> "INV-2025"
    INV + global               -> "INV"
    """
    parts = [prefix.strip()]
    scope = normalize_reset_scope(reset_scope)
    if scope == ResetScope.MONTHLY:
        parts.append(f"{when.year:04d}{when.month:02d}")
    elif scope == ResetScope.YEARLY:
        parts.append(f"{when.year:04d}")
    return KEY_SEPARATOR.join(p for p in parts if p)


def is_valid_key(key: str) -> bool:
    return bool(_KEY_RE.match(key or ""))


def format_number(key: str, value: int, pad: int) -> str:
    return f"{key}{KEY_SEPARATOR}{int(value):0{max(1, int(pad))}d}"
