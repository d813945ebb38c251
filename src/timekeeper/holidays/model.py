from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Holiday:
    """Reference data: classification of one civil date."""

    date: date
    is_holiday: bool
    name: str
    type: str


@dataclass(frozen=True)
class DayKind:
    civil_date: str
    is_holiday: bool
    is_weekend: bool
    name: Optional[str] = None
    type: Optional[str] = None
