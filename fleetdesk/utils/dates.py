"""
Utilitaires de dates / Date helpers.
Les horodatages de plein sont stockes en texte `YYYY-MM-DDTHH:MM` (minute).
Refuel timestamps are stored as `YYYY-MM-DDTHH:MM` text (minute precision).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time

REFUEL_AT_FORMAT = "%Y-%m-%dT%H:%M"
DUE_DATE_FORMAT = "%Y-%m-%d"

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_TIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def normalize_refuel_at(raw: str | None) -> str | None:
    """Normaliser une saisie en `YYYY-MM-DDTHH:MM` / Normalise caller input.

    `YYYY-MM-DD` devient minuit, les secondes et fuseaux sont tronques.
    Retourne None si la saisie n'est pas reconnue.
    """
    value = (raw or "").strip()
    if not value:
        return None
    if _DATE_ONLY.match(value):
        candidate = f"{value}T00:00"
    elif _DATE_TIME.match(value):
        candidate = value[:10] + "T" + value[11:16]
    else:
        return None
    try:
        datetime.strptime(candidate, REFUEL_AT_FORMAT)
    except ValueError:
        return None
    return candidate


def parse_refuel_at(value: str) -> datetime:
    """Convertir un horodatage normalise en datetime / Parse a normalised refuel timestamp."""
    return datetime.strptime(value[:16], REFUEL_AT_FORMAT)


def format_refuel_at(value: datetime) -> str:
    return value.strftime(REFUEL_AT_FORMAT)


def parse_due_date(value: str | None) -> date | None:
    """`YYYY-MM-DD` -> date, None si vide / None when empty."""
    value = (value or "").strip()
    if not value:
        return None
    return datetime.strptime(value[:10], DUE_DATE_FORMAT).date()


@dataclass(frozen=True)
class DateWindow:
    """Fenetre inclusive [from, to] sur refuel_at / Inclusive window on refuel_at.

    Une borne absente signifie non borne de ce cote.
    A missing bound means unbounded on that side.
    """
    date_from: datetime | None = None
    date_to: datetime | None = None

    @classmethod
    def from_bounds(cls, date_from: str | None = None, date_to: str | None = None) -> DateWindow:
        """Construire depuis des chaines / Build from query strings.

        Une borne `to` sans heure couvre toute la journee.
        A date-only `to` bound covers the whole day. Raises ValueError on bad input.
        """
        start = end = None
        if date_from:
            normalized = normalize_refuel_at(date_from)
            if normalized is None:
                raise ValueError(f"Invalid window start: {date_from!r}")
            start = parse_refuel_at(normalized)
        if date_to:
            normalized = normalize_refuel_at(date_to)
            if normalized is None:
                raise ValueError(f"Invalid window end: {date_to!r}")
            end = parse_refuel_at(normalized)
            if _DATE_ONLY.match(date_to.strip()):
                end = datetime.combine(end.date(), time(23, 59))
        if start is not None and end is not None and start > end:
            raise ValueError("Window start is after window end")
        return cls(start, end)

    @property
    def is_unbounded(self) -> bool:
        return self.date_from is None and self.date_to is None

    def contains(self, moment: datetime) -> bool:
        if self.date_from is not None and moment < self.date_from:
            return False
        if self.date_to is not None and moment > self.date_to:
            return False
        return True
