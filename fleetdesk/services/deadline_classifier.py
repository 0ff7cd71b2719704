"""
Classification des echeances / Deadline classification.
Fonction pure de (due_date, now) : `now` est toujours passe explicitement,
capture une seule fois par rapport.
Pure function of (due_date, now): `now` is always passed in, captured once per report.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable

# Seuil "bientot echu" en jours, bornes incluses / Warning threshold in days, inclusive
WARNING_THRESHOLD_DAYS = 30
_SECONDS_PER_DAY = 24 * 60 * 60


class DeadlineState(str, enum.Enum):
    """Etat d'une echeance / Deadline state."""
    UNSET = "UNSET"
    VALID = "VALID"
    WARNING = "WARNING"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class DeadlineClassification:
    state: DeadlineState
    days_left: int | None = None


@dataclass
class DeadlineSummary:
    """Comptage par etat / Counts per state. `total` exclut les echeances non renseignees."""
    valid: int = 0
    warning: int = 0
    expired: int = 0
    unset: int = 0

    @property
    def total(self) -> int:
        return self.valid + self.warning + self.expired


class DeadlineClassifier:
    """Classement des echeances par urgence / Deadline urgency classification."""

    @staticmethod
    def days_left(due_date: date, now: datetime) -> int:
        """
        Jours restants / Days left.
        = ceil((due_date a 23:59:59 - now) / 1 jour), dans le fuseau de `now`.
        """
        end_of_day = datetime.combine(due_date, time(23, 59, 59), tzinfo=now.tzinfo)
        return math.ceil((end_of_day - now).total_seconds() / _SECONDS_PER_DAY)

    @staticmethod
    def state_for(days_left: int) -> DeadlineState:
        if days_left < 0:
            return DeadlineState.EXPIRED
        if days_left <= WARNING_THRESHOLD_DAYS:
            return DeadlineState.WARNING
        return DeadlineState.VALID

    @staticmethod
    def classify(due_date: date | None, now: datetime) -> DeadlineClassification:
        if due_date is None:
            return DeadlineClassification(state=DeadlineState.UNSET)
        days = DeadlineClassifier.days_left(due_date, now)
        return DeadlineClassification(state=DeadlineClassifier.state_for(days), days_left=days)

    @staticmethod
    def summarize(due_dates: Iterable[date | None], now: datetime) -> DeadlineSummary:
        """Compter les echeances par etat / Count deadlines per state (not deduplicated per vehicle)."""
        summary = DeadlineSummary()
        for due_date in due_dates:
            state = DeadlineClassifier.classify(due_date, now).state
            if state is DeadlineState.EXPIRED:
                summary.expired += 1
            elif state is DeadlineState.WARNING:
                summary.warning += 1
            elif state is DeadlineState.VALID:
                summary.valid += 1
            else:
                summary.unset += 1
        return summary
