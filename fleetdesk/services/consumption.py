"""
Calcul de consommation / Consumption calculator.
Distance et rendement entre un plein et son predecesseur.
Distance and fuel efficiency between an event and its predecessor.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from fleetdesk.services.sequencer import RefuelEvent, SequencedEvent

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsumptionMetrics:
    """Metriques d'un plein ; None = non defini / Per-event metrics; None = undefined."""
    distance_km: float | None = None
    km_per_liter: float | None = None
    liters_per_100km: float | None = None

    @property
    def has_consumption(self) -> bool:
        return self.km_per_liter is not None


@dataclass(frozen=True)
class EventMetrics:
    """Plein, predecesseur et metriques / Event, predecessor and metrics."""
    event: RefuelEvent
    predecessor: RefuelEvent | None
    metrics: ConsumptionMetrics

    @property
    def distance_km(self) -> float | None:
        return self.metrics.distance_km

    @property
    def km_per_liter(self) -> float | None:
        return self.metrics.km_per_liter

    @property
    def liters_per_100km(self) -> float | None:
        return self.metrics.liters_per_100km


NO_METRICS = ConsumptionMetrics()


class ConsumptionCalculator:
    """Calcul des metriques de consommation / Consumption metrics."""

    @staticmethod
    def compute(event: RefuelEvent, predecessor: RefuelEvent | None) -> ConsumptionMetrics:
        """
        Metriques d'un plein / Metrics for one event.
        km/L et L/100km ne sont definis que si distance > 0 et litres > 0 ;
        les deux derivent de la meme distance.
        km/L and L/100km exist only when distance > 0 and liters > 0, both from the same distance.
        """
        if predecessor is None:
            return NO_METRICS
        if not (math.isfinite(event.odometer_km) and math.isfinite(predecessor.odometer_km)):
            log.warning("Fuel event %s has a non-finite odometer reading, metrics skipped", event.id)
            return NO_METRICS

        distance_km = event.odometer_km - predecessor.odometer_km
        if distance_km <= 0:
            return ConsumptionMetrics(distance_km=distance_km)
        if not (math.isfinite(event.liters) and event.liters > 0):
            log.warning("Fuel event %s has non-positive liters (%s), consumption skipped", event.id, event.liters)
            return ConsumptionMetrics(distance_km=distance_km)

        return ConsumptionMetrics(
            distance_km=distance_km,
            km_per_liter=distance_km / event.liters,
            liters_per_100km=(event.liters * 100) / distance_km,
        )

    @staticmethod
    def measure(sequenced: SequencedEvent) -> EventMetrics:
        return EventMetrics(
            event=sequenced.event,
            predecessor=sequenced.predecessor,
            metrics=ConsumptionCalculator.compute(sequenced.event, sequenced.predecessor),
        )

    @staticmethod
    def measure_all(sequenced: Iterable[SequencedEvent]) -> list[EventMetrics]:
        return [ConsumptionCalculator.measure(s) for s in sequenced]
