"""
Agregation des consommations / Consumption aggregation.
Totaux flotte, classement par vehicule et serie mensuelle sur une fenetre.
Fleet totals, per-vehicle ranking and monthly series over an optional window.

Regle de frontiere : un plein dont le predecesseur est hors fenetre ne compte
aucune distance (la chaine repart a la borne), sauf si `carry_baseline`.
Boundary rule: an event whose predecessor lies outside the window contributes
no distance (the chain restarts at the bound), unless `carry_baseline` is set.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from fleetdesk.services.consumption import EventMetrics
from fleetdesk.utils.dates import DateWindow


# ── Dataclasses de sortie ────────────────────────────────────────────


@dataclass(frozen=True)
class VehicleConsumption:
    """Consommation moyenne d'un vehicule / Mean consumption of one vehicle."""
    vehicle_id: int
    avg_km_per_liter: float
    avg_liters_per_100km: float     # 100 / avg_km_per_liter
    samples: int                    # pleins avec metrique definie
    total_liters: float
    total_distance_km: float


@dataclass(frozen=True)
class MonthlyBucket:
    """Totaux d'un mois `YYYY-MM` / Totals for one `YYYY-MM` month."""
    month: str
    liters: float
    amount: float
    distance_km: float


@dataclass
class DashboardAggregate:
    """Agregat tableau de bord / Dashboard aggregate."""
    total_liters: float = 0.0
    total_amount: float = 0.0
    total_distance_km: float = 0.0
    avg_consumption_km_l: float | None = None
    event_count: int = 0
    top_consumers: list[VehicleConsumption] = field(default_factory=list)
    monthly_series: list[MonthlyBucket] = field(default_factory=list)
    vehicle_comparison: list[VehicleConsumption] = field(default_factory=list)


def counted_distance(row: EventMetrics, window: DateWindow, carry_baseline: bool = False) -> float:
    """Distance retenue pour un plein deja dans la fenetre / Distance counted for an in-window event.

    Seules les distances positives comptent.
    """
    if row.predecessor is None or row.distance_km is None or row.distance_km <= 0:
        return 0.0
    if not carry_baseline and not window.contains(row.predecessor.refuel_at):
        return 0.0
    return row.distance_km


def _mean(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


class Aggregator:
    """Agregation des metriques par plein / Per-event metrics aggregation."""

    @staticmethod
    def filter_window(rows: Iterable[EventMetrics], window: DateWindow | None) -> list[EventMetrics]:
        if window is None or window.is_unbounded:
            return list(rows)
        return [r for r in rows if window.contains(r.event.refuel_at)]

    @staticmethod
    def rank_vehicles(rows: Iterable[EventMetrics], window: DateWindow | None = None,
                      carry_baseline: bool = False) -> list[VehicleConsumption]:
        """
        Classement par km/L moyen decroissant / Ranking by mean km/L, descending.
        Les pleins sans metrique ne comptent ni au numerateur ni au denominateur ;
        un vehicule sans aucun echantillon n'apparait pas.
        """
        window = window or DateWindow()
        samples: dict[int, list[float]] = defaultdict(list)
        liters: dict[int, float] = defaultdict(float)
        distance: dict[int, float] = defaultdict(float)
        for row in rows:
            vid = row.event.vehicle_id
            liters[vid] += row.event.liters
            distance[vid] += counted_distance(row, window, carry_baseline)
            if row.km_per_liter is not None:
                samples[vid].append(row.km_per_liter)

        ranking = []
        for vid, values in samples.items():
            avg = sum(values) / len(values)
            ranking.append(VehicleConsumption(
                vehicle_id=vid,
                avg_km_per_liter=avg,
                avg_liters_per_100km=100 / avg,
                samples=len(values),
                total_liters=liters[vid],
                total_distance_km=distance[vid],
            ))
        ranking.sort(key=lambda v: (-v.avg_km_per_liter, v.vehicle_id))
        return ranking

    @staticmethod
    def monthly_series(rows: Iterable[EventMetrics], window: DateWindow | None = None,
                       carry_baseline: bool = False) -> list[MonthlyBucket]:
        """Serie mensuelle croissante / Ascending monthly series."""
        window = window or DateWindow()
        buckets: dict[str, list[float]] = defaultdict(lambda: [0.0, 0.0, 0.0])
        for row in rows:
            bucket = buckets[row.event.refuel_at.strftime("%Y-%m")]
            bucket[0] += row.event.liters
            bucket[1] += row.event.amount
            bucket[2] += counted_distance(row, window, carry_baseline)
        return [
            MonthlyBucket(month=month, liters=b[0], amount=b[1], distance_km=b[2])
            for month, b in sorted(buckets.items())
        ]

    @staticmethod
    def aggregate(
        rows: Iterable[EventMetrics],
        window: DateWindow | None = None,
        top_n: int = 5,
        carry_baseline: bool = False,
    ) -> DashboardAggregate:
        """
        Agregat complet / Full dashboard aggregate.
        Entree vide -> totaux a zero et listes vides / Empty input -> zero totals, empty lists.
        """
        window = window or DateWindow()
        selected = Aggregator.filter_window(rows, window)
        if not selected:
            return DashboardAggregate()

        comparison = Aggregator.rank_vehicles(selected, window, carry_baseline)
        return DashboardAggregate(
            total_liters=sum(r.event.liters for r in selected),
            total_amount=sum(r.event.amount for r in selected),
            total_distance_km=sum(counted_distance(r, window, carry_baseline) for r in selected),
            avg_consumption_km_l=_mean([r.km_per_liter for r in selected if r.km_per_liter is not None]),
            event_count=len(selected),
            top_consumers=comparison[:max(top_n, 0)],
            monthly_series=Aggregator.monthly_series(selected, window, carry_baseline),
            vehicle_comparison=comparison,
        )
