"""
Service d'analyse carburant / Fuel analytics service.
Point d'entree unique pour l'historique, le registre et le tableau de bord :
aucun autre appelant ne recalcule la consommation.
Single entry point for history, ledger and dashboard; no caller recomputes consumption itself.
"""

import logging
from typing import Iterable

from fleetdesk.services.aggregator import Aggregator, DashboardAggregate
from fleetdesk.services.consumption import ConsumptionCalculator, EventMetrics
from fleetdesk.services.sequencer import RefuelEvent, order_key, resolve_predecessors
from fleetdesk.utils.dates import DateWindow

log = logging.getLogger(__name__)


class FuelAnalyticsService:
    """Analyse de consommation / Consumption analytics."""

    @staticmethod
    def measure(events: Iterable[RefuelEvent]) -> list[EventMetrics]:
        """Resolution chronologique croissante puis calcul / Ascending resolution, then metrics."""
        return ConsumptionCalculator.measure_all(resolve_predecessors(events))

    @staticmethod
    def compute_history(events: Iterable[RefuelEvent], vehicle_id: int | None = None) -> list[EventMetrics]:
        """
        Historique d'un vehicule, plus recent en premier / Vehicle history, most recent first.
        Les predecesseurs sont resolus dans l'ordre croissant.
        """
        if vehicle_id is not None:
            events = [e for e in events if e.vehicle_id == vehicle_id]
        rows = FuelAnalyticsService.measure(events)
        rows.sort(key=lambda r: order_key(r.event), reverse=True)
        return rows

    @staticmethod
    def compute_ledger(events: Iterable[RefuelEvent], window: DateWindow | None = None) -> list[EventMetrics]:
        """
        Registre multi-vehicules / Multi-vehicle ledger.
        Metriques calculees sur tout l'historique, puis filtre par fenetre.
        Metrics come from full history; the window only selects rows.
        """
        rows = Aggregator.filter_window(FuelAnalyticsService.measure(events), window)
        rows.sort(key=lambda r: order_key(r.event), reverse=True)
        return rows

    @staticmethod
    def compute_dashboard(
        events: Iterable[RefuelEvent],
        window: DateWindow | None = None,
        top_n: int = 5,
        carry_baseline: bool = False,
    ) -> DashboardAggregate:
        """Agregat tableau de bord / Dashboard aggregate over full-history metrics."""
        rows = FuelAnalyticsService.measure(events)
        aggregate = Aggregator.aggregate(rows, window, top_n=top_n, carry_baseline=carry_baseline)
        log.debug(
            "Dashboard computed: %d/%d events in window %s, %d ranked vehicles",
            aggregate.event_count, len(rows), window, len(aggregate.vehicle_comparison),
        )
        return aggregate
