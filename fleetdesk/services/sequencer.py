"""
Sequenceur chronologique / Chronological sequencer.
Ordre total : refuel_at, puis odometer_km, puis id (tous croissants).
Total order: refuel_at, then odometer_km, then id (all ascending).

Cet ordre est le seul utilise pour resoudre le "plein precedent", en lecture
comme en validation d'ecriture.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable


# ── Dataclasses d'entrée/sortie ──────────────────────────────────────


@dataclass(frozen=True)
class RefuelEvent:
    """Vue lecture seule d'un plein / Read-only view of a refuel event."""
    id: int
    vehicle_id: int
    refuel_at: datetime             # precision minute
    odometer_km: float
    liters: float
    amount: float
    source_type: str = "card"       # card | tank
    source_identifier: str = ""


@dataclass(frozen=True)
class SequencedEvent:
    """Plein et son predecesseur immediat / Event with its immediate predecessor."""
    event: RefuelEvent
    predecessor: RefuelEvent | None


def order_key(event: RefuelEvent) -> tuple[datetime, float, int]:
    """Cle de l'ordre total / Total order key."""
    return (event.refuel_at, event.odometer_km, event.id)


def sort_chronologically(events: Iterable[RefuelEvent], reverse: bool = False) -> list[RefuelEvent]:
    return sorted(events, key=order_key, reverse=reverse)


def group_by_vehicle(events: Iterable[RefuelEvent]) -> dict[int, list[RefuelEvent]]:
    groups: dict[int, list[RefuelEvent]] = defaultdict(list)
    for event in events:
        groups[event.vehicle_id].append(event)
    return dict(groups)


def resolve_predecessors(events: Iterable[RefuelEvent]) -> list[SequencedEvent]:
    """Associer chaque plein a son predecesseur / Pair every event with its predecessor.

    Les pleins sont regroupes par vehicule ; le resultat est trie par vehicule
    puis par ordre chronologique croissant. Le premier plein d'un vehicule n'a
    pas de predecesseur.
    """
    sequenced: list[SequencedEvent] = []
    groups = group_by_vehicle(events)
    for vehicle_id in sorted(groups):
        previous: RefuelEvent | None = None
        for event in sort_chronologically(groups[vehicle_id]):
            sequenced.append(SequencedEvent(event=event, predecessor=previous))
            previous = event
    return sequenced


def find_neighbors(
    events: Iterable[RefuelEvent],
    refuel_at: datetime,
    odometer_km: float,
    event_id: int | None = None,
) -> tuple[RefuelEvent | None, RefuelEvent | None]:
    """Voisins immediats d'un plein candidat / Immediate neighbours of a candidate event.

    `events` doit concerner un seul vehicule. Le plein `event_id` (edition)
    est ignore. Sans id (insertion), le candidat se place apres tout plein de
    meme cle (refuel_at, odometer_km), car l'id attribue sera le plus grand.
    Retourne (precedent, suivant) selon l'ordre total.
    """
    candidate = (refuel_at, odometer_km, event_id if event_id is not None else math.inf)
    earlier: RefuelEvent | None = None
    later: RefuelEvent | None = None
    for event in events:
        if event_id is not None and event.id == event_id:
            continue
        key = order_key(event)
        if key < candidate:
            if earlier is None or key > order_key(earlier):
                earlier = event
        elif later is None or key < order_key(later):
            later = event
    return earlier, later
