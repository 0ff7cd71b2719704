"""Tests des services / Service tests."""

from datetime import date, datetime

import pytest

from fleetdesk.services.aggregator import Aggregator, counted_distance
from fleetdesk.services.consumption import ConsumptionCalculator
from fleetdesk.services.deadline_classifier import DeadlineClassifier, DeadlineState
from fleetdesk.services.fuel_analytics import FuelAnalyticsService
from fleetdesk.services.sequencer import RefuelEvent, find_neighbors, resolve_predecessors
from fleetdesk.utils.dates import DateWindow


def ev(id, vehicle_id, at, km, liters, amount=0.0):
    return RefuelEvent(
        id=id,
        vehicle_id=vehicle_id,
        refuel_at=datetime.fromisoformat(at),
        odometer_km=km,
        liters=liters,
        amount=amount,
    )


JANUARY = ev(1, 1, "2024-01-01T00:00", 1000, 40, 70.0)
FEBRUARY = ev(2, 1, "2024-02-01T00:00", 1500, 50, 90.0)


# ─── Sequencer ───

def test_predecessor_follows_refuel_time_not_insert_order():
    late = ev(1, 1, "2024-03-01T08:00", 2000, 30)
    early = ev(2, 1, "2024-01-01T08:00", 1000, 30)
    middle = ev(3, 1, "2024-02-01T08:00", 1500, 30)
    sequenced = resolve_predecessors([late, early, middle])
    assert [s.event.id for s in sequenced] == [2, 3, 1]
    assert sequenced[0].predecessor is None
    assert sequenced[1].predecessor.id == 2
    assert sequenced[2].predecessor.id == 3


def test_ties_break_on_odometer_then_id():
    a = ev(5, 1, "2024-01-01T00:00", 1200, 10)
    b = ev(4, 1, "2024-01-01T00:00", 1100, 10)
    c = ev(3, 1, "2024-01-01T00:00", 1200, 10)
    sequenced = resolve_predecessors([a, b, c])
    assert [s.event.id for s in sequenced] == [4, 3, 5]
    assert sequenced[2].predecessor.id == 3


def test_predecessors_stay_within_vehicle():
    events = [ev(1, 1, "2024-01-01T00:00", 1000, 10), ev(2, 2, "2024-01-02T00:00", 5000, 10)]
    assert all(s.predecessor is None for s in resolve_predecessors(events))


def test_find_neighbors_for_insert_and_edit():
    events = [JANUARY, FEBRUARY, ev(3, 1, "2024-03-01T00:00", 2000, 40)]
    earlier, later = find_neighbors(events, datetime(2024, 2, 15), 1700)
    assert earlier.id == 2 and later.id == 3

    # Edition : le plein edite est ignore / the edited event is ignored
    earlier, later = find_neighbors(events, datetime(2024, 2, 1), 1500, event_id=2)
    assert earlier.id == 1 and later.id == 3

    earlier, later = find_neighbors(events, datetime(2023, 12, 1), 900)
    assert earlier is None and later.id == 1


# ─── Consumption calculator ───

def test_first_fill_up_has_no_metrics():
    metrics = ConsumptionCalculator.compute(JANUARY, None)
    assert metrics.distance_km is None
    assert metrics.km_per_liter is None
    assert metrics.liters_per_100km is None


def test_consumption_between_two_fill_ups():
    metrics = ConsumptionCalculator.compute(FEBRUARY, JANUARY)
    assert metrics.distance_km == 500
    assert metrics.km_per_liter == pytest.approx(10)
    assert metrics.liters_per_100km == pytest.approx(10)


def test_non_positive_distance_leaves_consumption_undefined():
    same = ConsumptionCalculator.compute(ev(2, 1, "2024-02-01T00:00", 1000, 20), JANUARY)
    assert same.distance_km == 0
    assert same.km_per_liter is None and same.liters_per_100km is None

    rollback = ConsumptionCalculator.compute(ev(2, 1, "2024-02-01T00:00", 900, 20), JANUARY)
    assert rollback.distance_km == -100
    assert rollback.km_per_liter is None


def test_non_positive_liters_is_excluded():
    metrics = ConsumptionCalculator.compute(ev(2, 1, "2024-02-01T00:00", 1500, 0), JANUARY)
    assert metrics.distance_km == 500
    assert metrics.km_per_liter is None and metrics.liters_per_100km is None


def test_metrics_are_reciprocal():
    events = [
        ev(1, 1, "2024-01-01T00:00", 1000, 40),
        ev(2, 1, "2024-01-09T10:30", 1437, 33.7),
        ev(3, 1, "2024-01-20T18:05", 1999, 51.2),
    ]
    for row in FuelAnalyticsService.measure(events):
        if row.km_per_liter is not None:
            assert row.liters_per_100km == pytest.approx(100 / row.km_per_liter)


# ─── History ───

def test_single_event_history():
    rows = FuelAnalyticsService.compute_history([JANUARY], vehicle_id=1)
    assert len(rows) == 1
    assert rows[0].distance_km is None and rows[0].km_per_liter is None


def test_history_is_most_recent_first():
    rows = FuelAnalyticsService.compute_history([JANUARY, FEBRUARY], vehicle_id=1)
    assert [r.event.id for r in rows] == [2, 1]
    assert rows[0].distance_km == 500
    assert rows[0].km_per_liter == pytest.approx(10)
    assert rows[0].liters_per_100km == pytest.approx(10)


def test_same_instant_same_odometer_duplicate():
    first = ev(1, 1, "2024-01-01T00:00", 1000, 40)
    duplicate = ev(2, 1, "2024-01-01T00:00", 1000, 40)
    rows = FuelAnalyticsService.compute_history([duplicate, first], vehicle_id=1)
    later = next(r for r in rows if r.event.id == 2)
    assert later.predecessor.id == 1
    assert later.distance_km == 0
    assert later.km_per_liter is None and later.liters_per_100km is None


# ─── Aggregator ───

def test_empty_input_gives_zero_totals():
    aggregate = FuelAnalyticsService.compute_dashboard([])
    assert aggregate.total_liters == 0
    assert aggregate.total_amount == 0
    assert aggregate.total_distance_km == 0
    assert aggregate.avg_consumption_km_l is None
    assert aggregate.top_consumers == []
    assert aggregate.monthly_series == []
    assert aggregate.vehicle_comparison == []


def test_total_distance_equals_odometer_span():
    events = [
        ev(1, 1, "2024-01-03T00:00", 10_000, 40),
        ev(2, 1, "2024-01-10T00:00", 10_480, 38),
        ev(3, 1, "2024-01-19T00:00", 10_480, 5),
        ev(4, 1, "2024-02-02T00:00", 11_120, 45),
    ]
    aggregate = FuelAnalyticsService.compute_dashboard(events)
    assert aggregate.total_distance_km == 11_120 - 10_000


def test_average_excludes_events_without_metric():
    aggregate = FuelAnalyticsService.compute_dashboard([JANUARY, FEBRUARY])
    assert aggregate.avg_consumption_km_l == pytest.approx(10)
    assert aggregate.total_liters == 90
    assert aggregate.total_amount == pytest.approx(160)


def test_single_event_vehicle_is_not_ranked():
    events = [JANUARY, FEBRUARY, ev(3, 2, "2024-01-05T00:00", 300, 20)]
    aggregate = FuelAnalyticsService.compute_dashboard(events)
    assert [v.vehicle_id for v in aggregate.vehicle_comparison] == [1]


def test_ranking_sorted_by_mean_km_per_liter_and_truncated():
    events = []
    next_id = 1
    for vehicle_id, km_per_liter in [(1, 8), (2, 14), (3, 11), (4, 14)]:
        events.append(ev(next_id, vehicle_id, "2024-01-01T00:00", 0, 10))
        events.append(ev(next_id + 1, vehicle_id, "2024-01-15T00:00", km_per_liter * 10, 10))
        next_id += 2
    aggregate = FuelAnalyticsService.compute_dashboard(events, top_n=2)
    assert [v.vehicle_id for v in aggregate.vehicle_comparison] == [2, 4, 3, 1]
    assert [v.vehicle_id for v in aggregate.top_consumers] == [2, 4]
    assert aggregate.top_consumers[0].avg_liters_per_100km == pytest.approx(100 / 14)


def test_monthly_series_is_ascending():
    march = ev(3, 1, "2024-03-10T00:00", 2100, 60, 100.0)
    aggregate = FuelAnalyticsService.compute_dashboard([march, FEBRUARY, JANUARY])
    assert [b.month for b in aggregate.monthly_series] == ["2024-01", "2024-02", "2024-03"]
    assert aggregate.monthly_series[1].distance_km == 500
    assert aggregate.monthly_series[2].distance_km == 600
    assert aggregate.monthly_series[2].amount == 100.0


def test_window_boundary_resets_distance():
    window = DateWindow.from_bounds("2024-02-01", None)
    aggregate = FuelAnalyticsService.compute_dashboard([JANUARY, FEBRUARY], window)
    assert aggregate.total_liters == 50
    assert aggregate.total_distance_km == 0
    assert [(b.month, b.distance_km) for b in aggregate.monthly_series] == [("2024-02", 0)]


def test_window_boundary_with_carried_baseline():
    window = DateWindow.from_bounds("2024-02-01", None)
    aggregate = FuelAnalyticsService.compute_dashboard([JANUARY, FEBRUARY], window, carry_baseline=True)
    assert aggregate.total_distance_km == 500
    assert aggregate.monthly_series[0].distance_km == 500


def test_counted_distance_ignores_negative_distance():
    rows = FuelAnalyticsService.measure([JANUARY, ev(2, 1, "2024-02-01T00:00", 900, 20)])
    assert counted_distance(rows[1], DateWindow()) == 0


def test_window_end_date_is_inclusive():
    window = DateWindow.from_bounds(None, "2024-02-01")
    late_february_first = ev(2, 1, "2024-02-01T21:45", 1500, 50)
    rows = Aggregator.filter_window(FuelAnalyticsService.measure([JANUARY, late_february_first]), window)
    assert len(rows) == 2


# ─── Deadline classifier ───

NOW = datetime(2024, 6, 1, 12, 0)


@pytest.mark.parametrize(
    "due, expected_days, expected_state",
    [
        (date(2024, 5, 30), -1, DeadlineState.EXPIRED),
        (date(2024, 5, 31), 0, DeadlineState.WARNING),
        (date(2024, 6, 1), 1, DeadlineState.WARNING),
        (date(2024, 6, 30), 30, DeadlineState.WARNING),
        (date(2024, 7, 1), 31, DeadlineState.VALID),
    ],
)
def test_deadline_boundaries(due, expected_days, expected_state):
    classification = DeadlineClassifier.classify(due, NOW)
    assert classification.days_left == expected_days
    assert classification.state is expected_state


def test_state_thresholds():
    assert DeadlineClassifier.state_for(-1) is DeadlineState.EXPIRED
    assert DeadlineClassifier.state_for(0) is DeadlineState.WARNING
    assert DeadlineClassifier.state_for(30) is DeadlineState.WARNING
    assert DeadlineClassifier.state_for(31) is DeadlineState.VALID


def test_missing_due_date_is_unset():
    classification = DeadlineClassifier.classify(None, NOW)
    assert classification.state is DeadlineState.UNSET
    assert classification.days_left is None


def test_summary_counts_every_pair():
    summary = DeadlineClassifier.summarize(
        [date(2024, 5, 1), date(2024, 6, 10), date(2024, 6, 10), date(2025, 1, 1), None],
        NOW,
    )
    assert (summary.expired, summary.warning, summary.valid, summary.unset) == (1, 2, 1, 1)
    assert summary.total == 4
