"""Tests API / API tests."""

import io
import logging

import pytest
from openpyxl import load_workbook
from slowapi.middleware import SlowAPIMiddleware

from fleetdesk.config import settings
from fleetdesk.main import app


async def _create_vehicle(client, code="AUTO-01", plate="AB123CD"):
    resp = await client.post("/api/vehicles/", json={"code": code, "plate": plate, "model": "Iveco Daily"})
    assert resp.status_code == 201
    return resp.json()["id"]


async def _refuel(client, vehicle_id, refuel_at, km, liters, amount=0.0, source_identifier="card-001"):
    return await client.post("/api/refuelings/", json={
        "vehicle_id": vehicle_id,
        "refuel_at": refuel_at,
        "odometer_km": km,
        "liters": liters,
        "amount": amount,
        "source_type": "card",
        "source_identifier": source_identifier,
    })


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    assert "X-Request-ID" in resp.headers


@pytest.mark.asyncio
async def test_vehicle_crud(client, vehicle_payload):
    resp = await client.post("/api/vehicles/", json=vehicle_payload)
    assert resp.status_code == 201
    vehicle = resp.json()
    assert vehicle["active"] is True

    duplicate = await client.post("/api/vehicles/", json=vehicle_payload)
    assert duplicate.status_code == 409

    resp = await client.patch(f"/api/vehicles/{vehicle['id']}/status", json={"active": False})
    assert resp.json()["active"] is False

    resp = await client.get("/api/vehicles/", params={"active": "true"})
    assert resp.json() == []

    # Un null explicite sur un champ obligatoire est refuse / Explicit null on a required field is rejected
    for field in ("code", "plate", "model", "active"):
        resp = await client.put(f"/api/vehicles/{vehicle['id']}", json={field: None})
        assert resp.status_code == 422, field
    resp = await client.put(f"/api/vehicles/{vehicle['id']}", json={"plate": "ZZ999ZZ", "description": None})
    assert resp.status_code == 200
    assert resp.json()["plate"] == "ZZ999ZZ"

    resp = await client.delete(f"/api/vehicles/{vehicle['id']}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/vehicles/{vehicle['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_seeded_fuel_sources(client):
    resp = await client.get("/api/fuel-sources/")
    identifiers = {s["identifier"] for s in resp.json()}
    assert identifiers == {"CARD-001", "TANK-CENTRALE"}

    resp = await client.post("/api/fuel-sources/", json={"source_type": "card", "identifier": " card-002 "})
    assert resp.status_code == 201
    assert resp.json()["identifier"] == "CARD-002"

    source_id = resp.json()["id"]
    assert (await client.patch(f"/api/fuel-sources/{source_id}", json={"active": None})).status_code == 422
    resp = await client.patch(f"/api/fuel-sources/{source_id}", json={"active": False})
    assert resp.json()["active"] is False


@pytest.mark.asyncio
async def test_refuel_history(client):
    vid = await _create_vehicle(client)
    assert (await _refuel(client, vid, "2024-01-01", 1000, 40, 70)).status_code == 201
    resp = await _refuel(client, vid, "2024-02-01T00:00", 1500, 50, 90)
    assert resp.status_code == 201
    assert resp.json()["source_identifier"] == "CARD-001"

    resp = await client.get(f"/api/vehicles/{vid}/history")
    assert resp.status_code == 200
    rows = resp.json()
    assert [r["refuel_at"] for r in rows] == ["2024-02-01T00:00", "2024-01-01T00:00"]
    assert rows[0]["distance_km"] == 500
    assert rows[0]["km_per_liter"] == pytest.approx(10)
    assert rows[0]["liters_per_100km"] == pytest.approx(10)
    assert rows[1]["distance_km"] is None
    assert rows[1]["km_per_liter"] is None


@pytest.mark.asyncio
async def test_same_instant_duplicate_has_no_consumption(client):
    vid = await _create_vehicle(client)
    await _refuel(client, vid, "2024-01-01T00:00", 1000, 40)
    await _refuel(client, vid, "2024-01-01T00:00", 1000, 40)
    rows = (await client.get(f"/api/vehicles/{vid}/history")).json()
    later = max(rows, key=lambda r: r["id"])
    assert later["distance_km"] == 0
    assert later["km_per_liter"] is None
    assert later["liters_per_100km"] is None


@pytest.mark.asyncio
async def test_refuel_validation(client):
    vid = await _create_vehicle(client)
    await _refuel(client, vid, "2024-01-01T08:00", 1000, 40)
    await _refuel(client, vid, "2024-03-01T08:00", 2000, 40)

    lower = await _refuel(client, vid, "2024-02-01T08:00", 900, 30)
    assert lower.status_code == 400
    higher = await _refuel(client, vid, "2024-02-01T08:00", 2100, 30)
    assert higher.status_code == 400
    assert (await _refuel(client, vid, "2024-02-01T08:00", 1500, 30)).status_code == 201

    assert (await _refuel(client, vid, "01/02/2024", 1500, 30)).status_code == 400
    assert (await _refuel(client, vid, "2024-04-01", 2500, 0)).status_code == 422
    assert (await _refuel(client, vid, "2024-04-01", 2500, 10, amount=-1)).status_code == 422
    assert (await _refuel(client, 999, "2024-04-01", 2500, 10)).status_code == 404


@pytest.mark.asyncio
async def test_update_and_delete_refuel(client):
    vid = await _create_vehicle(client)
    first = (await _refuel(client, vid, "2024-01-01", 1000, 40)).json()
    second = (await _refuel(client, vid, "2024-02-01", 1500, 50)).json()

    resp = await client.put(f"/api/refuelings/{first['id']}", json={"odometer_km": 1600})
    assert resp.status_code == 400

    resp = await client.put(f"/api/refuelings/{second['id']}", json={"odometer_km": 1400, "liters": 40})
    assert resp.status_code == 200
    rows = (await client.get(f"/api/vehicles/{vid}/history")).json()
    assert rows[0]["km_per_liter"] == pytest.approx(10)

    assert (await client.delete(f"/api/refuelings/{first['id']}")).status_code == 204
    assert (await client.delete(f"/api/refuelings/{first['id']}")).status_code == 404
    rows = (await client.get(f"/api/vehicles/{vid}/history")).json()
    assert len(rows) == 1 and rows[0]["distance_km"] is None


@pytest.mark.asyncio
async def test_ledger_window_keeps_full_history_predecessor(client):
    vid = await _create_vehicle(client)
    await _refuel(client, vid, "2024-01-01", 1000, 40)
    await _refuel(client, vid, "2024-02-01", 1500, 50)

    resp = await client.get("/api/refuelings/", params={"date_from": "2024-02-01"})
    rows = resp.json()
    assert len(rows) == 1
    assert rows[0]["vehicle_code"] == "AUTO-01"
    assert rows[0]["distance_km"] == 500

    assert (await client.get("/api/refuelings/", params={"date_from": "garbage"})).status_code == 400


@pytest.mark.asyncio
async def test_dashboard(client):
    a = await _create_vehicle(client, "AUTO-01", "AB123CD")
    b = await _create_vehicle(client, "AUTO-02", "EF456GH")
    await _create_vehicle(client, "AUTO-03", "IJ789KL")
    await _refuel(client, a, "2024-01-01", 1000, 40, 70)
    await _refuel(client, a, "2024-02-01", 1500, 50, 90)
    await _refuel(client, b, "2024-01-10", 200, 30, 50)
    await _refuel(client, b, "2024-02-10", 800, 40, 60)

    resp = await client.get("/api/dashboard")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_liters"] == 160
    assert data["total_amount"] == 270
    assert data["total_distance_km"] == 1100
    assert data["avg_consumption_km_l"] == pytest.approx(12.5)
    assert [v["vehicle_code"] for v in data["vehicle_comparison"]] == ["AUTO-02", "AUTO-01"]
    assert [m["month"] for m in data["monthly_series"]] == ["2024-01", "2024-02"]

    resp = await client.get("/api/dashboard", params={"date_from": "2024-02-01", "top": 1})
    data = resp.json()
    assert data["total_liters"] == 90
    assert data["total_distance_km"] == 0
    assert data["monthly_series"] == [{"month": "2024-02", "liters": 90, "amount": 150, "distance_km": 0}]
    assert len(data["top_consumers"]) == 1


@pytest.mark.asyncio
async def test_empty_dashboard(client):
    data = (await client.get("/api/dashboard")).json()
    assert data["total_liters"] == 0
    assert data["avg_consumption_km_l"] is None
    assert data["top_consumers"] == []


@pytest.mark.asyncio
async def test_deadlines(client):
    vid = await _create_vehicle(client)
    resp = await client.put(f"/api/vehicles/{vid}/deadlines", json={
        "ROAD_TAX": "2024-06-20",
        "INSURANCE": "2024-05-30",
        "INSPECTION": "2024-12-31",
        "TACHOGRAPH": "",
    })
    assert resp.status_code == 200
    states = {d["deadline_type"]: (d["state"], d["days_left"]) for d in resp.json()}
    assert states["ROAD_TAX"] == ("WARNING", 20)
    assert states["INSURANCE"] == ("EXPIRED", -1)
    assert states["INSPECTION"][0] == "VALID"
    assert states["TACHOGRAPH"] == ("UNSET", None)

    # Vehicule inactif exclu du resume / Inactive vehicle excluded from the summary
    other = await _create_vehicle(client, "AUTO-02", "EF456GH")
    await client.put(f"/api/vehicles/{other}/deadlines", json={"ROAD_TAX": "2024-05-01"})
    await client.patch(f"/api/vehicles/{other}/status", json={"active": False})

    summary = (await client.get("/api/deadlines/summary")).json()
    assert (summary["valid"], summary["warning"], summary["expired"], summary["total"]) == (1, 1, 1, 3)
    # 6 types, 3 renseignes sur le vehicule actif / 6 types, 3 set on the active vehicle
    assert summary["unset"] == 3
    assert summary["generated_at"] == "2024-06-01T12:00:00"

    alerts = (await client.get("/api/deadlines/alerts", params={"days": 30})).json()
    assert alerts["count"] == 2
    assert [a["deadline_type"] for a in alerts["data"]] == ["INSURANCE", "ROAD_TAX"]

    # Une saisie vide supprime l'echeance / An empty value clears the deadline
    resp = await client.put(f"/api/vehicles/{vid}/deadlines", json={"ROAD_TAX": "2024-06-20"})
    states = {d["deadline_type"]: d["state"] for d in resp.json()}
    assert states["INSURANCE"] == "UNSET"

    assert (await client.get("/api/deadlines/alerts", params={"days": 0})).status_code == 422


@pytest.mark.asyncio
async def test_deadline_summary_counts_unset_pairs(client):
    vid = await _create_vehicle(client)
    await client.put(f"/api/vehicles/{vid}/deadlines", json={"ROAD_TAX": "2025-01-15"})

    per_vehicle = (await client.get(f"/api/vehicles/{vid}/deadlines")).json()
    unset_rows = [d for d in per_vehicle if d["state"] == "UNSET"]

    summary = (await client.get("/api/deadlines/summary")).json()
    assert summary["unset"] == len(unset_rows) == len(per_vehicle) - 1
    assert (summary["valid"], summary["total"]) == (1, 1)


def test_default_rate_limit_and_logger_levels():
    assert settings.RATE_LIMIT_DEFAULT == "60/minute"
    assert any(m.cls is SlowAPIMiddleware for m in app.user_middleware)
    # Les bibliotheques ne journalisent pas en DEBUG / Libraries do not log at DEBUG
    assert logging.getLogger("aiosqlite").getEffectiveLevel() > logging.DEBUG
    if settings.DEBUG:
        assert logging.getLogger("fleetdesk").level == logging.DEBUG


@pytest.mark.asyncio
async def test_exports(client):
    vid = await _create_vehicle(client)
    await _refuel(client, vid, "2024-01-01", 1000, 40, 70)
    await _refuel(client, vid, "2024-02-01", 1500, 50, 90)

    resp = await client.get("/api/exports/refuelings", params={"format": "csv"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.content.decode("utf-8-sig").splitlines()
    assert lines[0].startswith("id;vehicle_code;plate;refuel_at")
    assert len(lines) == 3

    resp = await client.get("/api/exports/refuelings", params={"format": "xlsx", "vehicle_id": vid})
    wb = load_workbook(io.BytesIO(resp.content))
    assert wb["Refuelings"].max_row == 3

    resp = await client.get("/api/exports/dashboard", params={"format": "pdf"})
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")

    assert (await client.get("/api/exports/dashboard", params={"format": "csv"})).status_code == 422
