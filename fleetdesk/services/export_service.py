"""
Service d'export CSV/Excel/PDF / CSV/Excel/PDF export service.
Génère des fichiers à partir des lignes calculées par FuelAnalyticsService.
"""

import csv
import io
from typing import Any

from openpyxl import Workbook
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from fleetdesk.services.aggregator import DashboardAggregate, VehicleConsumption
from fleetdesk.services.consumption import EventMetrics
from fleetdesk.utils.dates import format_refuel_at

LEDGER_FIELDS = [
    "id",
    "vehicle_code",
    "plate",
    "refuel_at",
    "odometer_km",
    "liters",
    "amount",
    "source_type",
    "source_identifier",
    "distance_km",
    "km_per_liter",
    "liters_per_100km",
]

SUMMARY_FIELDS = ["metric", "value"]
MONTHLY_FIELDS = ["month", "liters", "amount", "distance_km"]
COMPARISON_FIELDS = [
    "vehicle_code",
    "plate",
    "avg_km_per_liter",
    "avg_liters_per_100km",
    "samples",
    "total_liters",
    "total_distance_km",
]

_PDF_TABLE_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, 0), 9),
    ("FONTSIZE", (0, 1), (-1, -1), 8),
    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
])


def _round(value: float | None, digits: int = 2) -> float | None:
    return round(value, digits) if value is not None else None


class ExportService:
    """Export de données vers CSV/XLSX/PDF / Data export to CSV/XLSX/PDF."""

    # ─── Lignes / Rows ───

    @staticmethod
    def ledger_rows(rows: list[EventMetrics], vehicles: dict[int, Any]) -> list[dict[str, Any]]:
        """Lignes du registre des pleins / Refuel ledger rows."""
        result = []
        for row in rows:
            vehicle = vehicles.get(row.event.vehicle_id)
            result.append({
                "id": row.event.id,
                "vehicle_code": getattr(vehicle, "code", None),
                "plate": getattr(vehicle, "plate", None),
                "refuel_at": format_refuel_at(row.event.refuel_at),
                "odometer_km": row.event.odometer_km,
                "liters": row.event.liters,
                "amount": row.event.amount,
                "source_type": row.event.source_type,
                "source_identifier": row.event.source_identifier,
                "distance_km": row.distance_km,
                "km_per_liter": _round(row.km_per_liter),
                "liters_per_100km": _round(row.liters_per_100km),
            })
        return result

    @staticmethod
    def comparison_rows(items: list[VehicleConsumption], vehicles: dict[int, Any]) -> list[dict[str, Any]]:
        result = []
        for item in items:
            vehicle = vehicles.get(item.vehicle_id)
            result.append({
                "vehicle_code": getattr(vehicle, "code", None),
                "plate": getattr(vehicle, "plate", None),
                "avg_km_per_liter": _round(item.avg_km_per_liter),
                "avg_liters_per_100km": _round(item.avg_liters_per_100km),
                "samples": item.samples,
                "total_liters": _round(item.total_liters),
                "total_distance_km": _round(item.total_distance_km),
            })
        return result

    @staticmethod
    def dashboard_sheets(aggregate: DashboardAggregate, vehicles: dict[int, Any]) -> list[tuple[str, list[dict], list[str]]]:
        """Feuilles du tableau de bord / Dashboard sheets: (name, rows, fields)."""
        summary = [
            {"metric": "total_liters", "value": _round(aggregate.total_liters)},
            {"metric": "total_amount", "value": _round(aggregate.total_amount)},
            {"metric": "total_distance_km", "value": _round(aggregate.total_distance_km)},
            {"metric": "avg_consumption_km_l", "value": _round(aggregate.avg_consumption_km_l)},
            {"metric": "event_count", "value": aggregate.event_count},
        ]
        monthly = [
            {
                "month": b.month,
                "liters": _round(b.liters),
                "amount": _round(b.amount),
                "distance_km": _round(b.distance_km),
            }
            for b in aggregate.monthly_series
        ]
        return [
            ("Summary", summary, SUMMARY_FIELDS),
            ("Monthly", monthly, MONTHLY_FIELDS),
            ("Vehicles", ExportService.comparison_rows(aggregate.vehicle_comparison, vehicles), COMPARISON_FIELDS),
        ]

    # ─── Formats ───

    @staticmethod
    def to_csv(rows: list[dict], fields: list[str]) -> bytes:
        """Générer un CSV UTF-8 BOM avec séparateur ';' / Generate UTF-8 BOM CSV with ';' separator."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fields, delimiter=";", extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({f: "" if row.get(f) is None else row.get(f) for f in fields})
        return ("\ufeff" + output.getvalue()).encode("utf-8")

    @staticmethod
    def to_xlsx(sheets: list[tuple[str, list[dict], list[str]]]) -> bytes:
        """Générer un fichier Excel multi-feuilles / Generate a multi-sheet Excel file."""
        wb = Workbook()
        wb.remove(wb.active)

        for sheet_name, rows, fields in sheets:
            ws = wb.create_sheet(title=sheet_name[:31])

            # En-têtes / Headers
            for col_idx, field in enumerate(fields, 1):
                cell = ws.cell(row=1, column=col_idx, value=field)
                cell.font = cell.font.copy(bold=True)

            # Données / Data rows
            for row_idx, row in enumerate(rows, 2):
                for col_idx, field in enumerate(fields, 1):
                    ws.cell(row=row_idx, column=col_idx, value=row.get(field))

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    @staticmethod
    def to_pdf(title: str, subtitle: str, sheets: list[tuple[str, list[dict], list[str]]]) -> bytes:
        """Générer un rapport PDF / Generate a PDF report, one table per sheet."""
        output = io.BytesIO()
        doc = SimpleDocTemplate(output, pagesize=landscape(A4), title=title)
        styles = getSampleStyleSheet()
        elements = [Paragraph(title, styles["Heading1"]), Paragraph(subtitle, styles["Normal"]), Spacer(1, 16)]

        for sheet_name, rows, fields in sheets:
            elements.append(Paragraph(sheet_name, styles["Heading2"]))
            if not rows:
                elements.append(Paragraph("-", styles["Normal"]))
                elements.append(Spacer(1, 12))
                continue
            table_data = [fields]
            for row in rows:
                table_data.append(["" if row.get(f) is None else str(row.get(f))[:24] for f in fields])
            table = Table(table_data, repeatRows=1)
            table.setStyle(_PDF_TABLE_STYLE)
            elements.append(table)
            elements.append(Spacer(1, 16))

        doc.build(elements)
        return output.getvalue()
