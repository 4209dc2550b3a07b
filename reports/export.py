"""
Export a Excel de las reservas filtradas.

Formato (hoja 'Reservas'):
  - Título del mes (sólo si el rango cae dentro de un mismo mes) + fila vacía
  - Encabezado FECHA / NOMBRE / DESTINO / OPERADOR / SALDO PAX / SALDO PROV / VOUCHER
  - Con rango de fechas: un bloque por cada día entre la primera y la última
    fecha de salida, también los días sin reservas (sólo la fecha), cada
    bloque seguido de una fila vacía
  - Sin rango: una fila por reserva, en el orden de la lista
"""

import io
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font

from config import EXPORT_HEADER, EXPORT_SHEET, MONTH_NAMES
from core.balance import is_overpaid, summarize
from core.models import PaymentStatus, Reservation
from parsers.form_input import format_currency, format_date
from reports.view import ViewFilters


def month_title(filters: ViewFilters) -> str:
    """'ENERO DE 2024' si desde/hasta están en el mismo mes, si no ''."""
    start, end = filters.date_from, filters.date_to
    if start is None or end is None:
        return ""
    if (start.year, start.month) != (end.year, end.month):
        return ""
    return f"{MONTH_NAMES[start.month - 1]} de {start.year}".upper()


def export_filename(filters: ViewFilters) -> str:
    title = month_title(filters)
    return f"Reservas_{title}.xlsx" if title else "Reservas.xlsx"


def _row(r: Reservation) -> list:
    s = summarize(r)
    return [
        format_date(r.travel_date),
        r.holder,
        r.destination,
        r.operator,
        "SALDADO" if s.client_status == PaymentStatus.SETTLED else "",
        "SALDADO" if s.supplier_status == PaymentStatus.SETTLED else "",
        "ENVIADO" if r.voucher_sent else "",
    ]


def _daily_rows(reservations: Sequence[Reservation]) -> List[list]:
    by_day: Dict[date, List[Reservation]] = defaultdict(list)
    undated = []
    for r in reservations:
        if r.travel_date is None:
            undated.append(r)
        else:
            by_day[r.travel_date].append(r)

    rows: List[list] = []
    if by_day:
        day, last = min(by_day), max(by_day)
        while day <= last:
            if day in by_day:
                rows.extend(_row(r) for r in by_day[day])
            else:
                rows.append([format_date(day), "", "", "", "", "", ""])
            rows.append([])
            day += timedelta(days=1)

    rows.extend(_row(r) for r in undated)
    return rows


def export_rows(reservations: Sequence[Reservation], filters: ViewFilters) -> List[list]:
    rows: List[list] = []
    title = month_title(filters)
    if title:
        rows.append([title])
        rows.append([])
    rows.append(list(EXPORT_HEADER))

    if filters.has_range:
        rows.extend(_daily_rows(reservations))
    else:
        rows.extend(_row(r) for r in reservations)
    return rows


def workbook_bytes(rows: List[list], sheet_name: str = EXPORT_SHEET) -> bytes:
    """Escribe las filas en un XLSX en memoria (para st.download_button)."""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name
    for row in rows:
        ws.append(row)
        if row == list(EXPORT_HEADER):
            for cell in ws[ws.max_row]:
                cell.font = Font(bold=True)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def reservations_dataframe(reservations: Sequence[Reservation]) -> pd.DataFrame:
    """Tabla para st.dataframe / descarga CSV."""
    columns = ["Creación", "Salida", "Nombre", "Destino", "Operador",
               "Saldo Pax", "Liq.", "Saldo Prov", "Vouch.", "Completa"]
    if not reservations:
        return pd.DataFrame(columns=columns)

    rows = []
    for r in reservations:
        s = summarize(r)
        rows.append({
            "Creación": format_date(r.created),
            "Salida": format_date(r.travel_date),
            "Nombre": r.holder,
            "Destino": r.destination,
            "Operador": r.operator,
            "Saldo Pax": _balance_label(s.client_status, s.client_percent, s.client_balance, r.currency),
            "Liq.": "✓" if r.settlement_received else "",
            "Saldo Prov": _balance_label(s.supplier_status, s.supplier_percent, s.supplier_balance, r.currency),
            "Vouch.": "✓" if r.voucher_sent else "",
            "Completa": s.complete,
        })
    return pd.DataFrame(rows, columns=columns)


def _balance_label(status: PaymentStatus, percent: float, balance: float, currency: str) -> str:
    if status == PaymentStatus.SETTLED:
        return "✓ Saldado ⚠️" if is_overpaid(status, percent) else "✓ Saldado"
    return format_currency(balance, currency)
