"""
Google Sheets como base de datos de reservas.

El Google Sheet tiene la hoja:
  - reservas → una fila por reserva, pagos serializados en JSON

Autenticación vía Service Account (credenciales en Streamlit secrets).

Setup por única vez:
  1. Crear un Service Account en Google Cloud
  2. Compartir el Google Sheet con el email del service account
  3. Poner las credenciales en .streamlit/secrets.toml
     ([gcp_service_account] y [google_sheets] spreadsheet_id)
"""

from datetime import date
from typing import List

import gspread
import streamlit as st

from config import SHEET_RESERVAS, SHEET_COLUMNS
from core.logs import get_logger
from core.models import PersistenceError, Reservation
from parsers.records import parse_records, reservation_to_row

logger = get_logger(__name__)


@st.cache_resource
def get_gspread_client():
    """
    Devuelve el cliente gspread autenticado vía Service Account.
    Las credenciales vienen de st.secrets (Streamlit Cloud) o de
    .streamlit/secrets.toml en local.
    """
    creds_dict = dict(st.secrets["gcp_service_account"])
    return gspread.service_account_from_dict(creds_dict)


def get_sheet(sheet_name: str = SHEET_RESERVAS):
    """Abre la hoja indicada; si no existe la crea con los encabezados."""
    gc = get_gspread_client()
    spreadsheet_id = st.secrets["google_sheets"]["spreadsheet_id"]
    sh = gc.open_by_key(spreadsheet_id)
    try:
        return sh.worksheet(sheet_name)
    except gspread.WorksheetNotFound:
        ws = sh.add_worksheet(title=sheet_name, rows=1000, cols=len(SHEET_COLUMNS))
        ws.append_row(SHEET_COLUMNS)
        logger.info("hoja creada", sheet=sheet_name)
        return ws


def _find_row(ws, reservation_id: str) -> int:
    """Número de fila (1-indexed) de la reserva, buscando en la columna A."""
    cell = ws.find(str(reservation_id), in_column=1)
    if cell is None:
        raise PersistenceError(f"Reserva no encontrada: {reservation_id}")
    return cell.row


def _last_column() -> str:
    return gspread.utils.rowcol_to_a1(1, len(SHEET_COLUMNS)).rstrip("1")


def load_reservations(ws=None) -> List[Reservation]:
    """
    Carga todas las reservas, ordenadas por fecha de creación descendente
    (las sin fecha quedan al final).
    """
    try:
        ws = ws or get_sheet()
        records = ws.get_all_records(expected_headers=SHEET_COLUMNS)
    except gspread.exceptions.GSpreadException as e:
        raise PersistenceError(f"Error leyendo reservas: {e}") from e

    reservations = parse_records(records)
    reservations.sort(key=lambda r: r.created or date.min, reverse=True)
    logger.info("reservas cargadas", count=len(reservations))
    return reservations


def insert_reservation(r: Reservation, ws=None) -> Reservation:
    try:
        ws = ws or get_sheet()
        ws.append_row(reservation_to_row(r), value_input_option="RAW")
    except gspread.exceptions.GSpreadException as e:
        raise PersistenceError(f"Error al guardar la reserva: {e}") from e
    logger.info("reserva insertada", reservation_id=r.id)
    return r


def update_reservation(r: Reservation, ws=None) -> Reservation:
    """Reemplaza la fila completa de la reserva."""
    try:
        ws = ws or get_sheet()
        row = _find_row(ws, r.id)
        ws.update(
            range_name=f"A{row}:{_last_column()}{row}",
            values=[reservation_to_row(r)],
            value_input_option="RAW",
        )
    except gspread.exceptions.GSpreadException as e:
        raise PersistenceError(f"Error al actualizar: {e}") from e
    logger.info("reserva actualizada", reservation_id=r.id)
    return r


def delete_reservation(reservation_id: str, ws=None) -> None:
    """Borra la fila (y con ella sus pagos). Definitivo."""
    try:
        ws = ws or get_sheet()
        row = _find_row(ws, reservation_id)
        ws.delete_rows(row)
    except gspread.exceptions.GSpreadException as e:
        raise PersistenceError(f"Error al eliminar: {e}") from e
    logger.info("reserva eliminada", reservation_id=reservation_id)
