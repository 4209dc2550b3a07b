"""
Parser de las filas de la hoja 'reservas' ⇄ Reservation.

Las fechas viajan como 'YYYY-MM-DD' y los pagos como JSON:
  [{"id": "...", "fecha": "2024-01-10", "metodo": "Efectivo", "monto": 500}]
"""

import json
from typing import List, Optional

from config import SHEET_COLUMNS, DEFAULT_CURRENCY
from core.logs import get_logger
from core.models import Payment, Reservation
from core.payments import new_payment
from parsers.form_input import to_amount, to_date, to_iso

logger = get_logger(__name__)


def _to_bool(val) -> bool:
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("true", "1", "si", "sí", "x", "verdadero")


def _to_optional_amount(val) -> Optional[float]:
    """Precio neto: vacío = sin costo de operador (None)."""
    if val is None or str(val).strip() in ("", "nan", "None"):
        return None
    return to_amount(val)


def _parse_payments(raw) -> tuple:
    if isinstance(raw, list):
        items = raw
    elif raw is None or str(raw).strip() == "":
        return ()
    else:
        try:
            items = json.loads(str(raw))
        except ValueError:
            logger.warning("pagos ilegibles, se ignoran", raw=str(raw)[:80])
            return ()
    if not isinstance(items, list):
        return ()

    payments = []
    for item in items:
        if not isinstance(item, dict):
            continue
        pay_date = to_date(item.get("fecha"))
        method = str(item.get("metodo", "") or "")
        amount = to_amount(item.get("monto"))
        if item.get("id") in (None, ""):
            payments.append(new_payment(pay_date, method, amount))
        else:
            payments.append(Payment(id=str(item["id"]), date=pay_date, method=method, amount=amount))
    return tuple(payments)


def _payments_to_json(payments) -> str:
    return json.dumps(
        [
            {"id": p.id, "fecha": to_iso(p.date), "metodo": p.method, "monto": p.amount}
            for p in payments
        ],
        ensure_ascii=False,
    )


def parse_record(record: dict) -> Optional[Reservation]:
    """Convierte un registro del Sheet en Reservation. Sin id → None."""
    res_id = str(record.get("id", "") or "").strip()
    if not res_id:
        return None

    currency = str(record.get("moneda", "") or "").strip().upper() or DEFAULT_CURRENCY

    return Reservation(
        id=res_id,
        created=to_date(record.get("fechaCreacion")),
        travel_date=to_date(record.get("fechaViaje")),
        return_date=to_date(record.get("fechaRegreso")),
        holder=str(record.get("titular", "") or "").strip(),
        destination=str(record.get("destino", "") or "").strip(),
        operator=str(record.get("operador", "") or "").strip(),
        sale_price=to_amount(record.get("precioVenta")),
        net_price=_to_optional_amount(record.get("precioNeto")),
        currency=currency,
        settlement_received=_to_bool(record.get("liquidacionRecibida", False)),
        voucher_sent=_to_bool(record.get("voucherEnviado", False)),
        client_payments=_parse_payments(record.get("pagosCliente")),
        supplier_payments=_parse_payments(record.get("pagosProveedor")),
    )


def parse_records(records: List[dict]) -> List[Reservation]:
    """Parsea todas las filas; las que no tienen id se descartan con warning."""
    reservations = []
    for i, record in enumerate(records):
        r = parse_record(record)
        if r is None:
            logger.warning("fila sin id descartada", row=i + 2)
            continue
        reservations.append(r)
    return reservations


def reservation_to_row(r: Reservation) -> list:
    """Convierte una Reservation en lista de valores para el Sheet."""
    values = {
        "id": r.id,
        "fechaCreacion": to_iso(r.created),
        "fechaViaje": to_iso(r.travel_date),
        "fechaRegreso": to_iso(r.return_date),
        "titular": r.holder,
        "destino": r.destination,
        "operador": r.operator,
        "precioVenta": r.sale_price,
        "precioNeto": r.net_price if r.net_price is not None else "",
        "moneda": r.currency,
        "liquidacionRecibida": "TRUE" if r.settlement_received else "FALSE",
        "voucherEnviado": "TRUE" if r.voucher_sent else "FALSE",
        "pagosCliente": _payments_to_json(r.client_payments),
        "pagosProveedor": _payments_to_json(r.supplier_payments),
    }
    return [values[col] for col in SHEET_COLUMNS]
