"""
Altas, bajas y ediciones de pagos.

Cada función devuelve una reserva nueva con la lista de pagos reconstruida;
la reserva original queda intacta.
"""

import uuid
from dataclasses import replace
from datetime import date
from typing import Optional

from core.models import Payment, Reservation

CLIENT = "client"
SUPPLIER = "supplier"

_FIELDS = {
    CLIENT: "client_payments",
    SUPPLIER: "supplier_payments",
}


def _field(side: str) -> str:
    try:
        return _FIELDS[side]
    except KeyError:
        raise ValueError(f"Lado de pago desconocido: {side!r}")


def new_payment(pay_date: Optional[date], method: str, amount: float) -> Payment:
    """Crea un pago con id único (uuid4)."""
    return Payment(id=uuid.uuid4().hex, date=pay_date, method=method, amount=amount)


def append_payment(r: Reservation, side: str, payment: Payment) -> Reservation:
    name = _field(side)
    return replace(r, **{name: getattr(r, name) + (payment,)})


def remove_payment(r: Reservation, side: str, payment_id: str) -> Reservation:
    name = _field(side)
    kept = tuple(p for p in getattr(r, name) if p.id != payment_id)
    return replace(r, **{name: kept})


def update_payment_amount(r: Reservation, side: str, payment_id: str, amount: float) -> Reservation:
    name = _field(side)
    updated = tuple(
        replace(p, amount=amount) if p.id == payment_id else p
        for p in getattr(r, name)
    )
    return replace(r, **{name: updated})
