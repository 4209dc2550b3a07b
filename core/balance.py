"""
Motor de saldos: estado de pagos, saldo y porcentaje cobrado, del lado del
pasajero y del lado del operador.

Funciones puras: nunca modifican la reserva y siempre recalculan los totales
desde la lista actual de pagos.
"""

from dataclasses import dataclass
from typing import Iterable

from config import PROGRESS_THRESHOLDS, PROGRESS_FALLBACK
from core.models import Payment, PaymentStatus, Reservation


@dataclass(frozen=True)
class BalanceSummary:
    """Valores derivados de una reserva, tal como los muestra la tabla."""
    client_paid: float
    client_balance: float
    client_percent: float
    client_status: PaymentStatus
    supplier_paid: float
    supplier_balance: float
    supplier_percent: float
    supplier_status: PaymentStatus
    complete: bool


def total_paid(payments: Iterable[Payment]) -> float:
    return sum((p.amount for p in payments), 0.0)


def _status(paid: float, benchmark: float) -> PaymentStatus:
    if paid >= benchmark:
        return PaymentStatus.SETTLED
    if paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


def client_status(r: Reservation) -> PaymentStatus:
    """Saldado si lo cobrado alcanza el precio de venta (límite inclusivo)."""
    return _status(total_paid(r.client_payments), r.sale_price)


def supplier_status(r: Reservation) -> PaymentStatus:
    """Sin precio neto no hay nada que pagar al operador: siempre saldado."""
    if not r.net_price:
        return PaymentStatus.SETTLED
    return _status(total_paid(r.supplier_payments), r.net_price)


def client_balance(r: Reservation) -> float:
    return r.sale_price - total_paid(r.client_payments)


def supplier_balance(r: Reservation) -> float:
    return (r.net_price or 0) - total_paid(r.supplier_payments)


def client_percent(r: Reservation) -> float:
    """
    Porcentaje cobrado sobre el precio de venta.
    Con precio de venta 0 la reserva ya está saldada: devuelve 100.
    """
    if not r.sale_price:
        return 100.0
    return total_paid(r.client_payments) / r.sale_price * 100


def supplier_percent(r: Reservation) -> float:
    if not r.net_price:
        return 0.0
    return total_paid(r.supplier_payments) / r.net_price * 100


def is_complete(r: Reservation) -> bool:
    return (
        client_status(r) == PaymentStatus.SETTLED
        and supplier_status(r) == PaymentStatus.SETTLED
        and bool(r.voucher_sent)
    )


def progress_color(percent: float) -> str:
    """Color de la barra de progreso: green ≥100, lime ≥76, orange ≥41, red."""
    for threshold, color in PROGRESS_THRESHOLDS:
        if percent >= threshold:
            return color
    return PROGRESS_FALLBACK


def is_overpaid(status: PaymentStatus, percent: float) -> bool:
    """Saldado pero con más del 100% pagado: se muestra con ⚠️."""
    return status == PaymentStatus.SETTLED and percent > 100


def summarize(r: Reservation) -> BalanceSummary:
    client_paid = total_paid(r.client_payments)
    supplier_paid = total_paid(r.supplier_payments)
    return BalanceSummary(
        client_paid=client_paid,
        client_balance=client_balance(r),
        client_percent=client_percent(r),
        client_status=client_status(r),
        supplier_paid=supplier_paid,
        supplier_balance=supplier_balance(r),
        supplier_percent=supplier_percent(r),
        supplier_status=supplier_status(r),
        complete=is_complete(r),
    )
