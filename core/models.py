"""
Modelos de datos: Reservation (reserva) y Payment (pago).
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class ReservasError(Exception):
    """Error base del sistema de reservas."""


class PersistenceError(ReservasError):
    """Falla al leer o escribir en el almacenamiento remoto."""


class PaymentStatus(str, Enum):
    PENDING = "pendiente"
    PARTIAL = "parcial"
    SETTLED = "saldado"


@dataclass(frozen=True)
class Payment:
    """Un pago del pasajero o al operador. Vive sólo dentro de su reserva."""
    id: str                 # único dentro de la reserva
    date: Optional[date]
    method: str             # "Efectivo" | "Tarjeta" | "Transferencia" | "Depósito"
    amount: float           # puede ser negativo o editarse después


@dataclass(frozen=True)
class Reservation:
    """Una reserva de viaje con sus pagos de pasajero y de operador."""
    id: str
    created: Optional[date]
    travel_date: Optional[date]
    holder: str                          # titular
    destination: str
    operator: str
    sale_price: float                    # precio de venta (obligatorio)
    net_price: Optional[float] = None    # costo del operador, None = sin costo
    currency: str = "ARS"
    return_date: Optional[date] = None
    settlement_received: bool = False    # liquidación recibida
    voucher_sent: bool = False
    client_payments: Tuple[Payment, ...] = field(default_factory=tuple)
    supplier_payments: Tuple[Payment, ...] = field(default_factory=tuple)
