"""
Flujo de modificaciones: cada alta/edición/baja es un comando que se aplica
primero a la copia local y después se envía al almacenamiento.

Si el almacenamiento rechaza el cambio, la copia local vuelve al estado
anterior y el resultado informa el error (no se lanza excepción).
"""

import uuid
from dataclasses import dataclass, replace
from datetime import date
from typing import List, Optional, Union

from core.logs import get_logger
from core.models import PersistenceError, Reservation
from core.payments import append_payment, new_payment, remove_payment, update_payment_amount

logger = get_logger(__name__)

FLAGS = ("settlement_received", "voucher_sent")


@dataclass(frozen=True)
class AddReservation:
    reservation: Reservation


@dataclass(frozen=True)
class UpdateReservation:
    reservation: Reservation


@dataclass(frozen=True)
class DeleteReservation:
    reservation_id: str


Command = Union[AddReservation, UpdateReservation, DeleteReservation]


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    reservations: List[Reservation]
    error: Optional[str] = None


class Ledger:
    """
    Copia local de las reservas + almacenamiento remoto.

    `store` es cualquier objeto con insert_reservation / update_reservation /
    delete_reservation (por ejemplo el módulo core.sheets).
    """

    def __init__(self, reservations: List[Reservation], store):
        self.reservations = list(reservations)
        self.store = store

    def find(self, reservation_id: str) -> Optional[Reservation]:
        return next((r for r in self.reservations if r.id == reservation_id), None)

    def _local(self, command: Command) -> List[Reservation]:
        if isinstance(command, AddReservation):
            return [command.reservation] + self.reservations
        if isinstance(command, UpdateReservation):
            updated = command.reservation
            return [updated if r.id == updated.id else r for r in self.reservations]
        if isinstance(command, DeleteReservation):
            return [r for r in self.reservations if r.id != command.reservation_id]
        raise TypeError(f"Comando desconocido: {command!r}")

    def _submit(self, command: Command) -> None:
        if isinstance(command, AddReservation):
            self.store.insert_reservation(command.reservation)
        elif isinstance(command, UpdateReservation):
            self.store.update_reservation(command.reservation)
        else:
            self.store.delete_reservation(command.reservation_id)

    def apply(self, command: Command) -> CommandResult:
        previous = self.reservations
        self.reservations = self._local(command)
        try:
            self._submit(command)
        except PersistenceError as e:
            self.reservations = previous
            logger.error(
                "cambio rechazado, se revierte",
                command=type(command).__name__,
                error=str(e),
            )
            return CommandResult(ok=False, reservations=list(previous), error=str(e))

        logger.info("cambio aplicado", command=type(command).__name__)
        return CommandResult(ok=True, reservations=list(self.reservations))


# ── Constructores de comandos ───────────────────────────────────────────────

def new_reservation(
    holder: str,
    destination: str,
    operator: str,
    sale_price: float,
    travel_date: Optional[date],
    net_price: Optional[float] = None,
    currency: str = "ARS",
    return_date: Optional[date] = None,
    created: Optional[date] = None,
) -> AddReservation:
    """Reserva nueva con id único y sin pagos."""
    reservation = Reservation(
        id=uuid.uuid4().hex,
        created=created or date.today(),
        travel_date=travel_date,
        return_date=return_date,
        holder=holder.strip(),
        destination=destination.strip(),
        operator=operator.strip(),
        sale_price=sale_price,
        net_price=net_price,
        currency=currency,
    )
    return AddReservation(reservation)


def add_payment(r: Reservation, side: str, pay_date: Optional[date], method: str, amount: float) -> UpdateReservation:
    return UpdateReservation(append_payment(r, side, new_payment(pay_date, method, amount)))


def edit_payment_amount(r: Reservation, side: str, payment_id: str, amount: float) -> UpdateReservation:
    return UpdateReservation(update_payment_amount(r, side, payment_id, amount))


def delete_payment(r: Reservation, side: str, payment_id: str) -> UpdateReservation:
    return UpdateReservation(remove_payment(r, side, payment_id))


def update_field(r: Reservation, name: str, value) -> UpdateReservation:
    return UpdateReservation(replace(r, **{name: value}))


def toggle_flag(r: Reservation, name: str) -> UpdateReservation:
    """Invierte liquidación recibida / voucher enviado."""
    if name not in FLAGS:
        raise ValueError(f"Campo no booleano: {name!r}")
    return update_field(r, name, not getattr(r, name))
