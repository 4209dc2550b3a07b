from datetime import date

import pytest

from core.models import Payment, Reservation


def pay(amount, pid=None, on=date(2024, 1, 10), method="Efectivo"):
    return Payment(id=pid or f"p{amount}", date=on, method=method, amount=amount)


@pytest.fixture
def make_reservation():
    """Factory de reservas con valores por defecto razonables."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = dict(
            id=f"r{counter['n']}",
            created=date(2024, 1, 5),
            travel_date=date(2024, 2, 1),
            holder="Juan Pérez",
            destination="Bariloche",
            operator="Acme Viajes",
            sale_price=1000.0,
            net_price=None,
        )
        for side in ("client_payments", "supplier_payments"):
            if side in overrides:
                overrides[side] = tuple(
                    p if isinstance(p, Payment) else pay(p, pid=f"{side[0]}{i}")
                    for i, p in enumerate(overrides[side])
                )
        fields.update(overrides)
        return Reservation(**fields)

    return _make
