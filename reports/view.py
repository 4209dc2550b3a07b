"""
Vista de la tabla de reservas: filtros, ordenamiento y agrupación temporal.

La lista que llega del Sheet viene ordenada por fecha de creación
descendente. Sobre ella:
  1. filter_reservations → rango de fechas AND búsqueda AND estado
  2. sort_reservations   → sólo si hay una columna de orden activa
  3. bucket_reservations → HOY / AYER / EN LA SEMANA / ANTERIORES, sólo si
                           no hay orden ni búsqueda de texto
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config import BUCKET_LABELS, EMPTY_NO_MATCHES, EMPTY_NO_RESERVATIONS
from core.balance import client_balance, is_complete, supplier_balance
from core.models import Reservation


class DateAxis(str, Enum):
    CREATION = "creacion"
    TRAVEL = "salida"


class StatusFilter(str, Enum):
    ALL = "todas"
    COMPLETED = "completadas"
    PENDING = "pendientes"


class SortKey(str, Enum):
    CREATED = "fechaCreacion"
    TRAVEL = "fechaSalida"
    HOLDER = "nombre"
    DESTINATION = "destino"
    OPERATOR = "operador"
    CLIENT_BALANCE = "saldoPax"
    SUPPLIER_BALANCE = "saldoProv"


class SortDirection(str, Enum):
    NONE = "none"
    ASC = "asc"
    DESC = "desc"


class EmptyState(str, Enum):
    NO_MATCHES = EMPTY_NO_MATCHES
    NO_RESERVATIONS = EMPTY_NO_RESERVATIONS


@dataclass(frozen=True)
class ViewFilters:
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    date_axis: DateAxis = DateAxis.TRAVEL
    search: str = ""
    status: StatusFilter = StatusFilter.ALL

    @property
    def has_range(self) -> bool:
        return self.date_from is not None or self.date_to is not None


@dataclass(frozen=True)
class SortConfig:
    key: Optional[SortKey] = None
    direction: SortDirection = SortDirection.NONE

    @property
    def active(self) -> bool:
        return self.key is not None and self.direction != SortDirection.NONE


@dataclass(frozen=True)
class ViewGroup:
    key: str
    label: str
    reservations: List[Reservation]


@dataclass(frozen=True)
class ReservationView:
    grouped: bool
    rows: List[Reservation]
    groups: List[ViewGroup] = field(default_factory=list)
    empty_state: Optional[EmptyState] = None


def toggle_sort(config: SortConfig, key: SortKey) -> SortConfig:
    """
    Ciclo de la cabecera: misma columna asc → desc → sin orden;
    otra columna arranca en asc.
    """
    if config.key == key:
        if config.direction == SortDirection.ASC:
            return SortConfig(key, SortDirection.DESC)
        if config.direction == SortDirection.DESC:
            return SortConfig()
    return SortConfig(key, SortDirection.ASC)


# ── Filtros ─────────────────────────────────────────────────────────────────

def _axis_date(r: Reservation, axis: DateAxis) -> Optional[date]:
    return r.created if axis == DateAxis.CREATION else r.travel_date


def _in_range(r: Reservation, filters: ViewFilters) -> bool:
    if not filters.has_range:
        return True
    d = _axis_date(r, filters.date_axis)
    if d is None:
        # sin fecha no puede estar dentro de un rango acotado
        return False
    if filters.date_from is not None and d < filters.date_from:
        return False
    if filters.date_to is not None and d > filters.date_to:
        return False
    return True


def _matches_search(r: Reservation, term: str) -> bool:
    if not term:
        return True
    term = term.lower()
    return any(term in (value or "").lower() for value in (r.holder, r.operator, r.destination))


def _matches_status(r: Reservation, status: StatusFilter) -> bool:
    if status == StatusFilter.COMPLETED:
        return is_complete(r)
    if status == StatusFilter.PENDING:
        return not is_complete(r)
    return True


def filter_reservations(reservations: Sequence[Reservation], filters: ViewFilters) -> List[Reservation]:
    return [
        r for r in reservations
        if _in_range(r, filters)
        and _matches_search(r, filters.search)
        and _matches_status(r, filters.status)
    ]


# ── Ordenamiento ────────────────────────────────────────────────────────────

SORT_VALUES: Dict[SortKey, Callable[[Reservation], object]] = {
    SortKey.CREATED: lambda r: r.created or date.min,
    SortKey.TRAVEL: lambda r: r.travel_date or date.min,
    SortKey.HOLDER: lambda r: (r.holder or "").lower(),
    SortKey.DESTINATION: lambda r: (r.destination or "").lower(),
    SortKey.OPERATOR: lambda r: (r.operator or "").lower(),
    SortKey.CLIENT_BALANCE: client_balance,
    SortKey.SUPPLIER_BALANCE: supplier_balance,
}


def sort_reservations(reservations: Sequence[Reservation], config: SortConfig) -> List[Reservation]:
    """Orden estable: los empates conservan el orden de entrada."""
    if not config.active:
        return list(reservations)
    return sorted(
        reservations,
        key=SORT_VALUES[config.key],
        reverse=config.direction == SortDirection.DESC,
    )


# ── Agrupación temporal ─────────────────────────────────────────────────────

BUCKETS = ("today", "yesterday", "week", "earlier")


def week_start(today: date) -> date:
    """Lunes de la semana de `today` (domingo = lunes + 6)."""
    return today - timedelta(days=today.weekday())


def bucket_of(created: Optional[date], today: date) -> str:
    if created is None:
        return "earlier"
    yesterday = today - timedelta(days=1)
    if created >= today:
        return "today"
    if created == yesterday:
        return "yesterday"
    if created >= week_start(today):
        return "week"
    return "earlier"


def bucket_reservations(reservations: Sequence[Reservation], today: Optional[date] = None) -> Dict[str, List[Reservation]]:
    today = today or date.today()
    buckets: Dict[str, List[Reservation]] = {name: [] for name in BUCKETS}
    for r in reservations:
        buckets[bucket_of(r.created, today)].append(r)
    return buckets


# ── Vista completa ──────────────────────────────────────────────────────────

def build_view(
    reservations: Sequence[Reservation],
    filters: ViewFilters = ViewFilters(),
    sort: SortConfig = SortConfig(),
    today: Optional[date] = None,
) -> ReservationView:
    """
    Lista plana si hay orden o búsqueda activos; si no, grupos temporales
    (sólo los no vacíos).
    """
    filtered = filter_reservations(reservations, filters)

    if sort.active or filters.search:
        rows = sort_reservations(filtered, sort)
        return ReservationView(
            grouped=False,
            rows=rows,
            empty_state=None if rows else EmptyState.NO_MATCHES,
        )

    buckets = bucket_reservations(filtered, today)
    groups = [
        ViewGroup(key=name, label=BUCKET_LABELS[name], reservations=buckets[name])
        for name in BUCKETS
        if buckets[name]
    ]
    return ReservationView(
        grouped=True,
        rows=filtered,
        groups=groups,
        empty_state=None if groups else EmptyState.NO_RESERVATIONS,
    )


def clear_filters() -> Tuple[ViewFilters, SortConfig]:
    """Estado inicial, también usado por 'Limpiar filtros'."""
    return ViewFilters(), SortConfig()
