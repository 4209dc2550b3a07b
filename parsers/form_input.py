"""
Conversión de la entrada de formularios (strings) a valores del modelo, y
formato de fechas/importes para mostrar.

Política: un importe que no se puede interpretar vale 0, nunca error.
"""

import re
from datetime import date, datetime
from typing import Iterable, List, Optional

from core.models import Reservation


def to_amount(val) -> float:
    """Convierte un valor en float, tolerando None, vacíos y coma decimal."""
    if val is None or str(val).strip() in ("", "nan", "-", "None"):
        return 0.0
    if isinstance(val, bool):
        return 0.0
    if isinstance(val, (int, float)):
        return float(val) if val == val else 0.0  # NaN → 0
    try:
        return float(str(val).strip().replace(",", ".").replace(" ", ""))
    except (ValueError, TypeError):
        return 0.0


def is_unreadable_amount(val) -> bool:
    """
    True si el texto no está vacío pero to_amount lo lleva a 0 sin ser un
    cero escrito (p. ej. '1.500.000' o 'mil').
    """
    s = str(val or "").strip()
    if not s:
        return False
    return to_amount(s) == 0.0 and not re.fullmatch(r"[-+]?(0+([.,]0*)?|[.,]0+)", s)


def amount_text(amount: float) -> str:
    """Importe → texto editable sin perder dígitos (1234567.0 → '1234567')."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def to_date(val) -> Optional[date]:
    """Convierte 'YYYY-MM-DD' (o 'DD/MM/YYYY') en date. Inválido → None."""
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    if not s or s in ("nan", "None"):
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def to_iso(d: Optional[date]) -> str:
    return d.strftime("%Y-%m-%d") if d else ""


def parse_input_date(text: str) -> Optional[str]:
    """'DD/MM/YYYY' tipeado por el usuario → 'YYYY-MM-DD', o None si no es válido."""
    if not text:
        return None
    parts = text.split("/")
    if len(parts) != 3:
        return None
    day, month, year = parts
    if len(year) != 4 or not (1 <= len(month) <= 2) or not (1 <= len(day) <= 2):
        return None
    try:
        d = date(int(year), int(month), int(day))
    except ValueError:
        return None
    return to_iso(d)


def format_date(val) -> str:
    """date o 'YYYY-MM-DD' → 'DD/MM/YYYY'. Strings mal formados se devuelven tal cual."""
    if not val:
        return ""
    if isinstance(val, date):
        return val.strftime("%d/%m/%Y")
    s = str(val)
    parts = s.split("-")
    if len(parts) != 3 or not all(parts):
        return s
    year, month, day = parts
    return f"{day}/{month}/{year}"


def mask_date_input(value: str) -> str:
    """Aplica la máscara DD/MM/YYYY a lo que se va tipeando (sólo dígitos)."""
    numbers = re.sub(r"\D", "", value or "")
    if not numbers:
        return ""
    masked = numbers[:2]
    if len(numbers) >= 3:
        masked += "/" + numbers[2:4]
    if len(numbers) >= 5:
        masked += "/" + numbers[4:8]
    return masked


def format_currency(amount: float, currency: str = "ARS") -> str:
    """Formato es-AR sin decimales: '$ 1.234' / 'US$ 1.234'."""
    symbol = "US$" if currency == "USD" else "$"
    rounded = int(round(abs(amount)))
    digits = f"{rounded:,}".replace(",", ".")
    sign = "-" if amount < 0 and rounded else ""
    return f"{sign}{symbol} {digits}"


def suggestions(reservations: Iterable[Reservation], attr: str) -> List[str]:
    """Valores distintos y no vacíos de un campo (destino, operador) para autocompletar."""
    values = {getattr(r, attr) for r in reservations if getattr(r, attr, None)}
    return sorted(values, key=str.lower)
