"""
Sistema de Reservas - agencia de viajes.
Web app en Streamlit con Google Sheets como almacenamiento.
"""

import os
import sys
from datetime import date

import streamlit as st

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import CURRENCIES, DEFAULT_CLIENT_METHOD, DEFAULT_CURRENCY, DEFAULT_SUPPLIER_METHOD, PAYMENT_METHODS
from core import sheets
from core.balance import is_overpaid, progress_color, summarize
from core.commands import (
    DeleteReservation,
    Ledger,
    add_payment,
    delete_payment,
    edit_payment_amount,
    new_reservation,
    toggle_flag,
    update_field,
)
from core.logs import configure_logging, get_logger
from core.models import PersistenceError
from core.payments import CLIENT, SUPPLIER
from parsers.form_input import (
    amount_text,
    format_currency,
    format_date,
    is_unreadable_amount,
    suggestions,
    to_amount,
)
from reports.export import export_filename, export_rows, reservations_dataframe, workbook_bytes
from reports.view import (
    DateAxis,
    SortConfig,
    SortKey,
    SortDirection,
    StatusFilter,
    ViewFilters,
    build_view,
    clear_filters,
    filter_reservations,
    toggle_sort,
)

configure_logging()
logger = get_logger(__name__)

st.set_page_config(
    page_title="Sistema de Reservas",
    page_icon="📋",
    layout="wide",
)

st.title("📋 Sistema de Reservas")


# ── Verificación conexión Google Sheets ─────────────────────────────────────
def check_sheets_connection() -> bool:
    try:
        _ = st.secrets["gcp_service_account"]
        _ = st.secrets["google_sheets"]["spreadsheet_id"]
        return True
    except (KeyError, FileNotFoundError):
        return False


def get_ledger() -> Ledger:
    if "ledger" not in st.session_state:
        st.session_state.ledger = Ledger(sheets.load_reservations(), store=sheets)
    return st.session_state.ledger


def run(command) -> None:
    """Aplica un comando y muestra el error si el Sheet lo rechaza."""
    result = get_ledger().apply(command)
    if not result.ok:
        st.error(f"Error al guardar: {result.error}")
    else:
        st.rerun()


# ── Edición en el detalle ───────────────────────────────────────────────────
# Los widgets del detalle tienen key propia sembrada con el valor del modelo.
# Los comandos salen sólo de los callbacks (on_change / on_click), nunca de
# comparar en cada render.

WIDGET_PREFIXES = ("fld_", "liq_", "vou_", "amt_")

TEXT_FIELDS = {
    "holder": "Titular",
    "destination": "Destino",
    "operator": "Operador",
}
DATE_FIELDS = {
    "created": "Fecha de creación",
    "travel_date": "Fecha de salida",
    "return_date": "Fecha de regreso",
}
PRICE_FIELDS = {
    "sale_price": "Precio de venta",
    "net_price": "Precio neto",
}


def _seed(key: str, value) -> None:
    if key not in st.session_state:
        st.session_state[key] = value


def _forget_widgets() -> None:
    for key in list(st.session_state):
        if isinstance(key, str) and key.startswith(WIDGET_PREFIXES):
            del st.session_state[key]


def _reject(message: str, key: str, model_value) -> None:
    st.session_state.command_error = message
    st.session_state[key] = model_value


def _submit(command, key: str, model_value) -> None:
    result = get_ledger().apply(command)
    if not result.ok:
        _reject(f"Error al guardar: {result.error}", key, model_value)


def _price_widget(value) -> str:
    return "" if value is None else amount_text(value)


def on_text_field(rid: str, name: str, key: str) -> None:
    r = get_ledger().find(rid)
    value = st.session_state[key].strip()
    if not value:
        _reject(f"{TEXT_FIELDS[name]} no puede quedar vacío", key, getattr(r, name))
    elif value != getattr(r, name):
        _submit(update_field(r, name, value), key, getattr(r, name))


def on_date_field(rid: str, name: str, key: str) -> None:
    r = get_ledger().find(rid)
    value = st.session_state[key]
    if value is None and name == "created":
        _reject("La fecha de creación es obligatoria", key, r.created)
    elif value != getattr(r, name):
        _submit(update_field(r, name, value), key, getattr(r, name))


def on_currency(rid: str, key: str) -> None:
    r = get_ledger().find(rid)
    if st.session_state[key] != r.currency:
        _submit(update_field(r, "currency", st.session_state[key]), key, r.currency)


def on_price_field(rid: str, name: str, key: str) -> None:
    r = get_ledger().find(rid)
    text = st.session_state[key].strip()
    current = _price_widget(getattr(r, name))
    if not text and name == "sale_price":
        _reject("Ingrese el precio de venta", key, current)
        return
    if is_unreadable_amount(text):
        _reject(f"{PRICE_FIELDS[name]} no válido: {text!r} (usar 1500000 o 1500000,50)", key, current)
        return
    value = to_amount(text) if text else None
    if value != getattr(r, name):
        _submit(update_field(r, name, value), key, current)


def on_flag(rid: str, name: str, key: str) -> None:
    r = get_ledger().find(rid)
    if st.session_state[key] != getattr(r, name):
        _submit(toggle_flag(r, name), key, getattr(r, name))


def on_payment_amount(rid: str, side: str, pid: str, key: str) -> None:
    r = get_ledger().find(rid)
    payments = r.client_payments if side == CLIENT else r.supplier_payments
    payment = next(p for p in payments if p.id == pid)
    text = st.session_state[key].strip()
    if is_unreadable_amount(text):
        _reject(f"Monto no válido: {text!r}", key, amount_text(payment.amount))
        return
    amount = to_amount(text)
    if amount != payment.amount:
        _submit(edit_payment_amount(r, side, pid, amount), key, amount_text(payment.amount))


def on_delete_payment(rid: str, side: str, pid: str) -> None:
    result = get_ledger().apply(delete_payment(get_ledger().find(rid), side, pid))
    if not result.ok:
        st.session_state.command_error = f"Error al guardar: {result.error}"


SORT_LABELS = {
    SortKey.CREATED: "CREACIÓN",
    SortKey.TRAVEL: "SALIDA",
    SortKey.HOLDER: "NOMBRE",
    SortKey.DESTINATION: "DESTINO",
    SortKey.OPERATOR: "OPERADOR",
    SortKey.CLIENT_BALANCE: "SALDO PAX",
    SortKey.SUPPLIER_BALANCE: "SALDO PROV",
}
SORT_ARROWS = {SortDirection.ASC: " ▲", SortDirection.DESC: " ▼", SortDirection.NONE: ""}

if "sort" not in st.session_state:
    st.session_state.filters, st.session_state.sort = clear_filters()


with st.sidebar:
    st.header("Estado de conexión")
    if check_sheets_connection():
        st.success("✓ Google Sheets conectado")
    else:
        st.error("✗ Faltan credenciales")
        st.caption("Configurá `.streamlit/secrets.toml`")
    if st.button("🔄 Recargar reservas"):
        st.session_state.pop("ledger", None)
        _forget_widgets()
        st.rerun()


if not check_sheets_connection():
    st.warning("Conexión a Google Sheets no configurada.")
    st.stop()

try:
    ledger = get_ledger()
except PersistenceError as e:
    st.error(f"Error de carga: {e}")
    st.stop()

if "command_error" in st.session_state:
    st.error(st.session_state.pop("command_error"))

tab_list, tab_new = st.tabs(["📋 Reservas", "➕ Nueva reserva"])


# ============================================================
# TAB 1: RESERVAS
# ============================================================
with tab_list:
    # Filtros
    col1, col2, col3, col4, col5 = st.columns([1, 1, 1, 2, 1])
    with col1:
        axis = st.selectbox(
            "Filtrar por",
            options=list(DateAxis),
            index=list(DateAxis).index(st.session_state.filters.date_axis),
            format_func=lambda a: "Fecha de salida" if a == DateAxis.TRAVEL else "Fecha de creación",
        )
    with col2:
        date_from = st.date_input("Desde", value=st.session_state.filters.date_from, format="DD/MM/YYYY")
    with col3:
        date_to = st.date_input("Hasta", value=st.session_state.filters.date_to, format="DD/MM/YYYY")
    with col4:
        search = st.text_input("Buscar (nombre, operador, destino)", value=st.session_state.filters.search)
    with col5:
        status = st.selectbox(
            "Estado",
            options=list(StatusFilter),
            index=list(StatusFilter).index(st.session_state.filters.status),
            format_func=lambda s: {"todas": "Todas", "completadas": "Completadas", "pendientes": "Pendientes"}[s.value],
        )

    filters = ViewFilters(
        date_from=date_from or None,
        date_to=date_to or None,
        date_axis=axis,
        search=search,
        status=status,
    )
    st.session_state.filters = filters

    # Cabeceras ordenables (asc → desc → sin orden)
    sort: SortConfig = st.session_state.sort
    sort_cols = st.columns(len(SORT_LABELS) + 1)
    for col, (key, label) in zip(sort_cols, SORT_LABELS.items()):
        arrow = SORT_ARROWS[sort.direction] if sort.key == key else ""
        if col.button(label + arrow, key=f"sort_{key.value}", use_container_width=True):
            st.session_state.sort = toggle_sort(sort, key)
            st.rerun()
    if sort_cols[-1].button("Limpiar", use_container_width=True):
        st.session_state.filters, st.session_state.sort = clear_filters()
        st.rerun()

    view = build_view(ledger.reservations, filters, st.session_state.sort, today=date.today())

    if view.empty_state:
        st.info(view.empty_state.value)
    elif view.grouped:
        for group in view.groups:
            st.subheader(group.label)
            st.dataframe(reservations_dataframe(group.reservations), use_container_width=True, hide_index=True)
    else:
        st.dataframe(reservations_dataframe(view.rows), use_container_width=True, hide_index=True)

    # ── Export ──
    st.divider()
    filtered = filter_reservations(ledger.reservations, filters)
    col_csv, col_xlsx = st.columns(2)
    with col_csv:
        csv = reservations_dataframe(filtered).to_csv(index=False).encode("utf-8")
        st.download_button("⬇️ Descargar CSV", csv, file_name="reservas.csv", mime="text/csv")
    with col_xlsx:
        st.download_button(
            "⬇️ Exportar Excel",
            workbook_bytes(export_rows(filtered, filters)),
            file_name=export_filename(filters),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    # ── Detalle ──
    st.divider()
    st.subheader("Detalle de reserva")
    shown = view.rows
    if shown:
        labels = {r.id: f"{format_date(r.travel_date)} · {r.holder} · {r.destination}" for r in shown}
        selected = st.selectbox("Reserva", options=list(labels), format_func=labels.get)
        reserva = ledger.find(selected)
        rid = reserva.id
        s = summarize(reserva)

        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Precio de venta", format_currency(reserva.sale_price, reserva.currency))
        c2.metric("Cobrado", format_currency(s.client_paid, reserva.currency),
                  f"{s.client_percent:.0f}% ({progress_color(s.client_percent)})")
        c3.metric("Precio neto", format_currency(reserva.net_price or 0, reserva.currency))
        c4.metric("Pagado al operador", format_currency(s.supplier_paid, reserva.currency),
                  f"{s.supplier_percent:.0f}% ({progress_color(s.supplier_percent)})")
        st.progress(min(max(s.client_percent, 0), 100) / 100, text="Pasajero")
        st.progress(min(max(s.supplier_percent, 0), 100) / 100, text="Operador")

        if is_overpaid(s.client_status, s.client_percent):
            st.warning(f"⚠️ El pasajero pagó de más: {format_currency(-s.client_balance, reserva.currency)}")
        if is_overpaid(s.supplier_status, s.supplier_percent):
            st.warning(f"⚠️ Se pagó de más al operador: {format_currency(-s.supplier_balance, reserva.currency)}")

        with st.expander("✏️ Datos de la reserva"):
            for col, (name, label) in zip(st.columns(3), TEXT_FIELDS.items()):
                key = f"fld_{name}_{rid}"
                _seed(key, getattr(reserva, name))
                col.text_input(label, key=key, on_change=on_text_field, args=(rid, name, key))
            for col, (name, label) in zip(st.columns(3), DATE_FIELDS.items()):
                key = f"fld_{name}_{rid}"
                _seed(key, getattr(reserva, name))
                col.date_input(label, key=key, format="DD/MM/YYYY", on_change=on_date_field, args=(rid, name, key))
            e1, e2, e3 = st.columns(3)
            for col, (name, label) in zip((e1, e2), PRICE_FIELDS.items()):
                key = f"fld_{name}_{rid}"
                _seed(key, _price_widget(getattr(reserva, name)))
                col.text_input(label, key=key, on_change=on_price_field, args=(rid, name, key))
            key = f"fld_currency_{rid}"
            _seed(key, reserva.currency if reserva.currency in CURRENCIES else DEFAULT_CURRENCY)
            e3.radio("Moneda", CURRENCIES, horizontal=True, key=key, on_change=on_currency, args=(rid, key))

        f1, f2 = st.columns(2)
        for col, name, label, prefix in (
            (f1, "settlement_received", "Liquidación recibida", "liq"),
            (f2, "voucher_sent", "Voucher enviado", "vou"),
        ):
            key = f"{prefix}_{rid}"
            _seed(key, getattr(reserva, name))
            col.checkbox(label, key=key, on_change=on_flag, args=(rid, name, key))

        for side, title, payments, default_method in (
            (CLIENT, "💰 Pagos del pasajero", reserva.client_payments, DEFAULT_CLIENT_METHOD),
            (SUPPLIER, "💸 Pagos al operador", reserva.supplier_payments, DEFAULT_SUPPLIER_METHOD),
        ):
            st.markdown(f"**{title}**")
            if not payments:
                st.caption("No hay pagos registrados")
            for p in payments:
                p1, p2, p3, p4 = st.columns([1, 1, 1, 1])
                p1.write(format_date(p.date))
                p2.write(p.method)
                key = f"amt_{side}_{p.id}"
                _seed(key, amount_text(p.amount))
                p3.text_input("Monto", key=key, label_visibility="collapsed",
                              on_change=on_payment_amount, args=(rid, side, p.id, key))
                p4.button("🗑️", key=f"del_{side}_{p.id}", on_click=on_delete_payment, args=(rid, side, p.id))

            with st.form(f"pago_{side}_{rid}", clear_on_submit=True):
                q1, q2, q3 = st.columns(3)
                pay_date = q1.date_input("Fecha", value=date.today(), format="DD/MM/YYYY")
                method = q2.selectbox("Medio", PAYMENT_METHODS, index=PAYMENT_METHODS.index(default_method))
                amount = q3.text_input(f"Monto en {reserva.currency}")
                if st.form_submit_button("Guardar pago"):
                    if not amount:
                        st.error("Ingrese el monto")
                    elif is_unreadable_amount(amount):
                        st.error(f"Monto no válido: {amount!r} (usar 1500000 o 1500000,50)")
                    else:
                        run(add_payment(reserva, side, pay_date, method, to_amount(amount)))

        st.divider()
        confirm = st.checkbox("Confirmo que quiero eliminar esta reserva permanentemente", key=f"confirm_{rid}")
        if st.button("🗑️ Eliminar reserva", type="primary", disabled=not confirm):
            run(DeleteReservation(rid))


# ============================================================
# TAB 2: NUEVA RESERVA
# ============================================================
with tab_new:
    st.header("Nueva reserva")
    destinos = suggestions(ledger.reservations, "destination")
    operadores = suggestions(ledger.reservations, "operator")

    with st.form("nueva_reserva", clear_on_submit=True):
        n1, n2, n3 = st.columns(3)
        created = n1.date_input("Fecha de creación", value=date.today(), format="DD/MM/YYYY")
        travel = n2.date_input("Fecha de salida", value=None, format="DD/MM/YYYY")
        back = n3.date_input("Fecha de regreso", value=None, format="DD/MM/YYYY")

        holder = st.text_input("Titular *")
        d1, d2 = st.columns(2)
        destination = d1.text_input("Destino *", placeholder=", ".join(destinos[:5]))
        operator = d2.text_input("Operador *", placeholder=", ".join(operadores[:5]))

        m1, m2, m3 = st.columns(3)
        sale = m1.text_input("Precio de venta *")
        net = m2.text_input("Precio neto")
        currency = m3.radio("Moneda", CURRENCIES, horizontal=True)

        if st.form_submit_button("✅ Guardar reserva", type="primary"):
            unreadable = [label for label, text in (("Precio de venta", sale), ("Precio neto", net))
                          if is_unreadable_amount(text)]
            if not (holder and destination and operator and sale and travel):
                st.error("Completá los campos obligatorios")
            elif unreadable:
                st.error(f"{', '.join(unreadable)}: importe no válido (usar 1500000 o 1500000,50)")
            else:
                run(new_reservation(
                    holder=holder,
                    destination=destination,
                    operator=operator,
                    sale_price=to_amount(sale),
                    net_price=to_amount(net) if net else None,
                    currency=currency,
                    travel_date=travel,
                    return_date=back,
                    created=created,
                ))
