"""
Configuración centralizada - modificá acá nombres de hojas, columnas y umbrales.
"""

import os

# Nombre de la hoja en el Google Sheet
SHEET_RESERVAS = "reservas"

# Columnas de la hoja "reservas" (orden = orden en el Sheet)
SHEET_COLUMNS = [
    "id",
    "fechaCreacion",         # fecha de carga (YYYY-MM-DD)
    "fechaViaje",            # fecha de salida
    "fechaRegreso",          # fecha de regreso (opcional)
    "titular",               # pasajero titular
    "destino",
    "operador",              # operador / proveedor
    "precioVenta",           # precio al cliente
    "precioNeto",            # costo del operador (opcional)
    "moneda",                # ARS | USD
    "liquidacionRecibida",   # liquidación del operador recibida
    "voucherEnviado",
    "pagosCliente",          # JSON: lista de pagos del pasajero
    "pagosProveedor",        # JSON: lista de pagos al operador
]

# Monedas admitidas
CURRENCIES = ["ARS", "USD"]
DEFAULT_CURRENCY = "ARS"

# Medios de pago (valores tal como se guardan en el Sheet)
PAYMENT_METHODS = ["Efectivo", "Tarjeta", "Transferencia", "Depósito"]
DEFAULT_CLIENT_METHOD = "Efectivo"
DEFAULT_SUPPLIER_METHOD = "Transferencia"

# Umbrales de la barra de progreso (porcentaje mínimo → color)
PROGRESS_THRESHOLDS = [
    (100, "green"),
    (76, "lime"),
    (41, "orange"),
]
PROGRESS_FALLBACK = "red"

# Etiquetas de los grupos temporales (vista sin ordenamiento)
BUCKET_LABELS = {
    "today":     "🔥 HOY",
    "yesterday": "📅 AYER",
    "week":      "📆 EN LA SEMANA",
    "earlier":   "📦 ANTERIORES",
}

# Mensajes de lista vacía
EMPTY_NO_MATCHES = "No hay reservas que coincidan con los filtros"
EMPTY_NO_RESERVATIONS = "No hay reservas registradas"

# Export a Excel
EXPORT_HEADER = ["FECHA", "NOMBRE", "DESTINO", "OPERADOR", "SALDO PAX", "SALDO PROV", "VOUCHER"]
EXPORT_SHEET = "Reservas"

MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

# Logging (structlog)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "console")  # "console" | "json"
