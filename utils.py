"""
utils.py
Dates, month arithmetic, form validation, exports, sample data.
"""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path

import pandas as pd

import db
from models import DuesPayment

MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

_DPI_RE = re.compile(r"[0-9]{13}")
_NAME_RE = re.compile(r"[A-Za-zÁÉÍÓÚÜÑáéíóúüñ\s'-]{2,}")
_ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_MONTH_VALUE_RE = re.compile(r"([0-9]{4})-([0-9]{2})")


class ValidationError(ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


# ---------- dates ----------

def parse_iso(d: str) -> date:
    return date.fromisoformat(d)


def format_date(value) -> str:
    """
    dd/mm/yyyy for display. Accepts a date or YYYY-MM-DD text; empty -> "".
    """
    if not value:
        return ""
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    try:
        return parse_iso(str(value)[:10]).strftime("%d/%m/%Y")
    except ValueError:
        # Not a real date: just reorder the parts
        parts = str(value).split("-")
        return "/".join(reversed(parts))


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def parse_month_value(value: str) -> tuple[int, int]:
    """
    "2025-08" -> (2025, 8)
    """
    m = _MONTH_VALUE_RE.fullmatch((value or "").strip())
    if not m or not 1 <= int(m.group(2)) <= 12:
        raise ValueError(f"Invalid month value: {value!r} (expected YYYY-MM)")
    return int(m.group(1)), int(m.group(2))


def format_month_value(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """
    Move a (year, month) by N months with year rollover (month 0 -> December of the
    previous year, month 13 -> January of the next year).
    """
    y = year + (month - 1 + months) // 12
    m = (month - 1 + months) % 12 + 1
    return y, m


def current_month_value(today: date | None = None) -> str:
    today = today or date.today()
    return format_month_value(today.year, today.month)


# ---------- validation ----------

@dataclass(frozen=True)
class TenantForm:
    dpi: str
    casa: int
    nombre: str
    apellido: str
    nacimiento: str


def parse_house_number(value) -> int | None:
    try:
        casa = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return casa if casa > 0 else None


def validate_tenant_form(dpi, casa, nombre, apellido, nacimiento) -> TenantForm:
    """
    Checks the tenant lookup form. Stops at the first invalid field and raises
    ValidationError with a message for that field.
    """
    dpi = (dpi or "").strip()
    nombre = (nombre or "").strip()
    apellido = (apellido or "").strip()
    nacimiento = (nacimiento or "").strip()

    if not _DPI_RE.fullmatch(dpi):
        raise ValidationError("dpi", "DPI debe tener 13 dígitos.")
    house = parse_house_number(casa)
    if house is None:
        raise ValidationError("casa", "Número de casa inválido.")
    if not _NAME_RE.fullmatch(nombre):
        raise ValidationError("nombre", "Primer nombre inválido.")
    if not _NAME_RE.fullmatch(apellido):
        raise ValidationError("apellido", "Primer apellido inválido.")
    if not _ISO_DATE_RE.fullmatch(nacimiento):
        raise ValidationError("nacimiento", "Fecha de nacimiento inválida.")

    return TenantForm(dpi=dpi, casa=house, nombre=nombre, apellido=apellido, nacimiento=nacimiento)


# ---------- exports ----------

def payments_to_frame(payments: list[DuesPayment]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Casa": p.house_number,
                "Año": p.year,
                "Mes": p.month,
                "Periodo": format_date(p.period_start or f"{p.year}-{p.month:02d}"),
                "Fecha de pago": format_date(p.paid_date or p.raw_paid_date),
            }
            for p in payments
        ],
        columns=["Casa", "Año", "Mes", "Periodo", "Fecha de pago"],
    )


def history_to_csv_bytes(payments: list[DuesPayment]) -> bytes:
    return payments_to_frame(payments).to_csv(index=False).encode("utf-8")


# ---------- sample data ----------

def sample_database_bytes(today: date | None = None) -> bytes:
    """
    Demo dataset: a few news items, events in the current month, two tenants and
    six months of dues (house 101 up to date, house 102 missing the current month).
    """
    today = today or date.today()
    first = today.replace(day=1)

    news = [
        ((today - timedelta(days=2)).isoformat(), "Mantenimiento de la garita el fin de semana."),
        ((today - timedelta(days=9)).isoformat(), "Nuevo horario de recolección de basura."),
        ((today - timedelta(days=20)).isoformat(), "Se pintaron las áreas comunes."),
        ((today - timedelta(days=40)).isoformat(), "Bienvenidos al portal del residencial."),
    ]
    events = [
        (first.replace(day=15).isoformat(), "Asamblea", "Asamblea general de vecinos en el salón social."),
        (first.replace(day=5).isoformat(), "Fumigación", "Fumigación de áreas verdes."),
        (first.replace(day=5).isoformat(), "Limpieza", None),
    ]
    tenants = [
        ("1234567890123", "Ana", "López", "1990-05-12", 101),
        ("9876543210987", "José", "Pérez", "1985-11-03", 102),
    ]
    payments = []
    for back in range(6):
        y, m = shift_month(today.year, today.month, -back)
        paid = date(y, m, 5).isoformat()
        payments.append((101, y, m, paid))
        if back > 0:
            payments.append((102, y, m, paid))

    conn = sqlite3.connect(":memory:")
    try:
        conn.executescript(db.SCHEMA_SQL)
        conn.executemany("INSERT INTO Noticias(Fecha, Noticia) VALUES(?,?)", news)
        conn.executemany("INSERT INTO Calendario(Fecha, Titulo, Descripcion) VALUES(?,?,?)", events)
        conn.executemany(
            "INSERT INTO Inquilino(DPI, PrimerNombre, PrimerApellido, FechaNacimiento, NumeroCasa) VALUES(?,?,?,?,?)",
            tenants,
        )
        conn.executemany(
            "INSERT INTO PagoDeCuotas(NumeroCasa, AnoCuota, MesCuota, FechaPago) VALUES(?,?,?,?)",
            payments,
        )
        conn.commit()
        return bytes(conn.serialize())
    finally:
        conn.close()


def create_sample_database(path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(sample_database_bytes())
    return path
