"""
models.py
Read-only records materialized from query rows (news, events, tenants, dues).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date

# Table names in the community database
NEWS_TABLE = "Noticias"
EVENTS_TABLE = "Calendario"
TENANTS_TABLE = "Inquilino"
PAYMENTS_TABLE = "PagoDeCuotas"

REQUIRED_TABLES = (NEWS_TABLE, EVENTS_TABLE, TENANTS_TABLE, PAYMENTS_TABLE)


def _to_date(value) -> date | None:
    """
    Stored as YYYY-MM-DD text; anything after the date part is ignored.
    Text that is not a real date (e.g. 2025-02-30, 15/01/2025) gives None;
    the record keeps the raw text for display.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _raw(value) -> str | None:
    return str(value) if value else None


@dataclass(frozen=True)
class NewsItem:
    date: date | None
    text: str
    raw_date: str | None = field(default=None, compare=False)

    @classmethod
    def from_row(cls, row) -> "NewsItem":
        return cls(date=_to_date(row["Fecha"]), text=row["Noticia"], raw_date=_raw(row["Fecha"]))


@dataclass(frozen=True)
class CalendarEvent:
    date: date | None
    title: str
    description: str | None
    raw_date: str | None = field(default=None, compare=False)

    @property
    def day(self) -> int | None:
        if self.date is not None:
            return self.date.day
        # YYYY-MM-DD text with an out-of-range day: take the day part as written
        try:
            return int((self.raw_date or "").split("-")[2][:2])
        except (IndexError, ValueError):
            return None

    @classmethod
    def from_row(cls, row) -> "CalendarEvent":
        return cls(
            date=_to_date(row["Fecha"]),
            title=row["Titulo"],
            description=row["Descripcion"] or None,
            raw_date=_raw(row["Fecha"]),
        )


@dataclass(frozen=True)
class Tenant:
    national_id: str  # DPI, 13 digits
    first_name: str
    last_name: str
    birth_date: date | None
    house_number: int

    @classmethod
    def from_row(cls, row) -> "Tenant":
        return cls(
            national_id=str(row["DPI"]),
            first_name=row["PrimerNombre"],
            last_name=row["PrimerApellido"],
            birth_date=_to_date(row["FechaNacimiento"]),
            house_number=int(row["NumeroCasa"]),
        )


@dataclass(frozen=True)
class DuesPayment:
    house_number: int
    year: int
    month: int  # 1..12
    paid_date: date | None
    raw_paid_date: str | None = field(default=None, compare=False)

    @property
    def period_key(self) -> int:
        return self.year * 100 + self.month

    @property
    def period_start(self) -> date | None:
        # None when the stored month is outside 1..12
        if not 1 <= self.month <= 12:
            return None
        return date(self.year, self.month, 1)

    @classmethod
    def from_row(cls, row) -> "DuesPayment":
        return cls(
            house_number=int(row["NumeroCasa"]),
            year=int(row["AnoCuota"]),
            month=int(row["MesCuota"]),
            paid_date=_to_date(row["FechaPago"]),
            raw_paid_date=_raw(row["FechaPago"]),
        )
