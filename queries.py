"""
queries.py
Read-only queries against the loaded community database.
Every function takes the DatabaseSession explicitly and re-queries on each call.
"""

from __future__ import annotations

from datetime import date

from db import DatabaseSession
from models import CalendarEvent, DuesPayment, NewsItem, Tenant


def latest_news(db: DatabaseSession, limit: int = 3) -> list[NewsItem]:
    rows = db.fetch_all(
        """
        SELECT Fecha, Noticia
        FROM Noticias
        ORDER BY date(Fecha) DESC
        LIMIT ?
        """,
        (limit,),
    )
    return [NewsItem.from_row(r) for r in rows]


def events_for_month(db: DatabaseSession, year: int, month: int) -> dict[int, list[CalendarEvent]]:
    """
    Events of the given month grouped by day of month, ordered by date then title.
    """
    rows = db.fetch_all(
        """
        SELECT Fecha, Titulo, Descripcion
        FROM Calendario
        WHERE strftime('%m', Fecha) = ? AND strftime('%Y', Fecha) = ?
        ORDER BY date(Fecha) ASC, Titulo ASC
        """,
        (f"{month:02d}", f"{year:04d}"),
    )
    by_day: dict[int, list[CalendarEvent]] = {}
    for r in rows:
        event = CalendarEvent.from_row(r)
        if event.day is None:
            continue
        by_day.setdefault(event.day, []).append(event)
    return by_day


def find_tenant(
    db: DatabaseSession,
    national_id: str,
    house_number: int,
    first_name: str,
    last_name: str,
    birth_date: str,
) -> Tenant | None:
    # Names are compared with LIKE (case-insensitive for ASCII); the other fields must be equal
    row = db.fetch_one(
        """
        SELECT DPI, PrimerNombre, PrimerApellido, FechaNacimiento, NumeroCasa
        FROM Inquilino
        WHERE DPI = ? AND NumeroCasa = ? AND PrimerNombre LIKE ? AND PrimerApellido LIKE ?
          AND FechaNacimiento = ?
        LIMIT 1
        """,
        (national_id, house_number, first_name, last_name, birth_date),
    )
    return Tenant.from_row(row) if row else None


def is_dues_paid_for_current_month(db: DatabaseSession, house_number: int, now: date | None = None) -> bool:
    now = now or date.today()
    row = db.fetch_one(
        """
        SELECT 1 FROM PagoDeCuotas
        WHERE NumeroCasa = ? AND AnoCuota = ? AND MesCuota = ?
        LIMIT 1
        """,
        (house_number, now.year, now.month),
    )
    return row is not None


def payment_history(
    db: DatabaseSession,
    house_number: int,
    start: tuple[int, int],
    end: tuple[int, int],
) -> list[DuesPayment]:
    """
    Payments of a house with (year*100 + month) in [start, end], oldest first.
    start/end are (year, month); start > end simply matches nothing.
    """
    start_key = start[0] * 100 + start[1]
    end_key = end[0] * 100 + end[1]
    rows = db.fetch_all(
        """
        SELECT NumeroCasa, AnoCuota, MesCuota, FechaPago
        FROM PagoDeCuotas
        WHERE NumeroCasa = ?
          AND (AnoCuota * 100 + MesCuota) BETWEEN ? AND ?
        ORDER BY AnoCuota ASC, MesCuota ASC
        """,
        (house_number, start_key, end_key),
    )
    return [DuesPayment.from_row(r) for r in rows]
