"""
views.py
Display state for the three pages (news, calendar, tenants).
No Streamlit here: app.py draws whatever these functions return.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, MutableMapping

import pandas as pd

import queries
import utils
from calendar_grid import WEEKDAY_HEADERS, build_grid
from db import DatabaseSession
from models import CalendarEvent, DuesPayment, NewsItem

NO_NEWS = "No hay noticias registradas."
TENANT_NOT_FOUND = "Datos no coinciden con nuestros registros."
DUES_OK = "Cuota de mantenimiento al día"
DUES_PENDING = "Cuota de mantenimiento pendiente"
NO_HISTORY = "Sin resultados para el rango seleccionado."
HISTORY_INPUT_REQUIRED = "Complete número de casa y el rango de fechas (mes de inicio y fin)."


# ---------- Database source ----------

def track_source(state: MutableMapping) -> Callable[[DatabaseSession], None]:
    """
    Observer for DatabaseSession.subscribe: after every successful load, records
    the source in `state` (st.session_state in the app) so the sidebar names it.
    """
    def _on_loaded(session: DatabaseSession) -> None:
        state["db_source"] = session.loaded_from

    return _on_loaded


def source_caption(state: MutableMapping) -> str:
    return f"Fuente: {state.get('db_source') or '-'}"


# ---------- News ----------

@dataclass(frozen=True)
class NewsView:
    items: list[NewsItem]

    @property
    def empty_message(self) -> str | None:
        return None if self.items else NO_NEWS


def news_view(db: DatabaseSession, limit: int = 3) -> NewsView:
    return NewsView(items=queries.latest_news(db, limit))


# ---------- Calendar ----------

@dataclass(frozen=True)
class DayCell:
    day: int | None  # None = blank cell
    events: list[CalendarEvent] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return [e.title for e in self.events]


@dataclass(frozen=True)
class CalendarView:
    year: int
    month: int
    weeks: list[list[DayCell]]
    headers: list[str] = field(default_factory=lambda: list(WEEKDAY_HEADERS))

    @property
    def label(self) -> str:
        return f"{utils.month_name(self.month).capitalize()} {self.year}"

    def cell(self, day: int) -> DayCell:
        for week in self.weeks:
            for c in week:
                if c.day == day:
                    return c
        raise KeyError(day)


def calendar_view(db: DatabaseSession, year: int, month: int) -> CalendarView:
    grid = build_grid(year, month)
    events = queries.events_for_month(db, year, month)
    weeks = [
        [DayCell(day=d, events=events.get(d, []) if d is not None else []) for d in week]
        for week in grid.weeks()
    ]
    return CalendarView(year=year, month=month, weeks=weeks)


# ---------- Tenants ----------

@dataclass(frozen=True)
class TenantStatus:
    ok: bool
    message: str
    field: str | None = None  # set when the form itself was invalid


def tenant_status(db: DatabaseSession, dpi, casa, nombre, apellido, nacimiento, today: date | None = None) -> TenantStatus:
    """
    Validate the form, look up the tenant and, only if found, report this month's dues.
    An invalid form never reaches the database.
    """
    try:
        form = utils.validate_tenant_form(dpi, casa, nombre, apellido, nacimiento)
    except utils.ValidationError as e:
        return TenantStatus(ok=False, message=e.message, field=e.field)

    tenant = queries.find_tenant(db, form.dpi, form.casa, form.nombre, form.apellido, form.nacimiento)
    if tenant is None:
        return TenantStatus(ok=False, message=TENANT_NOT_FOUND)

    if queries.is_dues_paid_for_current_month(db, tenant.house_number, now=today):
        return TenantStatus(ok=True, message=DUES_OK)
    return TenantStatus(ok=False, message=DUES_PENDING)


@dataclass(frozen=True)
class HistoryView:
    rows: list[DuesPayment]

    @property
    def empty_message(self) -> str | None:
        return None if self.rows else NO_HISTORY

    def to_frame(self) -> pd.DataFrame:
        df = utils.payments_to_frame(self.rows)
        if df.empty:
            # Explicit "no results" row instead of an empty table
            return pd.DataFrame([{c: (NO_HISTORY if i == 0 else "") for i, c in enumerate(df.columns)}])
        return df


def history_view(db: DatabaseSession, casa, start: str, end: str) -> HistoryView:
    house = utils.parse_house_number(casa)
    if house is None or not start or not end:
        raise utils.ValidationError("history", HISTORY_INPUT_REQUIRED)
    try:
        start_ym = utils.parse_month_value(start)
        end_ym = utils.parse_month_value(end)
    except ValueError as e:
        raise utils.ValidationError("history", HISTORY_INPUT_REQUIRED) from e
    return HistoryView(rows=queries.payment_history(db, house, start_ym, end_ym))
