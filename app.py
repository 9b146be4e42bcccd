"""
app.py
Streamlit portal for the residential community (news, calendar, tenant dues).
Run: streamlit run app.py
"""

from __future__ import annotations

import logging
from pathlib import Path

import streamlit as st

import utils
import views
from config import AppConfig, get_config
from db import CorruptDatabase, DatabaseSession, SourceUnavailable, fetch_bytes
from models import CalendarEvent

st.set_page_config(page_title="Residencial", layout="wide")

logger = logging.getLogger(__name__)


def init_once(cfg: AppConfig):
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Bundled sample dataset used as fallback source
    sample = cfg.sample_db_url
    if not sample.startswith(("http://", "https://")) and not Path(sample).exists():
        utils.create_sample_database(sample)
        logger.info("Sample DB written to %s", sample)


def get_session(cfg: AppConfig) -> DatabaseSession:
    """
    One DatabaseSession per browser session, loaded on first use.
    """
    if "db_session" not in st.session_state:
        session = DatabaseSession(
            fetcher=lambda url: fetch_bytes(url, cfg.fetch_timeout),
            sample_url=cfg.sample_db_url,
        )
        session.subscribe(views.track_source(st.session_state))
        session.load(cfg.db_url)
        st.session_state.db_session = session
    return st.session_state.db_session


# ---------- Sidebar ----------

def db_sidebar(session: DatabaseSession):
    st.sidebar.subheader("Base de datos")

    uploaded = st.sidebar.file_uploader("Cargar BD", type=["db", "sqlite", "sqlite3"], key="db_upload")
    if uploaded is not None and st.session_state.get("db_upload_id") != uploaded.file_id:
        st.session_state.db_upload_id = uploaded.file_id
        try:
            session.load_bytes(uploaded.getvalue(), label=uploaded.name)
            st.sidebar.success(f"Base de datos cargada desde archivo: {uploaded.name}")
        except CorruptDatabase as e:
            st.sidebar.error(f"No se pudo cargar {uploaded.name}: {e}")

    # Drawn after the upload so it names the source loaded in this run
    st.sidebar.caption(views.source_caption(st.session_state))

    st.sidebar.download_button(
        "Descargar BD",
        data=session.to_bytes(),
        file_name="residencial.db",
        mime="application/x-sqlite3",
    )


# ---------- Pages ----------

def home_page(session: DatabaseSession):
    st.header("📰 Noticias")

    view = views.news_view(session)
    if view.empty_message:
        with st.container(border=True):
            st.write(view.empty_message)
        return

    for item in view.items:
        with st.container(border=True):
            st.caption(utils.format_date(item.date or item.raw_date))
            st.write(item.text)


@st.dialog("Evento")
def event_dialog(event: CalendarEvent):
    st.subheader(event.title)
    st.caption(utils.format_date(event.date or event.raw_date))
    st.write(event.description or "")


def _shift_month_value(months: int):
    try:
        year, month = utils.parse_month_value(st.session_state.month_value)
    except ValueError:
        st.session_state.month_value = utils.current_month_value()
        return
    st.session_state.month_value = utils.format_month_value(*utils.shift_month(year, month, months))


def calendar_page(session: DatabaseSession):
    st.header("📅 Calendario")

    if "month_value" not in st.session_state:
        st.session_state.month_value = utils.current_month_value()

    c1, c2, c3 = st.columns([1, 2, 1])
    with c1:
        st.button("◀ Anterior", on_click=_shift_month_value, args=(-1,))
    with c2:
        st.text_input("Mes (AAAA-MM)", key="month_value")
    with c3:
        st.button("Siguiente ▶", on_click=_shift_month_value, args=(1,))

    try:
        year, month = utils.parse_month_value(st.session_state.month_value)
    except ValueError:
        st.error("Mes inválido. Use el formato AAAA-MM.")
        return

    view = views.calendar_view(session, year, month)
    st.subheader(view.label)

    cols = st.columns(7)
    for col, head in zip(cols, view.headers):
        col.markdown(f"**{head}**")

    for week in view.weeks:
        cols = st.columns(7)
        for col, cell in zip(cols, week):
            with col:
                if cell.day is None:
                    st.write("")
                    continue
                st.markdown(f"**{cell.day}**")
                for i, event in enumerate(cell.events):
                    if st.button(event.title, key=f"evt-{year}-{month}-{cell.day}-{i}"):
                        event_dialog(event)


def tenants_page(session: DatabaseSession):
    st.header("🏠 Consulta de inquilinos")

    with st.form("tenant-form"):
        col1, col2 = st.columns(2)
        with col1:
            dpi = st.text_input("DPI")
            nombre = st.text_input("Primer nombre")
            nacimiento = st.text_input("Fecha de nacimiento (AAAA-MM-DD)")
        with col2:
            casa = st.text_input("Número de casa")
            apellido = st.text_input("Primer apellido")
        submitted = st.form_submit_button("Consultar", type="primary")

    if submitted:
        status = views.tenant_status(session, dpi, casa, nombre, apellido, nacimiento)
        if status.ok:
            st.success(status.message)
        else:
            st.error(status.message)

    st.divider()

    st.subheader("Historial de pagos")
    c1, c2, c3 = st.columns(3)
    with c1:
        hist_casa = st.text_input("Número de casa", key="hist_casa")
    with c2:
        start = st.text_input("Mes de inicio (AAAA-MM)", key="hist_start")
    with c3:
        end = st.text_input("Mes de fin (AAAA-MM)", key="hist_end")

    if st.button("Buscar historial"):
        try:
            view = views.history_view(session, hist_casa, start, end)
        except utils.ValidationError as e:
            st.error(e.message)
            return
        st.dataframe(view.to_frame(), use_container_width=True, hide_index=True)
        if view.rows:
            st.download_button(
                "Descargar historial.csv",
                data=utils.history_to_csv_bytes(view.rows),
                file_name="historial.csv",
                mime="text/csv",
            )


def main_app(session: DatabaseSession):
    st.sidebar.title("🏘️ Residencial")

    pages = ["Noticias", "Calendario", "Inquilinos"]
    if "page" not in st.session_state:
        st.session_state.page = "Noticias"
    st.session_state.page = st.sidebar.radio("Navegar", pages, index=pages.index(st.session_state.page))

    db_sidebar(session)

    if st.session_state.page == "Noticias":
        home_page(session)
    elif st.session_state.page == "Calendario":
        calendar_page(session)
    elif st.session_state.page == "Inquilinos":
        tenants_page(session)


# --------- App entry ---------

def run():
    cfg = get_config()
    init_once(cfg)

    try:
        session = get_session(cfg)
    except SourceUnavailable as e:
        st.error(f"No se pudo cargar la base de datos: {e}")
        st.stop()

    main_app(session)


if __name__ == "__main__":
    run()
