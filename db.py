"""
db.py
In-memory SQLite session: loads a database image (URL, local path or raw bytes),
swaps it in atomically and notifies subscribers after every successful load.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path
from typing import Callable, Optional

import requests

from config import DEFAULT_SAMPLE_DB_URL
from models import REQUIRED_TABLES

logger = logging.getLogger(__name__)

# Schema of the community database (used for the sample dataset and tests)
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS Noticias (
    Fecha TEXT NOT NULL,
    Noticia TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS Calendario (
    Fecha TEXT NOT NULL,
    Titulo TEXT NOT NULL,
    Descripcion TEXT
);

CREATE TABLE IF NOT EXISTS Inquilino (
    DPI TEXT NOT NULL,
    PrimerNombre TEXT NOT NULL,
    PrimerApellido TEXT NOT NULL,
    FechaNacimiento TEXT NOT NULL,
    NumeroCasa INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS PagoDeCuotas (
    NumeroCasa INTEGER NOT NULL,
    AnoCuota INTEGER NOT NULL,
    MesCuota INTEGER NOT NULL CHECK(MesCuota BETWEEN 1 AND 12),
    FechaPago TEXT
);
"""


class SourceUnavailable(RuntimeError):
    pass


class CorruptDatabase(ValueError):
    pass


class DatabaseNotLoaded(RuntimeError):
    pass


Fetcher = Callable[[str], bytes]


def fetch_bytes(url: str, timeout: float | None = None) -> bytes:
    """
    Default transport: http(s) URLs via requests, anything else is a local path.
    Raises SourceUnavailable on a non-2xx response or any transport/IO failure.
    """
    if url.startswith(("http://", "https://")):
        try:
            resp = requests.get(url, timeout=timeout)
        except requests.RequestException as e:
            raise SourceUnavailable(f"Could not fetch {url}: {e}") from e
        if not resp.ok:
            raise SourceUnavailable(f"DB not found at {url} (HTTP {resp.status_code})")
        return resp.content

    try:
        return Path(url).read_bytes()
    except OSError as e:
        raise SourceUnavailable(f"DB not found at {url}: {e}") from e


def _open_image(data: bytes) -> sqlite3.Connection:
    """
    Build a fresh in-memory connection from a database image and check it is usable.
    The caller owns the returned connection.
    """
    if not data:
        raise CorruptDatabase("Empty database file.")

    conn = sqlite3.connect(":memory:", check_same_thread=False)
    try:
        conn.deserialize(bytes(data))
        conn.row_factory = sqlite3.Row
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        conn.execute("PRAGMA query_only = ON")
    except sqlite3.DatabaseError as e:
        conn.close()
        raise CorruptDatabase(f"Not a valid SQLite database: {e}") from e

    tables = {r["name"] for r in rows}
    missing = [t for t in REQUIRED_TABLES if t not in tables]
    if missing:
        conn.close()
        raise CorruptDatabase(f"Missing tables: {', '.join(missing)}")
    return conn


class DatabaseSession:
    """
    Holds at most one live database handle.

    A load builds and validates the new handle before swapping it in, so a failed
    load leaves the previous data in place. Readers should go through
    fetch_one/fetch_all on every render instead of keeping the connection.
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        sample_url: str = DEFAULT_SAMPLE_DB_URL,
    ) -> None:
        self._conn: sqlite3.Connection | None = None
        self._fetcher: Fetcher = fetcher or fetch_bytes
        self._subscribers: list[Callable[["DatabaseSession"], None]] = []
        self.sample_url = sample_url
        self.loaded_from: str | None = None

    # ---------- lifecycle ----------

    @property
    def is_loaded(self) -> bool:
        return self._conn is not None

    def load(self, source, label: str | None = None) -> None:
        """
        Bytes go to load_bytes, URLs and paths to load_url (with fallback).
        `label` only names byte sources; a URL load is labelled with the URL
        that actually succeeded, so passing a label with a URL is an error.
        """
        if isinstance(source, (str, os.PathLike)) and label is not None:
            raise ValueError("label only applies to byte sources")
        if isinstance(source, (bytes, bytearray, memoryview)):
            self.load_bytes(bytes(source), label=label)
        elif isinstance(source, (str, os.PathLike)):
            self.load_url(os.fspath(source))
        else:
            raise TypeError(f"Unsupported database source: {type(source).__name__}")

    def load_url(self, url: str, fallback_url: str | None = None) -> None:
        """
        Load from the primary source; on any failure, load the sample source instead.
        Raises SourceUnavailable only when both fail.
        """
        fallback = fallback_url or self.sample_url
        try:
            self._replace(_open_image(self._fetcher(url)), url)
            logger.info("DB loaded from %s", url)
            return
        except (SourceUnavailable, CorruptDatabase) as e:
            logger.warning("Primary DB unavailable (%s); using sample DB %s", e, fallback)

        try:
            self._replace(_open_image(self._fetcher(fallback)), fallback)
        except (SourceUnavailable, CorruptDatabase) as e:
            logger.error("Sample DB unavailable too: %s", e)
            raise SourceUnavailable(
                f"Could not load the database from {url} nor the sample at {fallback}."
            ) from e
        logger.info("DB loaded from %s", fallback)

    def load_bytes(self, data: bytes, label: str | None = None) -> None:
        """
        Load a database image (e.g. an uploaded file). Raises CorruptDatabase and keeps
        the current handle if the bytes are not a usable database.
        """
        self._replace(_open_image(data), label or "(bytes)")
        logger.info("DB loaded from %s", self.loaded_from)

    def _replace(self, conn: sqlite3.Connection, label: str) -> None:
        old, self._conn = self._conn, conn
        self.loaded_from = label
        if old is not None:
            old.close()
        for callback in list(self._subscribers):
            callback(self)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
        self._conn = None
        self.loaded_from = None

    # ---------- observers ----------

    def subscribe(self, callback: Callable[["DatabaseSession"], None]) -> Callable[[], None]:
        """
        Register a callback run after every successful load. Returns an unsubscribe function.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ---------- reads ----------

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DatabaseNotLoaded("No database loaded.")
        return self._conn

    def fetch_one(self, sql: str, params: tuple = ()):
        return self._require_conn().execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self._require_conn().execute(sql, params).fetchall()

    def to_bytes(self) -> bytes:
        return bytes(self._require_conn().serialize())
