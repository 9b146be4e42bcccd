import sqlite3

import pytest

import db
from db import DatabaseSession


def make_db_bytes(news=(), events=(), tenants=(), payments=()) -> bytes:
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


@pytest.fixture
def db_bytes():
    return make_db_bytes


@pytest.fixture
def session_with(db_bytes):
    opened = []

    def _open(**tables) -> DatabaseSession:
        s = DatabaseSession()
        s.load_bytes(db_bytes(**tables), label="fixture")
        opened.append(s)
        return s

    yield _open
    for s in opened:
        s.close()
