from datetime import date

import pytest

import utils
from db import DatabaseSession
from models import DuesPayment
from utils import ValidationError, validate_tenant_form

VALID = dict(dpi="1234567890123", casa=101, nombre="Ana", apellido="López", nacimiento="1990-05-12")


def test_valid_tenant_form():
    form = validate_tenant_form(**VALID)
    assert form.casa == 101
    assert form.apellido == "López"


def test_inputs_are_stripped():
    form = validate_tenant_form(**{**VALID, "dpi": " 1234567890123 ", "casa": " 101 ", "nombre": " Ana "})
    assert form.dpi == "1234567890123"
    assert form.casa == 101
    assert form.nombre == "Ana"


@pytest.mark.parametrize(
    "override, field, message",
    [
        ({"dpi": "123"}, "dpi", "DPI debe tener 13 dígitos."),
        ({"dpi": "12345678901ab"}, "dpi", "DPI debe tener 13 dígitos."),
        ({"casa": 0}, "casa", "Número de casa inválido."),
        ({"casa": "-3"}, "casa", "Número de casa inválido."),
        ({"casa": "abc"}, "casa", "Número de casa inválido."),
        ({"nombre": "A"}, "nombre", "Primer nombre inválido."),
        ({"nombre": "Ana3"}, "nombre", "Primer nombre inválido."),
        ({"apellido": "O'Neil-Ñúñez"}, None, None),
        ({"apellido": "L%"}, "apellido", "Primer apellido inválido."),
        ({"nacimiento": "12/05/1990"}, "nacimiento", "Fecha de nacimiento inválida."),
        # Pattern only, not a calendar check
        ({"nacimiento": "1990-13-45"}, None, None),
    ],
)
def test_tenant_form_rules(override, field, message):
    if field is None:
        validate_tenant_form(**{**VALID, **override})
        return
    with pytest.raises(ValidationError) as exc:
        validate_tenant_form(**{**VALID, **override})
    assert exc.value.field == field
    assert exc.value.message == message


def test_first_failure_wins():
    with pytest.raises(ValidationError) as exc:
        validate_tenant_form(dpi="1", casa=0, nombre="", apellido="", nacimiento="")
    assert exc.value.field == "dpi"


@pytest.mark.parametrize(
    "year, month, delta, expected",
    [
        (2025, 1, -1, (2024, 12)),
        (2025, 12, 1, (2026, 1)),
        (2025, 8, 1, (2025, 9)),
        (2025, 3, -15, (2023, 12)),
    ],
)
def test_shift_month(year, month, delta, expected):
    assert utils.shift_month(year, month, delta) == expected


def test_month_values():
    assert utils.parse_month_value("2025-08") == (2025, 8)
    assert utils.format_month_value(2025, 8) == "2025-08"
    assert utils.current_month_value(date(2024, 2, 29)) == "2024-02"
    with pytest.raises(ValueError):
        utils.parse_month_value("2025-13")
    with pytest.raises(ValueError):
        utils.parse_month_value("agosto")


def test_format_date():
    assert utils.format_date("2025-08-15") == "15/08/2025"
    assert utils.format_date(date(2025, 1, 2)) == "02/01/2025"
    assert utils.format_date(None) == ""
    assert utils.format_date("2025-02-30") == "30/02/2025"


def test_history_csv():
    data = utils.history_to_csv_bytes([DuesPayment(101, 2025, 1, date(2025, 1, 10))])
    lines = data.decode("utf-8").splitlines()
    assert lines[0] == "Casa,Año,Mes,Periodo,Fecha de pago"
    assert lines[1] == "101,2025,1,01/01/2025,10/01/2025"


def test_sample_database_is_loadable(tmp_path):
    path = utils.create_sample_database(tmp_path / "data" / "sample.db")
    session = DatabaseSession()
    session.load_bytes(path.read_bytes())
    assert session.fetch_one("SELECT COUNT(*) AS c FROM Inquilino")["c"] == 2


def test_history_frame_tolerates_bad_stored_values():
    # Foreign database: month outside 1..12 and a paid date that is not a real date
    frame = utils.payments_to_frame([DuesPayment(101, 2025, 13, None, raw_paid_date="2025-02-30")])
    row = frame.iloc[0]
    assert row["Periodo"] == "13/2025"
    assert row["Fecha de pago"] == "30/02/2025"
