import io

import openpyxl
import pytest
from sqlalchemy.orm import Session

from app.database_models import Client, Vehicle
from app.errors import ValidationError
from app.services.spreadsheet import import_clients_and_vehicles


def workbook_bytes(rows) -> bytes:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(["Nome", "Telefone", "CPF/CNPJ", "Placa", "Modelo", "Marca", "Ano"])
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestSpreadsheetImport:

    def test_imports_clients_and_vehicles(self, db: Session):
        content = workbook_bytes([
            ["Maria Silva", 11999990000, None, "abc1234", "Gol", "VW", 2012],
            ["Maria Silva", 11999990000, None, "XYZ9876", "Fox", "VW", 2018],
            ["Carlos", "2100", "123.456.789-00", None, None, None, None],
        ])

        result = import_clients_and_vehicles(db, content)

        assert result.imported == 3
        assert result.skipped == 0
        assert db.query(Client).count() == 2
        maria = db.query(Client).filter(Client.name == "Maria Silva").one()
        assert maria.phone == "11999990000"
        assert sorted(v.plate for v in maria.vehicles) == ["ABC1234", "XYZ9876"]
        assert maria.vehicles[0].year == "2012"
        assert db.query(Vehicle).count() == 2

    def test_rows_without_name_or_phone_are_skipped(self, db: Session):
        content = workbook_bytes([
            [None, "2100", None, "AAA1111", "Uno", None, None],
            ["Sem Telefone", None, None, None, None, None, None],
            ["Ana", "3100"],
        ])

        result = import_clients_and_vehicles(db, content)

        assert (result.imported, result.skipped) == (1, 2)
        assert db.query(Vehicle).count() == 0

    def test_reimport_does_not_duplicate(self, db: Session):
        content = workbook_bytes([["Maria Silva", "11999990000", None, "ABC1234", "Gol", None, None]])
        import_clients_and_vehicles(db, content)
        import_clients_and_vehicles(db, content)

        assert db.query(Client).count() == 1
        assert db.query(Vehicle).count() == 1

    def test_invalid_file(self, db: Session):
        with pytest.raises(ValidationError):
            import_clients_and_vehicles(db, b"not a spreadsheet")
