import io
import logging
import zipfile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import AppError, StorageError, ValidationError
from app.models.vehicle import ImportResult
from app.services.resolution import find_or_create_client, find_or_create_vehicle

logger = logging.getLogger(__name__)

# Colunas da planilha (linha 1 é cabeçalho)
COLUMNS = ("name", "phone", "tax_id", "plate", "model", "brand", "year")


def _cell(value):
    if value is None:
        return None
    # Telefone e ano costumam vir como número no Excel
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def import_clients_and_vehicles(db: Session, content: bytes) -> ImportResult:
    """
    Importa clientes e veículos de uma planilha .xlsx.
    Tudo passa pelo find-or-create; o arquivo inteiro é uma transação só.
    """
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise ValidationError("Arquivo inválido: envie uma planilha .xlsx.") from exc

    sheet = workbook.active
    imported = skipped = 0
    try:
        for row in sheet.iter_rows(min_row=2, values_only=True):
            values = dict(zip(COLUMNS, (_cell(v) for v in row)))
            if not values.get("name") or not values.get("phone"):
                skipped += 1
                continue

            client = find_or_create_client(
                db, values["name"], values["phone"], tax_id=values.get("tax_id"),
            )
            if any(values.get(key) for key in ("plate", "model", "brand", "year")):
                find_or_create_vehicle(
                    db, client.id,
                    values.get("plate"), values.get("model"),
                    values.get("brand"), values.get("year"),
                )
            imported += 1
        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Erro ao importar planilha")
        raise StorageError(f"Erro no processamento do arquivo: {exc}") from exc
    finally:
        workbook.close()

    logger.info("Planilha importada: %s linhas, %s ignoradas", imported, skipped)
    return ImportResult(imported=imported, skipped=skipped)
