import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette import status

from app.database import get_db
from app.database_models import Client, Vehicle
from app.errors import NotFoundError, StorageError, ValidationError
from app.models.base import IdResponse, SuccessResponse
from app.models.vehicle import ImportResult, Vehicle as VehicleOut, VehicleCreate
from app.services.resolution import find_or_create_vehicle
from app.services.spreadsheet import import_clients_and_vehicles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


def _get_vehicle_or_404(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.get(Vehicle, vehicle_id)
    if vehicle is None:
        raise NotFoundError("Veículo não encontrado.")
    return vehicle


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Erro ao %s veículo", action)
        raise StorageError(f"Erro ao {action} veículo: {exc}") from exc


@router.get("", response_model=List[VehicleOut], name="list_vehicles")
def list_vehicles(db: Session = Depends(get_db)):
    return db.query(Vehicle).order_by(Vehicle.created_at.desc(), Vehicle.id.desc()).all()


@router.post(
    "", response_model=IdResponse, status_code=status.HTTP_201_CREATED, name="create_vehicle",
)
def create_vehicle(data: VehicleCreate, db: Session = Depends(get_db)):
    # Todo veículo passa pelo find-or-create para não duplicar
    vehicle = find_or_create_vehicle(
        db, data.client_id, data.plate, data.model, data.brand, data.year,
    )
    _commit(db, "criar")
    return IdResponse(id=vehicle.id)


@router.post("/import", response_model=ImportResult, name="import_vehicles")
def import_vehicles(excel_file: UploadFile = File(...), db: Session = Depends(get_db)):
    if not (excel_file.filename or "").lower().endswith(".xlsx"):
        raise ValidationError("Arquivo inválido: envie uma planilha .xlsx.")
    result = import_clients_and_vehicles(db, excel_file.file.read())
    logger.info("Importação de %s concluída", excel_file.filename)
    return result


@router.get("/{vehicle_id}", response_model=VehicleOut, name="show_vehicle")
def show_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    return _get_vehicle_or_404(db, vehicle_id)


@router.put("/{vehicle_id}", response_model=SuccessResponse, name="update_vehicle")
def update_vehicle(vehicle_id: int, data: VehicleCreate, db: Session = Depends(get_db)):
    vehicle_to_update = _get_vehicle_or_404(db, vehicle_id)
    if db.get(Client, data.client_id) is None:
        raise ValidationError(f"Cliente {data.client_id} não existe.")

    vehicle_to_update.client_id = data.client_id
    vehicle_to_update.plate = (data.plate or "").upper()  # Salva a placa padronizada
    vehicle_to_update.model = data.model or ""
    vehicle_to_update.brand = data.brand
    vehicle_to_update.year = data.year
    _commit(db, "atualizar")
    return SuccessResponse()


@router.delete("/{vehicle_id}", response_model=SuccessResponse, name="delete_vehicle")
def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    # Notas que apontam para o veículo ficam com vehicle_id nulo e mantêm o snapshot
    db.delete(_get_vehicle_or_404(db, vehicle_id))
    _commit(db, "excluir")
    logger.info("Veículo %s excluído", vehicle_id)
    return SuccessResponse()
