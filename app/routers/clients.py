import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette import status

from app.database import get_db
from app.database_models import Client, Invoice
from app.errors import ConflictError, DuplicateClientError, NotFoundError, StorageError
from app.models.base import IdResponse, SuccessResponse
from app.models.client import Client as ClientOut, ClientDraft, ClientUpdate
from app.models.vehicle import Vehicle as VehicleOut
from app.services.resolution import find_or_create_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["clients"])


def _get_client_or_404(db: Session, client_id: int) -> Client:
    client = db.get(Client, client_id)
    if client is None:
        raise NotFoundError("Cliente não encontrado.")
    return client


def _commit(db: Session, action: str):
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Já existe um cliente com este nome e telefone.") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Erro ao %s cliente", action)
        raise StorageError(f"Erro ao {action} cliente: {exc}") from exc


# Rota 1: Cadastro (find-or-create por nome + telefone)
@router.post(
    "", response_model=IdResponse, status_code=status.HTTP_201_CREATED, name="create_client",
)
def create_client(data: ClientDraft, db: Session = Depends(get_db)):
    fields = data.model_dump(exclude={"name", "phone"})
    try:
        client = find_or_create_client(db, data.name, data.phone, **fields)
    except DuplicateClientError:
        # Criado por outra requisição no meio do caminho: agora a busca encontra
        client = find_or_create_client(db, data.name, data.phone, **fields)
    _commit(db, "criar")
    return IdResponse(id=client.id)


# Rota 2: Listar Clientes (mais recentes primeiro)
@router.get("", response_model=List[ClientOut], name="list_clients")
def list_clients(db: Session = Depends(get_db)):
    return db.query(Client).order_by(Client.created_at.desc(), Client.id.desc()).all()


# Rota 3: Detalhes de um Cliente
@router.get("/{client_id}", response_model=ClientOut, name="show_client")
def show_client(client_id: int, db: Session = Depends(get_db)):
    return _get_client_or_404(db, client_id)


# Rota 4: Veículos do Cliente
@router.get("/{client_id}/vehicles", response_model=List[VehicleOut], name="client_vehicles")
def client_vehicles(client_id: int, db: Session = Depends(get_db)):
    # O SQLAlchemy já popula 'client.vehicles' por causa do 'relationship'
    return _get_client_or_404(db, client_id).vehicles


# Rota 5: Atualização
@router.put("/{client_id}", response_model=SuccessResponse, name="update_client")
def update_client(client_id: int, data: ClientUpdate, db: Session = Depends(get_db)):
    client_to_update = _get_client_or_404(db, client_id)
    for field, value in data.model_dump().items():
        setattr(client_to_update, field, value)
    _commit(db, "atualizar")
    logger.info("Cliente %s atualizado", client_id)
    return SuccessResponse()


# Rota 6: Exclusão
@router.delete("/{client_id}", response_model=SuccessResponse, name="delete_client")
def delete_client(client_id: int, db: Session = Depends(get_db)):
    client_to_delete = _get_client_or_404(db, client_id)

    # Notas guardam o histórico do cliente: não apagamos cliente com nota emitida
    invoice_count = db.query(Invoice).filter(Invoice.client_id == client_id).count()
    if invoice_count:
        raise ConflictError(
            f"Cliente possui {invoice_count} nota(s) e não pode ser excluído."
        )

    # cascade="all, delete-orphan" apaga também os veículos do cliente
    db.delete(client_to_delete)
    _commit(db, "excluir")
    logger.info("Cliente %s excluído", client_id)
    return SuccessResponse()
