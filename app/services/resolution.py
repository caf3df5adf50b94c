"""Find-or-create de clientes e veículos.

As funções fazem flush mas não commit: quem chama é dono da transação
(a criação de nota usa isso para gravar cliente, veículo e nota juntos).
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database_models import Client, Vehicle
from app.errors import DuplicateClientError, ValidationError

logger = logging.getLogger(__name__)


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


def find_client(db: Session, name: str, phone: str) -> Optional[Client]:
    return (
        db.query(Client)
        .filter(Client.name == _clean(name), Client.phone == _clean(phone))
        .first()
    )


def find_or_create_client(
    db: Session,
    name: str,
    phone: str,
    tax_id: Optional[str] = None,
    address: Optional[str] = None,
    notes: Optional[str] = None,
) -> Client:
    """
    Reaproveita o cliente com o mesmo (nome, telefone) sem alterar os outros campos.
    Se não existir, cria. Uma violação de unicidade no insert (criação concorrente)
    desfaz a transação e levanta DuplicateClientError: basta repetir a busca.
    """
    name, phone = _clean(name), _clean(phone)
    if not name or not phone:
        raise ValidationError("Nome e telefone do cliente são obrigatórios.")

    existing = find_client(db, name, phone)
    if existing is not None:
        return existing

    client = Client(name=name, phone=phone, tax_id=tax_id, address=address, notes=notes)
    db.add(client)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Cliente duplicado na criação (%s, %s)", name, phone)
        raise DuplicateClientError(
            "Já existe um cliente com este nome e telefone."
        ) from exc

    logger.info("Cliente criado: id=%s nome=%s", client.id, name)
    return client


def find_or_create_vehicle(
    db: Session,
    client_id: int,
    plate: Optional[str] = None,
    model: Optional[str] = None,
    brand: Optional[str] = None,
    year: Optional[str] = None,
) -> Vehicle:
    """Busca o veículo do cliente por (placa, modelo); campos vazios casam com vazios."""
    if db.get(Client, client_id) is None:
        raise ValidationError(f"Cliente {client_id} não existe.")

    # Padroniza a placa (mesma regra do cadastro manual)
    plate_str = _clean(plate).upper()
    model_str = _clean(model)

    vehicle = (
        db.query(Vehicle)
        .filter(
            Vehicle.client_id == client_id,
            Vehicle.plate == plate_str,
            Vehicle.model == model_str,
        )
        .first()
    )
    if vehicle is not None:
        return vehicle

    vehicle = Vehicle(
        client_id=client_id,
        plate=plate_str,
        model=model_str,
        brand=_clean(brand) or None,
        year=_clean(year) or None,
    )
    db.add(vehicle)
    db.flush()
    logger.info("Veículo criado: id=%s placa=%s cliente=%s", vehicle.id, plate_str, client_id)
    return vehicle
