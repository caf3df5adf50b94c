"""Serviço de notas: cabeçalho + itens gravados sempre na mesma transação.

parts_total e total nunca vêm do cliente HTTP: são recalculados a partir
dos itens em toda criação e atualização.
"""

import logging
import random
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.config import settings
from app.database_models import Client, Invoice, LineItem, Vehicle
from app.errors import AppError, ConflictError, NotFoundError, StorageError, ValidationError
from app.models.invoice import InvoiceCreate, InvoiceStatus, InvoiceUpdate
from app.services.resolution import find_or_create_client, find_or_create_vehicle

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MAX_NUMBER_ATTEMPTS = 5


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(quantity: int, unit_price) -> Decimal:
    return _money(Decimal(quantity) * _money(unit_price))


def compute_totals(items: Iterable, labor_cost) -> Tuple[Decimal, Decimal]:
    """Retorna (parts_total, total) para a lista de itens e a mão de obra."""
    parts_total = sum(
        (line_subtotal(item.quantity, item.unit_price) for item in items),
        Decimal("0.00"),
    )
    parts_total = _money(parts_total)
    return parts_total, _money(parts_total + _money(labor_cost))


def generate_invoice_number(prefix: str = None) -> str:
    numero = random.randint(1, 999999)
    return f"{prefix or settings.invoice_prefix}{numero:06d}"


class InvoiceService:
    """Criação, atualização, exclusão e leitura de notas."""

    def __init__(
        self,
        db: Session,
        number_generator: Callable[[], str] = generate_invoice_number,
        max_number_attempts: int = MAX_NUMBER_ATTEMPTS,
    ):
        self.db = db
        self.number_generator = number_generator
        self.max_number_attempts = max_number_attempts

    # ------------------------------------------------------------------
    # Escrita
    # ------------------------------------------------------------------
    def create(self, data: InvoiceCreate) -> Invoice:
        self._check_billable(data.items, data.labor_cost)

        for attempt in range(1, self.max_number_attempts + 1):
            number = self._unused_number()
            try:
                invoice = self._build_invoice(data, number)
                self.db.add(invoice)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                if self._number_taken(number):
                    # Outra requisição gravou o mesmo número entre a checagem e o insert
                    logger.warning("Número %s já usado (tentativa %s), gerando outro", number, attempt)
                    continue
                logger.exception("Falha de integridade ao criar nota")
                raise StorageError(f"Erro ao gravar nota: {exc.orig}") from exc
            except AppError:
                self.db.rollback()
                raise
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.exception("Erro de banco ao criar nota")
                raise StorageError(f"Erro ao gravar nota: {exc}") from exc

            logger.info(
                "Nota %s criada: id=%s cliente=%s total=%s",
                invoice.number, invoice.id, invoice.client_id, invoice.total,
            )
            return invoice

        raise ConflictError("Não foi possível gerar um número de nota único.")

    def update(self, invoice_id: int, data: InvoiceUpdate) -> Invoice:
        """Atualiza o cabeçalho e troca TODOS os itens (apaga e reinsere, sem diff)."""
        invoice = self.db.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError("Nota não encontrada.")
        self._check_billable(data.items, data.labor_cost)

        try:
            parts_total, total = compute_totals(data.items, data.labor_cost)
            invoice.labor_cost = _money(data.labor_cost)
            invoice.parts_total = parts_total
            invoice.total = total
            invoice.observations = data.observations
            if data.issue_date is not None:
                invoice.issue_date = data.issue_date
            for field in ("vehicle_plate", "vehicle_model", "vehicle_year"):
                value = getattr(data, field)
                if value is not None:
                    setattr(invoice, field, value)
            # delete-orphan remove os itens antigos no mesmo flush
            invoice.items = self._build_items(data.items)
            invoice.updated_at = datetime.now()
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Erro ao atualizar nota %s", invoice_id)
            raise StorageError(f"Erro ao atualizar nota: {exc}") from exc

        logger.info("Nota %s atualizada: %s itens, total=%s", invoice.number, len(data.items), invoice.total)
        return invoice

    def cancel(self, invoice_id: int) -> Invoice:
        invoice = self.db.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError("Nota não encontrada.")
        try:
            invoice.status = InvoiceStatus.CANCELLED.value
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Erro ao cancelar nota %s", invoice_id)
            raise StorageError(f"Erro ao cancelar nota: {exc}") from exc
        logger.info("Nota %s cancelada", invoice.number)
        return invoice

    def delete(self, invoice_id: int) -> bool:
        """Apaga itens e cabeçalho juntos. Id inexistente não é erro: retorna False."""
        invoice = self.db.get(Invoice, invoice_id)
        if invoice is None:
            return False
        number = invoice.number
        try:
            self.db.delete(invoice)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Erro ao excluir nota %s", invoice_id)
            raise StorageError(f"Erro ao excluir nota: {exc}") from exc
        logger.info("Nota %s excluída", number)
        return True

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------
    def get(self, invoice_id: int) -> Invoice:
        invoice = (
            self.db.query(Invoice)
            .options(
                joinedload(Invoice.client),
                joinedload(Invoice.vehicle),
                selectinload(Invoice.items),
            )
            .filter(Invoice.id == invoice_id)
            .first()
        )
        if invoice is None:
            raise NotFoundError("Nota não encontrada.")
        return invoice

    def list(self) -> List[Invoice]:
        return self._summary_query().all()

    def search_by_client_name(self, substring: str) -> List[Invoice]:
        return (
            self._summary_query()
            .filter(Client.search_name.contains(substring.strip().casefold(), autoescape=True))
            .all()
        )

    def items_for(self, invoice_id: int) -> List[LineItem]:
        return (
            self.db.query(LineItem)
            .filter(LineItem.invoice_id == invoice_id)
            .order_by(LineItem.id)
            .all()
        )

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------
    def _summary_query(self):
        return (
            self.db.query(Invoice)
            .join(Invoice.client)
            .options(joinedload(Invoice.client))
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )

    @staticmethod
    def _check_billable(items, labor_cost):
        if not items and _money(labor_cost) == 0:
            raise ValidationError("A nota precisa ter ao menos uma peça ou valor de mão de obra.")

    def _number_taken(self, number: str) -> bool:
        return self.db.query(Invoice.id).filter(Invoice.number == number).first() is not None

    def _unused_number(self) -> str:
        for _ in range(self.max_number_attempts):
            number = self.number_generator()
            if not self._number_taken(number):
                return number
        raise ConflictError("Não foi possível gerar um número de nota único.")

    def _resolve_client(self, data: InvoiceCreate) -> Client:
        if data.client_id is not None:
            client = self.db.get(Client, data.client_id)
            if client is None:
                raise ValidationError(f"Cliente {data.client_id} não existe.")
            return client
        draft = data.client
        return find_or_create_client(
            self.db, draft.name, draft.phone,
            tax_id=draft.tax_id, address=draft.address, notes=draft.notes,
        )

    def _resolve_vehicle(self, data: InvoiceCreate, client: Client) -> Optional[Vehicle]:
        if data.vehicle_id is not None:
            vehicle = self.db.get(Vehicle, data.vehicle_id)
            if vehicle is None or vehicle.client_id != client.id:
                raise ValidationError(f"Veículo {data.vehicle_id} não pertence ao cliente.")
            return vehicle
        if data.vehicle is not None:
            draft = data.vehicle
            return find_or_create_vehicle(
                self.db, client.id, draft.plate, draft.model, draft.brand, draft.year,
            )
        return None

    @staticmethod
    def _build_items(drafts) -> List[LineItem]:
        return [
            LineItem(
                description=draft.description,
                quantity=draft.quantity,
                unit_price=_money(draft.unit_price),
                subtotal=line_subtotal(draft.quantity, draft.unit_price),
            )
            for draft in drafts
        ]

    def _build_invoice(self, data: InvoiceCreate, number: str) -> Invoice:
        client = self._resolve_client(data)
        vehicle = self._resolve_vehicle(data, client)
        parts_total, total = compute_totals(data.items, data.labor_cost)

        invoice = Invoice(
            number=number,
            client_id=client.id,
            issue_date=data.issue_date or date.today(),
            labor_cost=_money(data.labor_cost),
            parts_total=parts_total,
            total=total,
            observations=data.observations,
            status=InvoiceStatus.ACTIVE.value,
            items=self._build_items(data.items),
        )
        if vehicle is not None:
            # Snapshot: a nota guarda os dados do veículo como estavam na emissão
            invoice.vehicle_id = vehicle.id
            invoice.vehicle_plate = vehicle.plate
            invoice.vehicle_model = vehicle.model
            invoice.vehicle_year = vehicle.year
        else:
            invoice.vehicle_plate = data.vehicle_plate
            invoice.vehicle_model = data.vehicle_model
            invoice.vehicle_year = data.vehicle_year
        return invoice
