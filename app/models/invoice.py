from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from app.models.base import CamelModel, Money
from app.models.client import ClientDraft
from app.models.vehicle import Vehicle, VehicleDraft


# ----------------------------------------------------
# 1. ENUMERADOR DE STATUS
# ----------------------------------------------------
class InvoiceStatus(str, Enum):
    """Status possíveis de uma nota."""
    ACTIVE = "active"
    CANCELLED = "cancelled"


# ----------------------------------------------------
# 2. ENTRADA (criação / atualização)
# ----------------------------------------------------
class LineItemDraft(CamelModel):
    """Uma peça da nota, como enviada pelo formulário."""

    description: str = Field(..., min_length=1, max_length=255, description="Nome da peça.")
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class InvoiceUpdate(CamelModel):
    """
    Substitui o cabeçalho e a lista COMPLETA de itens.
    Campos de veículo omitidos (None) mantêm o valor já gravado.
    """

    issue_date: Optional[date] = None
    vehicle_plate: Optional[str] = Field(None, max_length=20)
    vehicle_model: Optional[str] = Field(None, max_length=100)
    vehicle_year: Optional[str] = Field(None, max_length=10)
    labor_cost: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    observations: Optional[str] = None
    items: List[LineItemDraft] = Field(default_factory=list)


class InvoiceCreate(InvoiceUpdate):
    """
    O cliente vem como id (clientId) ou como dados brutos (client), nunca os dois.
    O veículo é opcional: vehicleId, dados brutos (vehicle) ou só os campos de snapshot.
    """

    client_id: Optional[int] = None
    client: Optional[ClientDraft] = None
    vehicle_id: Optional[int] = None
    vehicle: Optional[VehicleDraft] = None

    @model_validator(mode="after")
    def check_client_reference(self):
        if (self.client_id is None) == (self.client is None):
            raise ValueError("informe clientId ou client (exatamente um)")
        if self.vehicle_id is not None and self.vehicle is not None:
            raise ValueError("informe vehicleId ou vehicle, não os dois")
        return self


# ----------------------------------------------------
# 3. SAÍDA
# ----------------------------------------------------
class LineItem(CamelModel):
    id: int
    invoice_id: int
    description: str
    quantity: int
    unit_price: Money
    subtotal: Money


class InvoiceSummary(CamelModel):
    """Projeção da listagem: sem itens."""

    id: int
    number: str
    client_id: int
    client_name: Optional[str] = None
    vehicle_id: Optional[int] = None
    vehicle_plate: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[str] = None
    issue_date: date
    labor_cost: Money
    parts_total: Money
    total: Money
    observations: Optional[str] = None
    status: InvoiceStatus
    created_at: datetime
    updated_at: datetime


class InvoiceDetail(InvoiceSummary):
    vehicle: Optional[Vehicle] = None
    items: List[LineItem] = Field(default_factory=list)


class InvoiceCreated(CamelModel):
    id: int
    number: str
