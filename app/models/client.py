from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.base import CamelModel


class ClientDraft(CamelModel):
    """Dados brutos de um cliente, usados no find-or-create."""

    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    tax_id: Optional[str] = Field(None, max_length=50, description="CPF/CNPJ, formato livre.")
    address: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None


class ClientUpdate(ClientDraft):
    pass


class Client(CamelModel):
    id: int
    name: str
    tax_id: Optional[str] = None
    phone: str
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
