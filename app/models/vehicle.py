from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.base import CamelModel


class VehicleDraft(CamelModel):
    plate: Optional[str] = Field(None, max_length=20)
    model: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    year: Optional[str] = Field(None, max_length=10)


class VehicleCreate(VehicleDraft):
    client_id: int  # Chave estrangeira para o Cliente


class Vehicle(CamelModel):
    id: int
    client_id: int
    plate: str
    model: str
    brand: Optional[str] = None
    year: Optional[str] = None
    created_at: datetime


class ImportResult(CamelModel):
    imported: int
    skipped: int
