from datetime import date, datetime

from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime, ForeignKey, TEXT,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship, validates

from .database import Base


# 1. Usuários (login do sistema)
class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)


# 2. Clientes
class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("name", "phone", name="uq_clients_name_phone"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    # Nome em casefold para a busca sem distinção de maiúsculas (inclui acentos: "JOÃO" == "joão")
    search_name = Column(String(255), default="", nullable=False, index=True)
    tax_id = Column(String(50))
    phone = Column(String(50), nullable=False)
    address = Column(String(500))
    notes = Column(TEXT)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    # Um Cliente tem muitos Veículos (apagados junto com ele)
    vehicles = relationship(
        "Vehicle", back_populates="owner", cascade="all, delete-orphan",
        order_by="Vehicle.id",
    )

    @validates("name")
    def _sync_search_name(self, key, value):
        self.search_name = (value or "").casefold()
        return value


# 3. Veículos
class Vehicle(Base):
    __tablename__ = "vehicles"
    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    plate = Column(String(20), default="", nullable=False, index=True)
    model = Column(String(100), default="", nullable=False)
    brand = Column(String(100))
    year = Column(String(10))
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    owner = relationship("Client", back_populates="vehicles")


# 4. Notas (cabeçalho)
class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("labor_cost >= 0", name="ck_invoices_labor_cost"),
        CheckConstraint("parts_total >= 0", name="ck_invoices_parts_total"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    number = Column(String(30), unique=True, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    # Apenas procedência: os dados do veículo ficam copiados abaixo
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"))
    vehicle_plate = Column(String(20))
    vehicle_model = Column(String(100))
    vehicle_year = Column(String(10))
    issue_date = Column(Date, default=date.today, nullable=False)
    labor_cost = Column(Numeric(10, 2), default=0, nullable=False)
    parts_total = Column(Numeric(10, 2), default=0, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    observations = Column(TEXT)
    status = Column(String(20), default="active", nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    client = relationship("Client")
    vehicle = relationship("Vehicle")
    items = relationship(
        "LineItem", back_populates="invoice", cascade="all, delete-orphan",
        order_by="LineItem.id",
    )

    @property
    def client_name(self):
        return self.client.name if self.client is not None else None


# 5. Itens da nota (peças)
class LineItem(Base):
    __tablename__ = "line_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_line_items_quantity"),
        CheckConstraint("unit_price > 0", name="ck_line_items_unit_price"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")
