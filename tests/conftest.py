import os
from collections.abc import Generator
from decimal import Decimal

# Banco em memória antes de qualquer import da aplicação
os.environ["OFICINA_DATABASE_URL"] = "sqlite://"
os.environ.setdefault("OFICINA_LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.database import Base, SessionLocal, engine  # noqa: E402
from app.database_models import Client  # noqa: E402
from app.models.invoice import InvoiceCreate, LineItemDraft  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database() -> Generator[None, None, None]:
    """Recria todas as tabelas: cada teste começa com o banco vazio."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def maria(db: Session) -> Client:
    """Cliente usada nos cenários de nota."""
    customer = Client(name="Maria Silva", phone="11999990000")
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def oil_filter_invoice(maria: Client) -> InvoiceCreate:
    return InvoiceCreate(
        client_id=maria.id,
        labor_cost=Decimal("80.00"),
        items=[LineItemDraft(description="Oil filter", quantity=2, unit_price=Decimal("25.00"))],
    )


def invoice_payload(client_id: int, **overrides) -> dict:
    """Corpo JSON de POST /invoices com os valores do cenário do filtro de óleo."""
    payload = {
        "clientId": client_id,
        "laborCost": 80.00,
        "observations": "Revisão",
        "items": [{"description": "Oil filter", "quantity": 2, "unitPrice": 25.00}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_invoice_payload():
    return invoice_payload
