from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette import status

from app.database import get_db
from app.models.base import SuccessResponse
from app.models.invoice import (
    InvoiceCreate, InvoiceCreated, InvoiceDetail, InvoiceSummary, InvoiceUpdate, LineItem,
)
from app.services.invoices import InvoiceService

router = APIRouter(prefix="/invoices", tags=["invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    return InvoiceService(db)


@router.post(
    "", response_model=InvoiceCreated, status_code=status.HTTP_201_CREATED,
    name="create_invoice",
)
def create_invoice(data: InvoiceCreate, service: InvoiceService = Depends(get_invoice_service)):
    return service.create(data)


@router.get("", response_model=List[InvoiceSummary], name="list_invoices")
def list_invoices(service: InvoiceService = Depends(get_invoice_service)):
    return service.list()


# Declarada antes de /{invoice_id} para não competir com as rotas por id
@router.get("/search/{substring}", response_model=List[InvoiceSummary], name="search_invoices")
def search_invoices(substring: str, service: InvoiceService = Depends(get_invoice_service)):
    return service.search_by_client_name(substring)


@router.get("/{invoice_id}", response_model=InvoiceDetail, name="show_invoice")
def show_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    return service.get(invoice_id)


@router.get("/{invoice_id}/items", response_model=List[LineItem], name="invoice_items")
def invoice_items(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    return service.items_for(invoice_id)


@router.put("/{invoice_id}", response_model=SuccessResponse, name="update_invoice")
def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    service: InvoiceService = Depends(get_invoice_service),
):
    service.update(invoice_id, data)
    return SuccessResponse()


@router.post("/{invoice_id}/cancel", response_model=SuccessResponse, name="cancel_invoice")
def cancel_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    service.cancel(invoice_id)
    return SuccessResponse()


@router.delete("/{invoice_id}", response_model=SuccessResponse, name="delete_invoice")
def delete_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    # Exclusão idempotente: id inexistente também responde sucesso
    service.delete(invoice_id)
    return SuccessResponse()
