import logging

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import JSONResponse

from app.config import configure_logging, settings
# BANCO DE DADOS
from app.database import engine, Base, get_db
from app import database_models  # noqa: F401  (registra as tabelas no Base)
from app.auth_utils import create_admin_user_if_not_exists
from app.errors import AppError
# Roteadores
from app.routers import auth
from app.routers.clients import router as clients_router
from app.routers.vehicles import router as vehicles_router
from app.routers.invoices import router as invoices_router

configure_logging()
logger = logging.getLogger("oficina")

# Cria a instância principal do FastAPI
app = FastAPI(title="Oficina - Notas de Serviço")
Base.metadata.create_all(bind=engine)
create_admin_user_if_not_exists()

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    https_only=False,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(clients_router)
app.include_router(vehicles_router)
app.include_router(invoices_router)


# --- Erros sempre no formato {"error": "..."} ---
@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"error": "; ".join(messages) or "Requisição inválida."},
    )


@app.get("/", include_in_schema=False)
def root():
    return {"message": "API OK"}


@app.get("/status")
def status(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Banco indisponível")
        database = "error"
    return {"status": "ok", "database": database}


if __name__ == "__main__":
    logger.info("Banco de dados: %s", settings.database_url)
    uvicorn.run(app, host=settings.host, port=settings.port)
