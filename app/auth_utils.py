import logging

from fastapi import Depends, HTTPException, Request
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from starlette import status

from app.config import settings
from app.database import SessionLocal, get_db
from app.database_models import User

logger = logging.getLogger(__name__)

# scrypt não depende de pacote externo de bcrypt
pwd_context = CryptContext(schemes=["scrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha pura corresponde ao hash salvo."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_admin_user_if_not_exists():
    """Cria o usuário administrador padrão se ele não existir."""
    db = SessionLocal()
    try:
        admin_user = db.query(User).filter(User.email == settings.admin_email).first()
        if admin_user is None:
            db.add(User(
                name="Administrador do Sistema",
                email=settings.admin_email,
                password_hash=get_password_hash(settings.admin_password),
            ))
            db.commit()
            logger.info("Usuário admin padrão criado (%s).", settings.admin_email)
        else:
            logger.debug("Usuário admin já existe.")
    finally:
        db.close()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Usuário da sessão, ou 401 se ninguém estiver logado."""
    user_id = request.session.get("user_id")
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Não autenticado.",
        )
    return user
