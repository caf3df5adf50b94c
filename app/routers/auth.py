import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth_utils import get_current_user, get_password_hash, verify_password
from app.database import get_db
from app.database_models import User
from app.errors import AuthenticationError, ValidationError
from app.models.base import SuccessResponse
from app.models.user import User as UserOut, UserLogin, UserRegister

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, name="register")
def register(data: UserRegister, db: Session = Depends(get_db)):
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ValidationError("Este e-mail já está cadastrado.")

    user = User(name=data.name, email=email, password_hash=get_password_hash(data.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError("Este e-mail já está cadastrado.") from exc
    db.refresh(user)
    logger.info("Usuário registrado: %s", email)
    return user


@router.post("/login", response_model=UserOut, name="login")
def login(request: Request, data: UserLogin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email.lower()).first()
    if user is None or not verify_password(data.password, user.password_hash):
        logger.info("Login recusado para %s", data.email)
        raise AuthenticationError("E-mail ou senha inválidos.")

    request.session["user_id"] = user.id
    return user


@router.get("/me", response_model=UserOut, name="current_user")
def me(user: User = Depends(get_current_user)):
    return user


@router.post("/logout", response_model=SuccessResponse, name="logout")
def logout(request: Request):
    """Limpa a sessão do usuário."""
    request.session.clear()
    return SuccessResponse()
