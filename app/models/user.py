from pydantic import Field

from app.models.base import CamelModel


class UserRegister(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=4)


class UserLogin(CamelModel):
    email: str
    password: str


class User(CamelModel):
    """Representação pública: o hash da senha nunca sai da API."""

    id: int
    name: str
    email: str
