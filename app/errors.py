from starlette import status


class AppError(Exception):
    """Erro de negócio com status HTTP associado. Renderizado como {"error": message}."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Entrada inválida (nome vazio, quantidade/preço não positivos, nota sem valor)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class DuplicateClientError(ConflictError):
    """Outro processo criou o mesmo par (nome, telefone) entre a busca e o insert."""


class StorageError(AppError):
    """Falha inesperada do banco. A transação já foi desfeita quando isto sobe."""


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
