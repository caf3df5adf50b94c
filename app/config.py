import logging
import os
import sys
from pathlib import Path

# --- LÓGICA DE CAMINHO ---
# (Suporte ao PyInstaller: o banco fica ao lado do executável empacotado)
if getattr(sys, 'frozen', False):
    BASE_DIR = Path(sys._MEIPASS)
else:
    BASE_DIR = Path(".")
# -------------------------


class Settings:
    """Configuração lida das variáveis de ambiente (uma vez, no import)."""

    def __init__(self):
        self.database_url = os.environ.get(
            "OFICINA_DATABASE_URL", f"sqlite:///{BASE_DIR / 'oficina.db'}"
        )
        self.host = os.environ.get("OFICINA_HOST", "127.0.0.1")
        self.port = int(os.environ.get("OFICINA_PORT", "3001"))
        self.secret_key = os.environ.get(
            "OFICINA_SECRET_KEY", "troque-esta-chave-em-producao"
        )
        self.cors_origins = [
            origin.strip()
            for origin in os.environ.get("OFICINA_CORS_ORIGINS", "http://localhost:5173").split(",")
            if origin.strip()
        ]
        self.log_level = os.environ.get("OFICINA_LOG_LEVEL", "INFO").upper()
        self.invoice_prefix = os.environ.get("OFICINA_INVOICE_PREFIX", "NF")
        self.admin_email = os.environ.get("OFICINA_ADMIN_EMAIL", "admin@oficina.local")
        self.admin_password = os.environ.get("OFICINA_ADMIN_PASSWORD", "admin")


settings = Settings()


def configure_logging(level: str = None):
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
