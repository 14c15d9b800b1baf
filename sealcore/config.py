# --------------------------------------------------------------
# File: config.py
# Description: Configuración del motor a partir de variables de entorno y .env.
# --------------------------------------------------------------
"""Carga de ajustes y configuración del logging de la aplicación."""

from __future__ import annotations

import logging
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_LEDGER_PATH = os.path.join("_data", "ledger.json")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    """Ajustes de ejecución del motor.

    Attributes:
        ledger_path (str): Ruta del almacén del historial.
        ledger_backend (str): ``json`` o ``sqlite``.
        chunk_size (int): Tamaño del bloque de lectura al transformar flujos.
        workers (int): Número de operaciones simultáneas en segundo plano.
        log_level (str): Nivel de logging para la CLI.

    """

    ledger_path: str = DEFAULT_LEDGER_PATH
    ledger_backend: Literal["json", "sqlite"] = "json"
    chunk_size: int = Field(default=8192, gt=0)
    workers: int = Field(default=2, ge=1)
    log_level: str = "WARNING"


def load_settings() -> Settings:
    """Construye los ajustes leyendo las variables ``FILESEALER_*``.

    Returns:
        Settings: Ajustes validados; pydantic lanza ``ValidationError`` si algún
        valor no es válido.

    """

    return Settings(
        ledger_path=os.getenv("FILESEALER_LEDGER_PATH", DEFAULT_LEDGER_PATH),
        ledger_backend=os.getenv("FILESEALER_LEDGER_BACKEND", "json").lower(),
        chunk_size=os.getenv("FILESEALER_CHUNK_SIZE", "8192"),
        workers=os.getenv("FILESEALER_WORKERS", "2"),
        log_level=os.getenv("FILESEALER_LOG_LEVEL", "WARNING").upper(),
    )


def configure_logging(level: str = "WARNING") -> None:
    """Configura el logging raíz una sola vez para los puntos de entrada."""

    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)
