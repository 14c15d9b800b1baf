# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos comunes utilizados por el motor de sellado.
# --------------------------------------------------------------
"""Modelos Pydantic que encapsulan algoritmos, resultados y registros de operación."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AlgorithmId(str, Enum):
    """Conjunto cerrado de algoritmos soportados."""

    AES256 = "AES256"
    BLOWFISH128 = "BLOWFISH128"
    CHACHA20 = "CHACHA20"


class CipherMode(str, Enum):
    """Dirección de la transformación: sellar (cifrar) o abrir (descifrar)."""

    SEAL = "SEAL"
    OPEN = "OPEN"


class OperationType(str, Enum):
    SEAL = "SEAL"
    OPEN = "OPEN"


class OperationStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class AlgorithmSpec(BaseModel):
    """Descriptor inmutable de un algoritmo.

    Attributes:
        id (AlgorithmId): Identificador del algoritmo.
        key_bytes (int): Longitud de la clave en bytes.
        iv_or_nonce_bytes (int): Longitud de la cabecera IV/nonce del contenedor.
        display_name (str): Nombre legible que se guarda en el historial.
        block_bits (Optional[int]): Tamaño de bloque para el relleno PKCS7;
            ``None`` en cifrados de flujo.

    """

    model_config = ConfigDict(frozen=True)

    id: AlgorithmId
    key_bytes: int
    iv_or_nonce_bytes: int
    display_name: str
    block_bits: Optional[int] = None


class SealResult(BaseModel):
    """Resultado de sellar un archivo.

    Attributes:
        output_path (str): Ruta del contenedor generado.
        key_b64 (str): Clave en Base64 que el usuario debe conservar.
        algorithm (str): Nombre legible del algoritmo utilizado.
        iv_or_nonce_b64 (str): Cabecera escrita al inicio del contenedor.
        warnings (List[str]): Avisos secundarios (p. ej. fallo del historial).

    """

    output_path: str
    key_b64: str
    algorithm: str
    iv_or_nonce_b64: str
    warnings: List[str] = Field(default_factory=list)


class OpenResult(BaseModel):
    """Resultado de abrir un contenedor sellado."""

    output_path: str
    algorithm: str
    warnings: List[str] = Field(default_factory=list)


class OperationRecord(BaseModel):
    """Registro inmutable de un intento de sellado o apertura.

    Attributes:
        file_name (str): Nombre del archivo de entrada.
        original_path (str): Ruta completa del archivo de entrada.
        operation_type (OperationType): ``SEAL`` u ``OPEN``.
        algorithm (str): Nombre del algoritmo tal como lo indicó el llamante.
        file_size_bytes (int): Tamaño del archivo de entrada.
        status (OperationStatus): ``SUCCESS`` o ``FAILED``.
        error_message (Optional[str]): Motivo del fallo, si lo hubo.
        timestamp (datetime): Instante del intento con precisión de µs.
        output_path (Optional[str]): Ruta del archivo producido.
        id (Optional[int]): Identificador asignado por el almacén.

    """

    model_config = ConfigDict(frozen=True)

    file_name: str
    original_path: str
    operation_type: OperationType
    algorithm: str
    file_size_bytes: int = 0
    status: OperationStatus
    error_message: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    output_path: Optional[str] = None
    id: Optional[int] = None

    @field_validator("file_name", "original_path")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("no puede estar vacío")
        return value

    @field_validator("file_size_bytes")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("el tamaño no puede ser negativo")
        return value

    @property
    def succeeded(self) -> bool:
        return self.status is OperationStatus.SUCCESS

    def to_row(self) -> Dict[str, Any]:
        """Convierte el registro en la fila que consumen los almacenes."""

        return {
            "file_name": self.file_name,
            "original_path": self.original_path,
            "operation_type": self.operation_type.value,
            "algorithm": self.algorithm,
            "timestamp": self.timestamp.isoformat(timespec="microseconds"),
            "file_size": self.file_size_bytes,
            "status": self.status.value,
            "error_message": self.error_message,
            "output_path": self.output_path,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OperationRecord":
        """Reconstruye un registro a partir de una fila del almacén."""

        return cls(
            id=row.get("id"),
            file_name=row["file_name"],
            original_path=row["original_path"],
            operation_type=row["operation_type"],
            algorithm=row["algorithm"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            file_size_bytes=row.get("file_size") or 0,
            status=row["status"],
            error_message=row.get("error_message"),
            output_path=row.get("output_path"),
        )
