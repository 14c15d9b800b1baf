# --------------------------------------------------------------
# File: ledger.py
# Description: Registro de solo inserción de los intentos de sellado y apertura.
# --------------------------------------------------------------
"""Contrato del historial de operaciones sobre un almacén inyectado."""

from __future__ import annotations

import logging
from typing import List

from sealcore.errors import LedgerWriteError
from sealcore.models import OperationRecord
from sealcore.storage import LedgerStore

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
RULE = "=" * 60
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class OperationLedger:
    """Historial de operaciones ordenado de más reciente a más antiguo.

    Attributes:
        store (LedgerStore): Almacén persistente que recibe las inserciones.

    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def record(self, record: OperationRecord) -> int:
        """Añade un registro al historial.

        Args:
            record (OperationRecord): Registro ya validado por el modelo.

        Returns:
            int: Identificador asignado por el almacén.

        Raises:
            LedgerWriteError: Si el almacén no acepta la inserción.

        """

        try:
            return self.store.insert(record.to_row())
        except Exception as exc:
            raise LedgerWriteError(f"No se pudo guardar el registro de {record.file_name}: {exc}") from exc

    def list_recent(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[OperationRecord]:
        """Devuelve como máximo ``limit`` registros; ``limit <= 0`` no devuelve ninguno."""

        if limit <= 0:
            return []
        return [OperationRecord.from_row(row) for row in self.store.query(limit)]

    def all(self) -> List[OperationRecord]:
        return [OperationRecord.from_row(row) for row in self.store.query(None)]

    def count(self) -> int:
        return self.store.count()

    def clear(self) -> None:
        self.store.clear()
        logger.info("Historial de operaciones vaciado")

    def check_access(self) -> bool:
        """Comprueba que el almacén sea accesible sin modificarlo."""

        return self.store.ping()


def format_history(records: List[OperationRecord]) -> str:
    """Genera el resumen en texto del historial para mostrarlo al usuario."""

    if not records:
        return "Todavía no hay operaciones registradas."

    lines: List[str] = []
    for record in records:
        lines.append(RULE)
        lines.append(f"Operación: {record.operation_type.value}")
        lines.append(f"Algoritmo: {record.algorithm}")
        lines.append(f"Archivo de entrada: {record.original_path}")
        if record.output_path:
            lines.append(f"Archivo de salida: {record.output_path}")
        lines.append(f"Fecha: {record.timestamp.strftime(DATE_FORMAT)}")
        lines.append(f"Estado: {record.status.value}")
        if not record.succeeded and record.error_message:
            lines.append(f"Error: {record.error_message}")
        lines.append("")
    return "\n".join(lines) + "\n"
