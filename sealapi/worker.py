# --------------------------------------------------------------
# File: worker.py
# Description: Ejecución en segundo plano de operaciones con canal de eventos.
# --------------------------------------------------------------
"""Pool fijo de hilos que ejecuta operaciones y publica su progreso en una cola."""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict

from sealcore.algorithms import AlgorithmLike
from sealcore.config import load_settings
from sealcore.errors import CryptoError
from sealcore.models import OpenResult, OperationRecord, SealResult
from sealapi.ledger import DEFAULT_HISTORY_LIMIT
from sealapi.services import FileCryptoService, PathLike

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class OperationEvent(BaseModel):
    """Mensaje que el pool envía al llamante.

    Attributes:
        kind (EventKind): Fase de la operación.
        operation (str): ``SEAL``, ``OPEN`` o ``HISTORY``.
        path (Optional[str]): Archivo afectado.
        message (str): Texto listo para mostrar.
        result (Any): ``SealResult``, ``OpenResult`` o lista de registros.

    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: EventKind
    operation: str
    path: Optional[str] = None
    message: str
    result: Any = None


class OperationWorker:
    """Ejecuta operaciones del servicio sin bloquear al llamante.

    No hay cancelación: una vez enviada, la operación llega a éxito o fallo.
    """

    def __init__(self, service: FileCryptoService, max_workers: Optional[int] = None) -> None:
        self.service = service
        max_workers = max_workers or load_settings().workers
        self.events: "queue.Queue[OperationEvent]" = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sealer")

    def __enter__(self) -> "OperationWorker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def _emit(self, kind: EventKind, operation: str, path: Optional[str], message: str, result: Any = None) -> None:
        self.events.put(OperationEvent(kind=kind, operation=operation, path=path, message=message, result=result))

    def _run(self, operation: str, path: Optional[str], started: str, task: Callable[[], Any], done: Callable[[Any], str]):
        self._emit(EventKind.STARTED, operation, path, started)
        try:
            result = task()
        except CryptoError as exc:
            self._emit(EventKind.FAILED, operation, path, exc.message)
            raise
        except Exception as exc:
            logger.exception("Fallo inesperado en %s", operation)
            self._emit(EventKind.FAILED, operation, path, f"Error inesperado: {exc}")
            raise
        self._emit(EventKind.COMPLETED, operation, path, done(result), result)
        return result

    def submit_seal(self, path: PathLike, algorithm: AlgorithmLike) -> "Future[SealResult]":
        return self._executor.submit(
            self._run,
            "SEAL",
            str(path),
            "Sellando archivo...",
            lambda: self.service.seal_file(path, algorithm),
            lambda result: (
                f"Archivo sellado correctamente.\nGuardado en: {result.output_path}\n"
                "Guarda esta clave para poder abrirlo más tarde."
            ),
        )

    def submit_open(self, path: PathLike, key_b64: str, algorithm: AlgorithmLike) -> "Future[OpenResult]":
        return self._executor.submit(
            self._run,
            "OPEN",
            str(path),
            "Abriendo archivo...",
            lambda: self.service.open_file(path, key_b64, algorithm),
            lambda result: f"Archivo abierto correctamente.\nGuardado en: {result.output_path}",
        )

    def submit_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> "Future[List[OperationRecord]]":
        return self._executor.submit(
            self._run,
            "HISTORY",
            None,
            "Cargando historial...",
            lambda: self.service.list_history(limit),
            lambda records: f"{len(records)} operaciones cargadas.",
        )

    def drain_events(self) -> List[OperationEvent]:
        """Extrae sin bloquear todos los eventos pendientes."""

        drained: List[OperationEvent] = []
        while True:
            try:
                drained.append(self.events.get_nowait())
            except queue.Empty:
                return drained

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
