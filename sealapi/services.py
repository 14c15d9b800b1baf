# --------------------------------------------------------------
# File: services.py
# Description: Orquestación de las operaciones de sellado y apertura de archivos.
# --------------------------------------------------------------
"""Servicio que encadena clave, cifrador, contenedor, nombre de salida e historial.

Cada invocación de ``seal_file`` u ``open_file`` deja exactamente un registro
en el historial, tanto si termina bien como si falla, y borra la clave antes
de devolver el control.
"""

from __future__ import annotations

import base64
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from sealcore import container
from sealcore.algorithms import AlgorithmLike, get_algorithm
from sealcore.config import Settings, load_settings
from sealcore.crypto_keys import KeyMaterial, decode_key, generate_iv_or_nonce, generate_key
from sealcore.crypto_stream import make_transform
from sealcore.errors import (
    CryptoError,
    InputNotFound,
    InvalidKeyEncoding,
    LedgerWriteError,
    StreamIOError,
)
from sealcore.models import (
    AlgorithmSpec,
    CipherMode,
    OpenResult,
    OperationRecord,
    OperationStatus,
    OperationType,
    SealResult,
)
from sealcore.storage import open_store
from sealapi.ledger import DEFAULT_HISTORY_LIMIT, OperationLedger

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _file_size(path: Path) -> int:
    """Tamaño del archivo o 0 si no se puede determinar."""

    try:
        return path.stat().st_size if path.is_file() else 0
    except OSError:
        return 0


def _validate_source(path: Path) -> None:
    if not path.is_file():
        raise InputNotFound(f"El archivo de entrada no existe: {path}")


def _algorithm_label(algorithm: AlgorithmLike, spec: Optional[AlgorithmSpec]) -> str:
    if spec is not None:
        return spec.display_name
    if isinstance(algorithm, str):
        return algorithm.strip() or "unknown"
    return str(algorithm)


class FileCryptoService:
    """Orquestador de operaciones sobre archivos.

    Attributes:
        ledger (OperationLedger): Historial inyectado donde se registra cada intento.
        chunk_size (int): Tamaño del bloque de lectura en flujo.

    """

    def __init__(self, ledger: OperationLedger, *, chunk_size: Optional[int] = None) -> None:
        self.ledger = ledger
        self.chunk_size = chunk_size or container.DEFAULT_CHUNK_SIZE

    # SECURITY: la clave nunca se registra; el historial solo guarda metadatos.
    def _record(
        self,
        operation: OperationType,
        raw_path: PathLike,
        algorithm: str,
        file_size: int,
        error: Optional[BaseException] = None,
        output_path: Optional[Path] = None,
    ) -> Optional[str]:
        """Guarda el resultado en el historial y devuelve un aviso si falla."""

        text = os.fspath(raw_path)
        record = OperationRecord(
            file_name=Path(text).name or "unknown",
            original_path=text if text.strip() else "unknown",
            operation_type=operation,
            algorithm=algorithm,
            file_size_bytes=file_size,
            status=OperationStatus.FAILED if error else OperationStatus.SUCCESS,
            error_message=str(error) if error else None,
            output_path=str(output_path) if output_path else None,
        )
        try:
            self.ledger.record(record)
        except LedgerWriteError as exc:
            logger.warning("Historial no actualizado: %s", exc)
            return str(exc)
        return None

    def _fail(
        self,
        operation: OperationType,
        raw_path: PathLike,
        algorithm: str,
        file_size: int,
        error: BaseException,
    ) -> None:
        logger.info("%s fallido para %s: %s", operation.value, os.fspath(raw_path), type(error).__name__)
        warning = self._record(operation, raw_path, algorithm, file_size, error=error)
        if warning and isinstance(error, CryptoError):
            error.ledger_warning = warning

    def seal_file(self, path: PathLike, algorithm: AlgorithmLike) -> SealResult:
        """Sella un archivo con una clave nueva.

        Args:
            path (PathLike): Archivo en claro.
            algorithm (AlgorithmLike): Algoritmo elegido por el usuario.

        Returns:
            SealResult: Ruta del contenedor y clave en Base64 que debe conservarse.

        Raises:
            CryptoError: Cualquier fallo de validación, clave o flujo, ya registrado.

        """

        source = Path(path)
        size = _file_size(source)
        spec: Optional[AlgorithmSpec] = None
        key: Optional[KeyMaterial] = None
        try:
            spec = get_algorithm(algorithm)
            _validate_source(source)
            key = generate_key(spec)
            iv_or_nonce = generate_iv_or_nonce(spec)
            transform = make_transform(CipherMode.SEAL, spec, key, iv_or_nonce)
            output = container.seal_file(source, transform, iv_or_nonce, self.chunk_size)
            key_b64 = key.to_base64()
        except CryptoError as exc:
            self._fail(OperationType.SEAL, path, _algorithm_label(algorithm, spec), size, exc)
            raise
        except OSError as exc:
            error = StreamIOError(f"Error de E/S al sellar {source.name}: {exc}")
            self._fail(OperationType.SEAL, path, _algorithm_label(algorithm, spec), size, error)
            raise error from exc
        except Exception as exc:
            self._fail(OperationType.SEAL, path, _algorithm_label(algorithm, spec), size, exc)
            raise
        finally:
            if key is not None:
                key.wipe()

        logger.info("Sellado %s con %s en %s", source.name, spec.display_name, output.name)
        warning = self._record(OperationType.SEAL, path, spec.display_name, size, output_path=output)
        return SealResult(
            output_path=str(output),
            key_b64=key_b64,
            algorithm=spec.display_name,
            iv_or_nonce_b64=base64.b64encode(iv_or_nonce).decode("ascii"),
            warnings=[warning] if warning else [],
        )

    def open_file(self, path: PathLike, key_b64: str, algorithm: AlgorithmLike) -> OpenResult:
        """Abre un contenedor sellado con la clave y el algoritmo indicados.

        Args:
            path (PathLike): Contenedor sellado.
            key_b64 (str): Clave en Base64 devuelta al sellar.
            algorithm (AlgorithmLike): Algoritmo con el que se selló.

        Returns:
            OpenResult: Ruta del archivo descifrado.

        Raises:
            CryptoError: Cualquier fallo de validación, clave o flujo, ya registrado.

        """

        source = Path(path)
        size = _file_size(source)
        spec: Optional[AlgorithmSpec] = None
        key: Optional[KeyMaterial] = None
        try:
            spec = get_algorithm(algorithm)
            _validate_source(source)
            if not key_b64 or not key_b64.strip():
                raise InvalidKeyEncoding("La clave de descifrado no puede estar vacía.")
            key = decode_key(key_b64, spec)
            output = container.open_file(
                source,
                spec,
                lambda header: make_transform(CipherMode.OPEN, spec, key, header),
                self.chunk_size,
            )
        except CryptoError as exc:
            self._fail(OperationType.OPEN, path, _algorithm_label(algorithm, spec), size, exc)
            raise
        except OSError as exc:
            error = StreamIOError(f"Error de E/S al abrir {source.name}: {exc}")
            self._fail(OperationType.OPEN, path, _algorithm_label(algorithm, spec), size, error)
            raise error from exc
        except Exception as exc:
            self._fail(OperationType.OPEN, path, _algorithm_label(algorithm, spec), size, exc)
            raise
        finally:
            if key is not None:
                key.wipe()

        logger.info("Abierto %s con %s en %s", source.name, spec.display_name, output.name)
        warning = self._record(OperationType.OPEN, path, spec.display_name, size, output_path=output)
        return OpenResult(
            output_path=str(output),
            algorithm=spec.display_name,
            warnings=[warning] if warning else [],
        )

    def list_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[OperationRecord]:
        return self.ledger.list_recent(limit)

    def history_count(self) -> int:
        return self.ledger.count()


def build_service(settings: Optional[Settings] = None) -> FileCryptoService:
    """Construye el servicio con el almacén configurado por entorno."""

    settings = settings or load_settings()
    store = open_store(settings.ledger_backend, settings.ledger_path)
    return FileCryptoService(OperationLedger(store), chunk_size=settings.chunk_size)
