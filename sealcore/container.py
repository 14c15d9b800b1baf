# --------------------------------------------------------------
# File: container.py
# Description: Códec del contenedor sellado [IV/nonce][texto cifrado] en flujo.
# --------------------------------------------------------------
"""Lectura y escritura en flujo del contenedor y escritura segura en disco.

El contenedor no lleva número mágico, identificador de algoritmo ni longitud:
el algoritmo y la clave se suministran al abrir.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Callable, Union

from sealcore.algorithms import AlgorithmLike, get_algorithm
from sealcore.crypto_stream import StreamTransform
from sealcore.errors import StreamIOError, TruncatedContainer
from sealcore.naming import claim_output_path, opened_output_path, sealed_output_path

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8 * 1024
# Prefijo corto: el nombre del temporal no depende del de la entrada.
TEMP_PREFIX = ".filesealer-"

TransformFactory = Callable[[bytes], StreamTransform]
StreamWork = Callable[[BinaryIO, BinaryIO], int]


def _pump(src: BinaryIO, dst: BinaryIO, transform: StreamTransform, chunk_size: int) -> int:
    """Pasa ``src`` por la transformación con un único búfer de ``chunk_size``."""

    written = 0
    try:
        while True:
            chunk = src.read(chunk_size)
            if not chunk:
                break
            out = transform.update(chunk)
            if out:
                dst.write(out)
                written += len(out)
        tail = transform.finalize()
        if tail:
            dst.write(tail)
            written += len(tail)
    except OSError as exc:
        raise StreamIOError(f"Error de E/S durante la transformación: {exc}") from exc
    return written


def read_header(src: BinaryIO, algorithm: AlgorithmLike) -> bytes:
    """Lee exactamente la cabecera IV/nonce del contenedor.

    Raises:
        TruncatedContainer: Si hay menos bytes que la cabecera.
        StreamIOError: Si la lectura falla.

    """

    spec = get_algorithm(algorithm)
    header = b""
    try:
        while len(header) < spec.iv_or_nonce_bytes:
            piece = src.read(spec.iv_or_nonce_bytes - len(header))
            if not piece:
                break
            header += piece
    except OSError as exc:
        raise StreamIOError(f"No se pudo leer la cabecera: {exc}") from exc
    if len(header) < spec.iv_or_nonce_bytes:
        raise TruncatedContainer(spec.iv_or_nonce_bytes, len(header))
    return header


def seal_stream(
    src: BinaryIO,
    dst: BinaryIO,
    transform: StreamTransform,
    iv_or_nonce: bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Escribe la cabecera y el texto cifrado de ``src`` en ``dst``.

    Args:
        src (BinaryIO): Flujo de texto en claro.
        dst (BinaryIO): Flujo de salida del contenedor.
        transform (StreamTransform): Transformación en modo ``SEAL``.
        iv_or_nonce (bytes): Cabecera con la que se creó la transformación.
        chunk_size (int): Tamaño del bloque de lectura.

    Returns:
        int: Bytes escritos, cabecera incluida.

    """

    try:
        dst.write(iv_or_nonce)
    except OSError as exc:
        raise StreamIOError(f"No se pudo escribir la cabecera: {exc}") from exc
    return len(iv_or_nonce) + _pump(src, dst, transform, chunk_size)


def open_stream(
    src: BinaryIO,
    dst: BinaryIO,
    algorithm: AlgorithmLike,
    transform_factory: TransformFactory,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Lee la cabecera, construye la transformación y descifra el resto.

    Args:
        src (BinaryIO): Flujo del contenedor.
        dst (BinaryIO): Flujo de texto en claro.
        algorithm (AlgorithmLike): Algoritmo indicado por el llamante.
        transform_factory (TransformFactory): Recibe la cabecera y devuelve una
            transformación en modo ``OPEN``.
        chunk_size (int): Tamaño del bloque de lectura.

    Returns:
        int: Bytes de texto en claro escritos.

    """

    header = read_header(src, algorithm)
    transform = transform_factory(header)
    return _pump(src, dst, transform, chunk_size)


def _stream_to_output(source: Path, resolver: Callable, work: StreamWork) -> Path:
    """Ejecuta ``work`` hacia un temporal y lo mueve a la ruta reservada.

    Cualquier fallo elimina el temporal, de modo que nunca queda un archivo
    parcial junto al original.
    """

    directory = source.parent
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".part", dir=directory)
    except OSError as exc:
        raise StreamIOError(f"No se pudo crear el archivo temporal: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        try:
            with os.fdopen(fd, "wb") as dst, open(source, "rb") as src:
                work(src, dst)
        except OSError as exc:
            raise StreamIOError(f"Error de E/S procesando {source.name}: {exc}") from exc
        try:
            destination = claim_output_path(resolver, source)
        except OSError as exc:
            raise StreamIOError(f"No se pudo reservar la ruta de salida: {exc}") from exc
        try:
            os.replace(tmp_path, destination)
        except OSError as exc:
            destination.unlink(missing_ok=True)
            raise StreamIOError(f"No se pudo escribir la salida: {exc}") from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return destination


def seal_file(
    source: Union[str, os.PathLike],
    transform: StreamTransform,
    iv_or_nonce: bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Path:
    """Sella ``source`` junto a él con el nombre ``*_Sealed*``."""

    path = Path(source)
    destination = _stream_to_output(
        path,
        sealed_output_path,
        lambda src, dst: seal_stream(src, dst, transform, iv_or_nonce, chunk_size),
    )
    logger.debug("Contenedor escrito en %s", destination)
    return destination


def open_file(
    source: Union[str, os.PathLike],
    algorithm: AlgorithmLike,
    transform_factory: TransformFactory,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Path:
    """Abre el contenedor ``source`` junto a él con el nombre ``*_Opened*``."""

    path = Path(source)
    destination = _stream_to_output(
        path,
        opened_output_path,
        lambda src, dst: open_stream(src, dst, algorithm, transform_factory, chunk_size),
    )
    logger.debug("Archivo descifrado escrito en %s", destination)
    return destination
