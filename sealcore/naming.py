# --------------------------------------------------------------
# File: naming.py
# Description: Resolución de rutas de salida sin colisiones para sellar y abrir.
# --------------------------------------------------------------
"""Convención de nombres ``_Sealed``/``_Opened`` y bucle de colisiones ``(n)``."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Callable, Tuple, Union

from sealcore.errors import StreamIOError

SEALED_MARKER = "_Sealed"
OPENED_MARKER = "_Opened"

_COUNTER = re.compile(r"\(\d+\)$")
MAX_CLAIM_ATTEMPTS = 100

PathLike = Union[str, os.PathLike]


def split_name(name: str) -> Tuple[str, str]:
    """Separa un nombre de archivo en raíz y extensión (desde el último punto).

    Args:
        name (str): Nombre sin directorio, p. ej. ``report.pdf``.

    Returns:
        Tuple[str, str]: ``("report", ".pdf")``; la extensión es ``""`` si no
        hay punto.

    """

    if "." not in name:
        return name, ""
    index = name.rindex(".")
    return name[:index], name[index:]


def _first_free(directory: Path, stem: str, extension: str) -> Path:
    """Devuelve ``stem+ext`` o la primera variante ``stem(n)+ext`` libre."""

    candidate = directory / f"{stem}{extension}"
    counter = 1
    # lexists: un enlace simbólico roto también ocupa el nombre.
    while os.path.lexists(candidate):
        candidate = directory / f"{stem}({counter}){extension}"
        counter += 1
    return candidate


def sealed_output_path(source: PathLike) -> Path:
    """Ruta de salida para sellar ``D/name.ext`` → ``D/name_Sealed.ext``.

    Solo comprueba existencia en disco; no crea nada.
    """

    path = Path(source)
    stem, extension = split_name(path.name)
    return _first_free(path.parent, stem + SEALED_MARKER, extension)


def opened_output_path(source: PathLike) -> Path:
    """Ruta de salida para abrir un contenedor.

    Si el nombre contiene ``_Sealed`` se sustituye por ``_Opened`` y se descarta
    el contador ``(n)`` que añadió el sellado (``report_Sealed(1).pdf`` →
    ``report_Opened.pdf``); si no, se añade ``_Opened`` antes de la extensión.
    En ambos casos se aplica el mismo bucle de colisiones.
    """

    path = Path(source)
    stem, extension = split_name(path.name)
    index = stem.rfind(SEALED_MARKER)
    if index != -1:
        tail = stem[index + len(SEALED_MARKER):]
        if _COUNTER.fullmatch(tail):
            tail = ""
        return _first_free(path.parent, stem[:index] + OPENED_MARKER + tail, extension)
    if SEALED_MARKER in extension:
        return _first_free(path.parent, stem, extension.replace(SEALED_MARKER, OPENED_MARKER))
    return _first_free(path.parent, stem + OPENED_MARKER, extension)


def original_name(source: PathLike) -> str:
    """Recupera el nombre previo al sellado (``report_Sealed(2).pdf`` → ``report.pdf``)."""

    name = Path(source).name
    stem, extension = split_name(name)
    for marker in (SEALED_MARKER, OPENED_MARKER):
        index = stem.rfind(marker)
        if index == -1:
            continue
        tail = stem[index + len(marker):]
        if tail == "" or _COUNTER.fullmatch(tail):
            return stem[:index] + extension
    return name


def claim_output_path(resolver: Callable[[PathLike], Path], source: PathLike) -> Path:
    """Reserva de forma exclusiva la ruta que propone ``resolver``.

    Crea un archivo vacío con ``O_CREAT | O_EXCL``; si otro proceso ocupó el
    nombre entre la comprobación y la creación, se vuelve a resolver.

    Args:
        resolver (Callable[[PathLike], Path]): ``sealed_output_path`` u
            ``opened_output_path``.
        source (PathLike): Archivo de entrada.

    Returns:
        Path: Ruta reservada, que el llamante debe reemplazar con el contenido.

    Raises:
        StreamIOError: Si tras ``MAX_CLAIM_ATTEMPTS`` intentos no se pudo
            reservar ningún nombre.

    """

    for _ in range(MAX_CLAIM_ATTEMPTS):
        candidate = resolver(source)
        try:
            fd = os.open(candidate, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            continue
        os.close(fd)
        return candidate
    raise StreamIOError(
        f"No se pudo reservar una ruta de salida para {Path(source).name} "
        f"tras {MAX_CLAIM_ATTEMPTS} intentos."
    )
