# --------------------------------------------------------------
# File: algorithms.py
# Description: Tabla cerrada de algoritmos soportados y sus parámetros.
# --------------------------------------------------------------
"""Búsqueda de descriptores de algoritmo por identificador o nombre."""

from __future__ import annotations

from typing import Dict, List, Union

from sealcore.errors import UnsupportedAlgorithm
from sealcore.models import AlgorithmId, AlgorithmSpec

ALGORITHMS: Dict[AlgorithmId, AlgorithmSpec] = {
    AlgorithmId.AES256: AlgorithmSpec(
        id=AlgorithmId.AES256,
        key_bytes=32,
        iv_or_nonce_bytes=16,
        display_name="AES-256",
        block_bits=128,
    ),
    AlgorithmId.BLOWFISH128: AlgorithmSpec(
        id=AlgorithmId.BLOWFISH128,
        key_bytes=16,
        iv_or_nonce_bytes=8,
        display_name="BLOWFISH-128",
        block_bits=64,
    ),
    AlgorithmId.CHACHA20: AlgorithmSpec(
        id=AlgorithmId.CHACHA20,
        key_bytes=32,
        iv_or_nonce_bytes=12,
        display_name="CHACHA20",
    ),
}

DEFAULT_ALGORITHM = AlgorithmId.AES256

AlgorithmLike = Union[AlgorithmId, AlgorithmSpec, str]


def list_algorithms() -> List[AlgorithmSpec]:
    """Devuelve los algoritmos soportados en orden de declaración."""

    return list(ALGORITHMS.values())


def get_algorithm(value: AlgorithmLike) -> AlgorithmSpec:
    """Resuelve un descriptor a partir de su id, nombre del enum o nombre legible.

    Args:
        value (AlgorithmLike): ``AlgorithmId``, ``AlgorithmSpec`` o texto como
            ``"AES256"`` o ``"AES-256"`` (sin distinguir mayúsculas).

    Returns:
        AlgorithmSpec: Descriptor inmutable del algoritmo.

    Raises:
        UnsupportedAlgorithm: Si el valor no corresponde a ningún algoritmo.

    """

    if isinstance(value, AlgorithmSpec):
        return ALGORITHMS[value.id]
    if isinstance(value, AlgorithmId):
        return ALGORITHMS[value]
    if isinstance(value, str):
        wanted = value.strip().upper()
        for spec in ALGORITHMS.values():
            if wanted in (spec.id.value, spec.display_name):
                return spec
    raise UnsupportedAlgorithm(f"Algoritmo no soportado: {value!r}")
