# --------------------------------------------------------------
# File: crypto_keys.py
# Description: Generación de claves e IV/nonces y manejo de material sensible.
# --------------------------------------------------------------
"""Material de clave efímero, codificación Base64 y borrado seguro."""

from __future__ import annotations

import base64
import binascii
import secrets
from typing import Optional, Union

from sealcore.algorithms import AlgorithmLike, get_algorithm
from sealcore.errors import InvalidKeyEncoding, InvalidKeySize


def wipe(buffer: Optional[Union[bytearray, memoryview]]) -> None:
    """Sobrescribe con ceros un búfer mutable."""

    if buffer is None:
        return
    for index in range(len(buffer)):
        buffer[index] = 0


class KeyMaterial:
    """Clave simétrica mutable propiedad de una única operación.

    El contenido vive en un ``bytearray`` para poder ponerlo a cero al
    terminar; usado como gestor de contexto se borra al salir del bloque.
    Un ``bytearray`` recibido se adopta sin copiarlo. Los ``bytes`` inmutables
    que producen ``secrets`` o ``base64`` antes de llegar aquí no se pueden
    borrar; se descartan de inmediato y quedan a merced del recolector.

    Attributes:
        algorithm (AlgorithmSpec): Algoritmo al que pertenece la clave.

    """

    __slots__ = ("algorithm", "_buffer")

    def __init__(self, data: Union[bytes, bytearray], algorithm: AlgorithmLike) -> None:
        self.algorithm = get_algorithm(algorithm)
        self._buffer = data if isinstance(data, bytearray) else bytearray(data)

    def __len__(self) -> int:
        return len(self._buffer)

    def __enter__(self) -> "KeyMaterial":
        return self

    def __exit__(self, *exc_info) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return f"KeyMaterial(algorithm={self.algorithm.display_name!r}, length={len(self)})"

    @property
    def buffer(self) -> bytearray:
        return self._buffer

    def to_base64(self) -> str:
        return encode_key(self._buffer)

    def wipe(self) -> None:
        wipe(self._buffer)

    def is_wiped(self) -> bool:
        return not any(self._buffer)


def generate_key(algorithm: AlgorithmLike) -> KeyMaterial:
    """Genera una clave aleatoria del tamaño exigido por el algoritmo.

    Args:
        algorithm (AlgorithmLike): Algoritmo de destino.

    Returns:
        KeyMaterial: Clave nueva; el llamante es responsable de borrarla.

    """

    spec = get_algorithm(algorithm)
    return KeyMaterial(secrets.token_bytes(spec.key_bytes), spec)


def generate_iv_or_nonce(algorithm: AlgorithmLike) -> bytes:
    """Genera el IV (CBC) o nonce (ChaCha20) que encabeza el contenedor."""

    spec = get_algorithm(algorithm)
    return secrets.token_bytes(spec.iv_or_nonce_bytes)


def encode_key(key: Union[bytes, bytearray]) -> str:
    """Codifica la clave en Base64 estándar con relleno."""

    return base64.b64encode(bytes(key)).decode("ascii")


def decode_key(value: str, algorithm: AlgorithmLike) -> KeyMaterial:
    """Decodifica una clave Base64 y comprueba su longitud.

    Args:
        value (str): Clave en Base64 introducida por el usuario.
        algorithm (AlgorithmLike): Algoritmo con el que se selló el archivo.

    Returns:
        KeyMaterial: Clave lista para construir la transformación.

    Raises:
        InvalidKeyEncoding: Si la clave está vacía o no es Base64 válido.
        InvalidKeySize: Si la longitud decodificada no coincide.

    """

    spec = get_algorithm(algorithm)
    text = (value or "").strip()
    if not text:
        raise InvalidKeyEncoding("La clave de descifrado no puede estar vacía.")
    try:
        raw = bytearray(base64.b64decode(text, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyEncoding("La clave no es Base64 válido.") from exc

    if len(raw) != spec.key_bytes:
        actual = len(raw)
        wipe(raw)
        raise InvalidKeySize(spec.key_bytes, actual)

    return KeyMaterial(raw, spec)
