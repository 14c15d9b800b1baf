# --------------------------------------------------------------
# File: crypto_stream.py
# Description: Parametrización de cifradores en flujo para AES, Blowfish y ChaCha20.
# --------------------------------------------------------------
"""Construcción de transformaciones incrementales ligadas a una clave e IV/nonce."""

from __future__ import annotations

from typing import Optional, Union

from cryptography.hazmat.decrepit.ciphers.algorithms import Blowfish
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from sealcore.algorithms import AlgorithmLike, get_algorithm
from sealcore.crypto_keys import KeyMaterial
from sealcore.errors import CorruptContainer, InvalidKeySize, TruncatedContainer
from sealcore.models import AlgorithmId, AlgorithmSpec, CipherMode

# Contador de bloque inicial de ChaCha20, compatible con los contenedores ya emitidos.
CHACHA20_INITIAL_COUNTER = 1

KeyLike = Union[KeyMaterial, bytes, bytearray]


class StreamTransform:
    """Transformación incremental con interfaz ``update``/``finalize``.

    En los modos CBC añade el relleno PKCS7 al sellar y lo retira al abrir;
    en ChaCha20 la salida tiene la misma longitud que la entrada.

    Attributes:
        mode (CipherMode): Dirección de la transformación.
        algorithm (AlgorithmSpec): Algoritmo configurado.

    """

    def __init__(self, mode: CipherMode, algorithm: AlgorithmSpec, context, pad_context=None) -> None:
        self.mode = mode
        self.algorithm = algorithm
        self._context = context
        self._pad = pad_context
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def update(self, data: bytes) -> bytes:
        """Transforma un fragmento y devuelve la salida disponible."""

        if self._finalized:
            raise RuntimeError("La transformación ya fue finalizada.")
        if self._pad is None:
            return self._context.update(data)
        if self.mode is CipherMode.SEAL:
            return self._context.update(self._pad.update(data))
        return self._pad.update(self._context.update(data))

    def finalize(self) -> bytes:
        """Vacía el último bloque (relleno incluido) y cierra la transformación.

        Raises:
            CorruptContainer: Si al abrir el cuerpo no es múltiplo del bloque o
                el relleno es inválido, lo habitual con una clave equivocada.

        """

        if self._finalized:
            raise RuntimeError("La transformación ya fue finalizada.")
        self._finalized = True
        if self._pad is None:
            return self._context.finalize()
        if self.mode is CipherMode.SEAL:
            tail = self._pad.finalize()
            return self._context.update(tail) + self._context.finalize()
        try:
            tail = self._context.finalize()
            return self._pad.update(tail) + self._pad.finalize()
        except ValueError as exc:
            raise CorruptContainer(
                "No se pudo descifrar el contenido: clave, algoritmo o archivo incorrectos."
            ) from exc


def _key_bytes(key: KeyLike) -> bytes:
    if isinstance(key, KeyMaterial):
        return key.buffer
    return key


def _cipher_algorithm(spec: AlgorithmSpec, key, iv_or_nonce: bytes):
    if spec.id is AlgorithmId.AES256:
        return algorithms.AES(key), modes.CBC(iv_or_nonce)
    if spec.id is AlgorithmId.BLOWFISH128:
        return Blowfish(key), modes.CBC(iv_or_nonce)
    # cryptography espera 16 bytes: contador little-endian de 32 bits + nonce de 96 bits.
    full_nonce = CHACHA20_INITIAL_COUNTER.to_bytes(4, "little") + bytes(iv_or_nonce)
    return algorithms.ChaCha20(key, full_nonce), None


def make_transform(
    mode: CipherMode,
    algorithm: AlgorithmLike,
    key: KeyLike,
    iv_or_nonce: bytes,
) -> StreamTransform:
    """Crea una transformación lista para usar.

    Args:
        mode (CipherMode): ``SEAL`` para cifrar, ``OPEN`` para descifrar.
        algorithm (AlgorithmLike): Algoritmo del contenedor.
        key (KeyLike): Clave del tamaño exacto del algoritmo.
        iv_or_nonce (bytes): Cabecera del contenedor.

    Returns:
        StreamTransform: Transformación incremental.

    Raises:
        UnsupportedAlgorithm: Si el algoritmo no está soportado.
        InvalidKeySize: Si la clave no tiene la longitud esperada.
        TruncatedContainer: Si al abrir la cabecera es demasiado corta.
        ValueError: Si al sellar se pasa un IV/nonce de longitud incorrecta.

    """

    spec = get_algorithm(algorithm)
    raw_key = _key_bytes(key)
    if len(raw_key) != spec.key_bytes:
        raise InvalidKeySize(spec.key_bytes, len(raw_key))
    if len(iv_or_nonce) != spec.iv_or_nonce_bytes:
        if mode is CipherMode.OPEN:
            raise TruncatedContainer(spec.iv_or_nonce_bytes, len(iv_or_nonce))
        raise ValueError(
            f"IV/nonce de {len(iv_or_nonce)} bytes; {spec.display_name} requiere {spec.iv_or_nonce_bytes}."
        )

    cipher_algorithm, cipher_mode = _cipher_algorithm(spec, raw_key, iv_or_nonce)
    cipher = Cipher(cipher_algorithm, cipher_mode)
    context = cipher.encryptor() if mode is CipherMode.SEAL else cipher.decryptor()

    pad_context: Optional[object] = None
    if spec.block_bits:
        pkcs7 = padding.PKCS7(spec.block_bits)
        pad_context = pkcs7.padder() if mode is CipherMode.SEAL else pkcs7.unpadder()
    return StreamTransform(mode, spec, context, pad_context)
