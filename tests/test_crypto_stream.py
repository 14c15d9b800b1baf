# --------------------------------------------------------------
# File: test_crypto_stream.py
# Description: Pruebas de las transformaciones en flujo de cada algoritmo.
# --------------------------------------------------------------

import os

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

from sealcore.crypto_keys import generate_iv_or_nonce, generate_key
from sealcore.crypto_stream import make_transform
from sealcore.errors import CorruptContainer, InvalidKeySize, TruncatedContainer
from sealcore.models import AlgorithmId, CipherMode


def _run(transform, data: bytes, piece: int = 7) -> bytes:
    out = b""
    for index in range(0, len(data), piece):
        out += transform.update(data[index:index + piece])
    return out + transform.finalize()


@pytest.mark.parametrize("alg", list(AlgorithmId))
@pytest.mark.parametrize("size", [0, 1, 15, 16, 17, 1000])
def test_incremental_roundtrip(alg, size):
    """Cifra y descifra en fragmentos irregulares y recupera el texto original.

    Returns:
        None: Las aserciones comparan claro y descifrado.
    """
    key = generate_key(alg)
    iv = generate_iv_or_nonce(alg)
    data = os.urandom(size)
    sealed = _run(make_transform(CipherMode.SEAL, alg, key, iv), data)
    opened = _run(make_transform(CipherMode.OPEN, alg, key, iv), sealed)
    assert opened == data


@pytest.mark.parametrize("alg, block", [(AlgorithmId.AES256, 16), (AlgorithmId.BLOWFISH128, 8)])
def test_cbc_output_is_padded_to_block(alg, block):
    key = generate_key(alg)
    iv = generate_iv_or_nonce(alg)
    sealed = _run(make_transform(CipherMode.SEAL, alg, key, iv), b"x" * block)
    assert len(sealed) == 2 * block


def test_chacha20_keeps_length_and_starts_at_counter_one():
    """ChaCha20 no añade relleno y usa el contador de bloque inicial 1.

    Returns:
        None: Las aserciones comparan con la primitiva configurada a mano.
    """
    key = generate_key(AlgorithmId.CHACHA20)
    nonce = generate_iv_or_nonce(AlgorithmId.CHACHA20)
    data = os.urandom(100)
    sealed = _run(make_transform(CipherMode.SEAL, AlgorithmId.CHACHA20, key, nonce), data)
    assert len(sealed) == len(data)

    reference = Cipher(algorithms.ChaCha20(bytes(key.buffer), b"\x01\x00\x00\x00" + nonce), None).encryptor()
    assert sealed == reference.update(data) + reference.finalize()


def test_wrong_key_size_is_rejected():
    iv = generate_iv_or_nonce(AlgorithmId.AES256)
    with pytest.raises(InvalidKeySize) as info:
        make_transform(CipherMode.OPEN, AlgorithmId.AES256, b"k" * 31, iv)
    assert (info.value.expected, info.value.actual) == (32, 31)


def test_short_header_on_open_is_truncated_container():
    key = generate_key(AlgorithmId.BLOWFISH128)
    with pytest.raises(TruncatedContainer):
        make_transform(CipherMode.OPEN, AlgorithmId.BLOWFISH128, key, b"1234")


def test_bad_iv_on_seal_is_programming_error():
    key = generate_key(AlgorithmId.AES256)
    with pytest.raises(ValueError):
        make_transform(CipherMode.SEAL, AlgorithmId.AES256, key, b"short")


def test_body_not_multiple_of_block_is_corrupt():
    """Un cuerpo CBC recortado no puede descifrarse y se informa como corrupto.

    Returns:
        None: Se espera ``CorruptContainer`` al finalizar.
    """
    iv = generate_iv_or_nonce(AlgorithmId.AES256)
    key = generate_key(AlgorithmId.AES256)
    sealed = _run(make_transform(CipherMode.SEAL, AlgorithmId.AES256, key, iv), b"A" * 64)
    transform = make_transform(CipherMode.OPEN, AlgorithmId.AES256, key, iv)
    with pytest.raises(CorruptContainer):
        _run(transform, sealed[:-3])


def test_finalized_transform_rejects_more_input():
    key = generate_key(AlgorithmId.CHACHA20)
    transform = make_transform(CipherMode.SEAL, AlgorithmId.CHACHA20, key, generate_iv_or_nonce(AlgorithmId.CHACHA20))
    transform.finalize()
    assert transform.finalized
    with pytest.raises(RuntimeError):
        transform.update(b"more")
