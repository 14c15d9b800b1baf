# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de errores del motor de sellado y del registro de operaciones.
# --------------------------------------------------------------
"""Excepciones que distinguen errores de entrada, de flujo y de registro."""

from __future__ import annotations

from typing import Optional


class CryptoError(Exception):
    """Error base de una operación de sellado o apertura.

    Attributes:
        message (str): Texto legible que se mostrará al usuario.
        ledger_warning (Optional[str]): Aviso secundario si el registro de la
            operación no pudo guardarse.

    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.ledger_warning: Optional[str] = None


class InputNotFound(CryptoError):
    """El archivo de entrada no existe o no es un archivo regular."""


class InvalidKeyEncoding(CryptoError):
    """La clave suministrada está vacía o no es Base64 válido."""


class InvalidKeySize(CryptoError):
    """La clave decodificada no tiene la longitud que exige el algoritmo."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Tamaño de clave inválido: se esperaban {expected} bytes y se recibieron {actual}."
        )
        self.expected = expected
        self.actual = actual


class TruncatedContainer(CryptoError):
    """El contenedor es más corto que la cabecera IV/nonce."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Contenedor truncado: la cabecera requiere {expected} bytes y solo hay {actual}."
        )
        self.expected = expected
        self.actual = actual


class CorruptContainer(CryptoError):
    """El cuerpo cifrado no se puede descifrar (relleno o longitud incorrectos)."""


class StreamIOError(CryptoError):
    """Fallo de entrada/salida mientras se transformaba el flujo."""


class UnsupportedAlgorithm(CryptoError):
    """El identificador de algoritmo no pertenece al conjunto soportado."""


class LedgerError(Exception):
    """Error base del registro de operaciones."""


class LedgerWriteError(LedgerError):
    """No se pudo persistir un registro de operación."""
