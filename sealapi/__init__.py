# --------------------------------------------------------------
# File: __init__.py
# Description: Servicios de alto nivel del motor de sellado de archivos.
# --------------------------------------------------------------
"""Inicializa el paquete `sealapi`: historial, orquestador, pool y CLI."""

__all__ = [
    "cli",
    "ledger",
    "services",
    "worker",
]
