# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública de las primitivas del motor de sellado de archivos.
# --------------------------------------------------------------
"""Inicializa el paquete `sealcore` y documenta sus módulos principales."""

__all__ = [
    "algorithms",
    "config",
    "container",
    "crypto_keys",
    "crypto_stream",
    "errors",
    "models",
    "naming",
    "storage",
]
