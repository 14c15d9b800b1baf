# --------------------------------------------------------------
# File: cli.py
# Description: Interfaz de línea de comandos para sellar, abrir y consultar el historial.
# --------------------------------------------------------------
"""Punto de entrada ``filesealer``."""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from sealcore.algorithms import DEFAULT_ALGORITHM, get_algorithm, list_algorithms
from sealcore.config import configure_logging, load_settings
from sealcore.errors import CryptoError
from sealapi.ledger import DEFAULT_HISTORY_LIMIT, format_history
from sealapi.services import build_service

ALGORITHM_CHOICES = [spec.display_name for spec in list_algorithms()]


def _print_warnings(warnings: List[str]) -> None:
    for warning in warnings:
        print(f"Aviso: {warning}", file=sys.stderr)


def cmd_seal(service, path: str, algorithm: str) -> int:
    try:
        result = service.seal_file(path, algorithm)
    except CryptoError as exc:
        print(f"Error al sellar: {exc.message}", file=sys.stderr)
        if exc.ledger_warning:
            _print_warnings([exc.ledger_warning])
        return 1
    print(f"Archivo sellado: {result.output_path}")
    print(f"Algoritmo: {result.algorithm}")
    print(f"Clave (Base64): {result.key_b64}")
    print("Guarda esta clave para poder abrir el archivo más tarde.")
    _print_warnings(result.warnings)
    return 0


def cmd_open(service, path: str, key: str, algorithm: str) -> int:
    try:
        result = service.open_file(path, key, algorithm)
    except CryptoError as exc:
        print(f"Error al abrir: {exc.message}", file=sys.stderr)
        if exc.ledger_warning:
            _print_warnings([exc.ledger_warning])
        return 1
    print(f"Archivo abierto: {result.output_path}")
    _print_warnings(result.warnings)
    return 0


def cmd_history(service, limit: int, as_json: bool) -> int:
    records = service.list_history(limit)
    if as_json:
        print(json.dumps([record.model_dump(mode="json") for record in records], indent=2, ensure_ascii=False))
    else:
        print(format_history(records), end="")
        print(f"Total de operaciones: {service.history_count()}")
    return 0


def cmd_algorithms() -> int:
    for spec in list_algorithms():
        print(f"{spec.display_name}: clave {spec.key_bytes * 8} bits, IV/nonce {spec.iv_or_nonce_bytes} bytes")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    ap = argparse.ArgumentParser(
        prog="filesealer",
        description="Sella y abre archivos con AES-256, Blowfish-128 o ChaCha20.",
        epilog="El contenedor no guarda el algoritmo: indica el mismo al abrir.",
    )
    ap.add_argument("--ledger", default=settings.ledger_path, help="Ruta del historial")
    ap.add_argument("--backend", choices=["json", "sqlite"], default=settings.ledger_backend, help="Almacén del historial")
    ap.add_argument("--log-level", default=settings.log_level, help="Nivel de logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_seal = sub.add_parser("seal", help="Sellar (cifrar) un archivo")
    ap_seal.add_argument("path", help="Archivo a sellar")
    ap_seal.add_argument("--algorithm", "-a", choices=ALGORITHM_CHOICES, default=get_algorithm(DEFAULT_ALGORITHM).display_name)

    ap_open = sub.add_parser("open", help="Abrir (descifrar) un archivo sellado")
    ap_open.add_argument("path", help="Contenedor sellado")
    ap_open.add_argument("--key", "-k", required=True, help="Clave en Base64 obtenida al sellar")
    ap_open.add_argument("--algorithm", "-a", choices=ALGORITHM_CHOICES, default=get_algorithm(DEFAULT_ALGORITHM).display_name)

    ap_history = sub.add_parser("history", help="Mostrar las operaciones recientes")
    ap_history.add_argument("--limit", "-n", type=int, default=DEFAULT_HISTORY_LIMIT)
    ap_history.add_argument("--json", action="store_true", help="Salida en JSON")

    sub.add_parser("algorithms", help="Listar algoritmos soportados")

    args = ap.parse_args(argv)
    configure_logging(args.log_level)

    if args.cmd == "algorithms":
        return cmd_algorithms()

    service = build_service(
        settings.model_copy(update={"ledger_path": args.ledger, "ledger_backend": args.backend})
    )
    if args.cmd == "seal":
        return cmd_seal(service, args.path, args.algorithm)
    if args.cmd == "open":
        return cmd_open(service, args.path, args.key, args.algorithm)
    return cmd_history(service, args.limit, args.json)


if __name__ == "__main__":
    sys.exit(main())
