# --------------------------------------------------------------
# File: storage.py
# Description: Almacenes persistentes del historial de operaciones (JSON y SQLite).
# --------------------------------------------------------------
"""Utilidades de entrada/salida para el almacén del historial.

Ambos almacenes cumplen el mismo contrato: solo inserciones, lecturas
ordenadas por fecha descendente (desempate por id) con límite opcional.
"""

from __future__ import annotations

import json
import os
import sqlite3
import threading
from contextlib import closing
from typing import Any, Dict, List, Optional, Protocol

__all__ = [
    "JsonLedgerStore",
    "LedgerStore",
    "SqliteLedgerStore",
    "load_db",
    "open_store",
    "save_db",
]

Row = Dict[str, Any]


class LedgerStore(Protocol):
    """Contrato mínimo que el registro de operaciones consume."""

    def insert(self, row: Row) -> int: ...

    def query(self, limit: Optional[int] = None) -> List[Row]: ...

    def count(self) -> int: ...

    def clear(self) -> None: ...

    def ping(self) -> bool: ...


def _ensure_parent_dir(path: str) -> None:
    """Garantiza que exista el directorio padre del archivo de destino."""

    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)


def load_db(path: str) -> Dict[str, Any]:
    """Carga un archivo JSON y devuelve un diccionario seguro para uso interno.

    Args:
        path (str): Ruta del archivo JSON del historial.

    Returns:
        Dict[str, Any]: Estructura cargada o la base vacía si no es accesible.

    """

    try:
        with open(path, "r", encoding="utf-8") as handler:
            db = json.load(handler)
    except (FileNotFoundError, json.JSONDecodeError):
        return {"operations": [], "next_id": 1}
    if not isinstance(db, dict):
        return {"operations": [], "next_id": 1}
    db.setdefault("operations", [])
    db.setdefault("next_id", len(db["operations"]) + 1)
    return db


def save_db(db: Dict[str, Any], path: str) -> None:
    """Guarda la base de datos JSON aplicando escritura atómica."""

    _ensure_parent_dir(path)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as handler:
        json.dump(db, handler, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def _newest_first(rows: List[Row]) -> List[Row]:
    return sorted(rows, key=lambda row: (row["timestamp"], row["id"]), reverse=True)


class JsonLedgerStore:
    """Almacén en un documento JSON reescrito atómicamente en cada inserción."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def insert(self, row: Row) -> int:
        with self._lock:
            db = load_db(self.path)
            row_id = int(db["next_id"])
            db["operations"].append({**row, "id": row_id})
            db["next_id"] = row_id + 1
            save_db(db, self.path)
            return row_id

    def query(self, limit: Optional[int] = None) -> List[Row]:
        with self._lock:
            rows = _newest_first(load_db(self.path)["operations"])
        return rows if limit is None else rows[:limit]

    def count(self) -> int:
        with self._lock:
            return len(load_db(self.path)["operations"])

    def clear(self) -> None:
        with self._lock:
            db = load_db(self.path)
            db["operations"] = []
            save_db(db, self.path)

    def ping(self) -> bool:
        # Un archivo inexistente cuenta como accesible si su directorio lo es.
        try:
            _ensure_parent_dir(self.path)
        except OSError:
            return False
        return os.access(os.path.dirname(self.path) or ".", os.W_OK)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS operation_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    file_name TEXT NOT NULL,
    original_path TEXT NOT NULL,
    operation_type TEXT NOT NULL CHECK (operation_type IN ('SEAL', 'OPEN')),
    algorithm TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    file_size INTEGER,
    status TEXT NOT NULL DEFAULT 'SUCCESS' CHECK (status IN ('SUCCESS', 'FAILED')),
    error_message TEXT,
    output_path TEXT
);
CREATE INDEX IF NOT EXISTS idx_timestamp ON operation_history (timestamp);
"""

_COLUMNS = (
    "file_name",
    "original_path",
    "operation_type",
    "algorithm",
    "timestamp",
    "file_size",
    "status",
    "error_message",
    "output_path",
)


class SqliteLedgerStore:
    """Almacén en la tabla ``operation_history`` de una base SQLite.

    Abre una conexión por llamada, por lo que puede usarse desde varios hilos;
    las escrituras se serializan con un candado.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()
        _ensure_parent_dir(path)
        with closing(self._connect()) as conn, conn:
            conn.executescript(_SCHEMA)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def insert(self, row: Row) -> int:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        query = f"INSERT INTO operation_history ({', '.join(_COLUMNS)}) VALUES ({placeholders})"
        with self._lock, closing(self._connect()) as conn, conn:
            cur = conn.execute(query, tuple(row.get(column) for column in _COLUMNS))
            return int(cur.lastrowid)

    def query(self, limit: Optional[int] = None) -> List[Row]:
        query = (
            f"SELECT id, {', '.join(_COLUMNS)} FROM operation_history "
            "ORDER BY timestamp DESC, id DESC"
        )
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)
        with closing(self._connect()) as conn:
            return [dict(row) for row in conn.execute(query, params).fetchall()]

    def count(self) -> int:
        with closing(self._connect()) as conn:
            return int(conn.execute("SELECT COUNT(*) FROM operation_history").fetchone()[0])

    def clear(self) -> None:
        with self._lock, closing(self._connect()) as conn, conn:
            conn.execute("DELETE FROM operation_history")

    def ping(self) -> bool:
        try:
            with closing(self._connect()) as conn:
                conn.execute("SELECT 1 FROM operation_history LIMIT 1")
        except sqlite3.Error:
            return False
        return True


def open_store(backend: str, path: str) -> LedgerStore:
    """Crea el almacén indicado por ``backend`` (``json`` o ``sqlite``)."""

    if backend == "json":
        return JsonLedgerStore(path)
    if backend == "sqlite":
        return SqliteLedgerStore(path)
    raise ValueError(f"Backend de historial desconocido: {backend!r}")
