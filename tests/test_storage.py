# --------------------------------------------------------------
# File: test_storage.py
# Description: Pruebas sobre los almacenes JSON y SQLite del historial.
# --------------------------------------------------------------

import json

import pytest

from sealcore.storage import JsonLedgerStore, SqliteLedgerStore, load_db, open_store, save_db


def _row(name: str, timestamp: str) -> dict:
    return {
        "file_name": name,
        "original_path": f"/tmp/{name}",
        "operation_type": "SEAL",
        "algorithm": "AES-256",
        "timestamp": timestamp,
        "file_size": 10,
        "status": "SUCCESS",
        "error_message": None,
        "output_path": None,
    }


def test_load_db_creates_when_missing(tmp_path):
    """Comprueba que load_db genere la estructura base cuando no existe archivo.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones validan la estructura creada en memoria.
    """
    path = tmp_path / "ledger.json"
    db = load_db(str(path))
    assert db["operations"] == []
    assert db["next_id"] == 1
    assert not path.exists()


def test_save_db_is_atomic(tmp_path):
    """Garantiza que el guardado se realice de forma atómica sin archivos residuales.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones comprueban la presencia y ausencia de archivos esperada.
    """
    path = tmp_path / "nested" / "ledger.json"
    data = {"operations": [], "next_id": 1}
    save_db(data, str(path))
    assert path.exists()
    assert not (tmp_path / "nested" / "ledger.json.tmp").exists()
    assert load_db(str(path)) == data


def test_load_db_with_corrupt_json(tmp_path):
    """Valida que un JSON corrupto sea manejado recreando la estructura base.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones confirman la recuperación ante corrupción.
    """
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_db(str(path))["operations"] == []


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    suffix = "json" if request.param == "json" else "db"
    return open_store(request.param, str(tmp_path / f"ledger.{suffix}"))


def test_insert_assigns_increasing_ids(store):
    first = store.insert(_row("a", "2026-01-01T00:00:00.000001+00:00"))
    second = store.insert(_row("b", "2026-01-01T00:00:00.000002+00:00"))
    assert second > first
    assert store.count() == 2


def test_query_orders_newest_first_with_ties_by_insertion(store):
    """El orden es fecha descendente y, a igualdad, la última inserción primero.

    Returns:
        None: Las aserciones comparan el orden de los nombres.
    """
    store.insert(_row("old", "2026-01-01T00:00:00.000001+00:00"))
    store.insert(_row("tie-1", "2026-01-02T00:00:00.000000+00:00"))
    store.insert(_row("tie-2", "2026-01-02T00:00:00.000000+00:00"))
    store.insert(_row("middle", "2026-01-01T12:00:00.000000+00:00"))

    names = [row["file_name"] for row in store.query()]
    assert names == ["tie-2", "tie-1", "middle", "old"]
    assert [row["file_name"] for row in store.query(2)] == ["tie-2", "tie-1"]


def test_clear_and_ping(store):
    store.insert(_row("a", "2026-01-01T00:00:00.000001+00:00"))
    assert store.ping() is True
    store.clear()
    assert store.count() == 0
    assert store.query() == []


def test_json_store_persists_between_instances(tmp_path):
    path = str(tmp_path / "ledger.json")
    JsonLedgerStore(path).insert(_row("a", "2026-01-01T00:00:00.000001+00:00"))
    rows = JsonLedgerStore(path).query()
    assert rows[0]["file_name"] == "a"
    assert json.loads((tmp_path / "ledger.json").read_text(encoding="utf-8"))["next_id"] == 2


def test_sqlite_store_rejects_unknown_status(tmp_path):
    store = SqliteLedgerStore(str(tmp_path / "ledger.db"))
    row = _row("a", "2026-01-01T00:00:00.000001+00:00")
    row["status"] = "MAYBE"
    with pytest.raises(Exception):
        store.insert(row)


def test_open_store_unknown_backend(tmp_path):
    with pytest.raises(ValueError):
        open_store("mysql", str(tmp_path / "x"))
