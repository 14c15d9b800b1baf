# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar el historial y crear archivos de prueba.
# --------------------------------------------------------------

from pathlib import Path
from typing import Callable, Iterator

import pytest

from sealapi.ledger import OperationLedger
from sealapi.services import FileCryptoService
from sealcore.storage import JsonLedgerStore


@pytest.fixture(autouse=True)
def _isolate_ledger(tmp_path, monkeypatch) -> Iterator[None]:
    """Aísla FILESEALER_LEDGER_PATH en una carpeta temporal para cada prueba.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    data_dir = tmp_path / "_data"
    data_dir.mkdir()
    monkeypatch.setenv("FILESEALER_LEDGER_PATH", str(data_dir / "ledger.json"))
    monkeypatch.setenv("FILESEALER_LEDGER_BACKEND", "json")
    yield


@pytest.fixture
def workdir(tmp_path) -> Path:
    """Directorio donde viven los archivos de entrada y salida de cada prueba."""
    path = tmp_path / "files"
    path.mkdir()
    return path


@pytest.fixture
def make_file(workdir) -> Callable[..., Path]:
    """Devuelve una factoría que escribe un archivo con el contenido indicado."""

    def _make(name: str, data: bytes = b"") -> Path:
        path = workdir / name
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def ledger(tmp_path) -> OperationLedger:
    return OperationLedger(JsonLedgerStore(str(tmp_path / "_data" / "ledger.json")))


@pytest.fixture
def service(ledger) -> FileCryptoService:
    return FileCryptoService(ledger)
