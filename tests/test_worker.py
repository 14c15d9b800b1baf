# --------------------------------------------------------------
# File: test_worker.py
# Description: Pruebas del pool en segundo plano y de su canal de eventos.
# --------------------------------------------------------------

import os

import pytest

from sealapi.worker import EventKind, OperationWorker
from sealcore.errors import InputNotFound
from sealcore.models import OpenResult, SealResult


def test_seal_and_open_in_background(service, make_file):
    """Las operaciones enviadas al pool terminan y publican inicio y fin.

    Args:
        service (FileCryptoService): Orquestador con historial aislado.
        make_file (Callable): Factoría de archivos de prueba.

    Returns:
        None: Las aserciones revisan resultados y eventos.
    """
    data = os.urandom(20000)
    source = make_file("bg.bin", data)
    with OperationWorker(service) as worker:
        sealed = worker.submit_seal(source, "AES-256").result(timeout=30)
        assert isinstance(sealed, SealResult)
        opened = worker.submit_open(sealed.output_path, sealed.key_b64, "AES-256").result(timeout=30)
        assert isinstance(opened, OpenResult)
        events = worker.drain_events()

    with open(opened.output_path, "rb") as handler:
        assert handler.read() == data
    assert [(e.operation, e.kind) for e in events] == [
        ("SEAL", EventKind.STARTED),
        ("SEAL", EventKind.COMPLETED),
        ("OPEN", EventKind.STARTED),
        ("OPEN", EventKind.COMPLETED),
    ]
    assert events[1].result is sealed
    assert "Guardado en" in events[1].message


def test_failure_is_published_and_propagated(service, workdir):
    with OperationWorker(service) as worker:
        future = worker.submit_seal(workdir / "missing.bin", "CHACHA20")
        with pytest.raises(InputNotFound):
            future.result(timeout=30)
        events = worker.drain_events()

    assert [e.kind for e in events] == [EventKind.STARTED, EventKind.FAILED]
    assert "no existe" in events[-1].message
    assert service.history_count() == 1


def test_concurrent_operations_each_record_once(service, make_file):
    """Varias operaciones simultáneas no pierden registros en el historial.

    Returns:
        None: Las aserciones comparan el recuento final.
    """
    sources = [make_file(f"file{i}.txt", os.urandom(3000 + i)) for i in range(6)]
    with OperationWorker(service, max_workers=2) as worker:
        futures = [worker.submit_seal(path, "BLOWFISH-128") for path in sources]
        results = [future.result(timeout=60) for future in futures]
        history = worker.submit_history(100).result(timeout=30)

    assert len({r.output_path for r in results}) == 6
    assert service.history_count() == 6
    assert len(history) == 6
