import errno
import os
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from pos_exchange.domain.exceptions.domain_exception import FileWatcherError, FileWatcherErrorCode
from pos_exchange.infrastructure.file_system import path_guard
from pos_exchange.infrastructure.file_system.path_guard import (
    build_timestamped_name,
    ensure_directory_exists,
    has_traversal,
    move_file,
    validate_path,
)


# --- Tests para validate_path ---
@pytest.mark.parametrize("ruta", [
    "/data/../etc",
    "../incoming",
    "stores/s1/../../secret",
    "C:\\pos\\..\\windows",
])
def test_validate_path_rechaza_traversal(ruta):
    """
    Verifica que cualquier segmento '..' se rechaza antes de tocar el disco.
    """
    with pytest.raises(FileWatcherError) as exc:
        validate_path(ruta)
    assert exc.value.code == FileWatcherErrorCode.PATH_TRAVERSAL


def test_has_traversal_no_confunde_puntos_en_nombres():
    assert has_traversal("/data/file..xml") is False
    assert has_traversal("/data/.hidden") is False


def test_validate_path_inexistente(tmp_path):
    with pytest.raises(FileWatcherError) as exc:
        validate_path(tmp_path / "no-existe")
    assert exc.value.code == FileWatcherErrorCode.FILE_NOT_FOUND
    assert exc.value.details["path"].endswith("no-existe")


def test_validate_path_sin_permiso(tmp_path):
    with patch.object(path_guard.os, "access", return_value=False):
        with pytest.raises(FileWatcherError) as exc:
            validate_path(tmp_path)
    assert exc.value.code == FileWatcherErrorCode.PERMISSION_DENIED


def test_validate_path_ok(tmp_path):
    validate_path(tmp_path)


# --- Tests para ensure_directory_exists ---
def test_ensure_directory_exists_idempotente(tmp_path):
    destino = tmp_path / "a" / "b" / "c"
    ensure_directory_exists(destino)
    ensure_directory_exists(destino)
    assert destino.is_dir()


def test_ensure_directory_exists_archivo_existente(tmp_path):
    archivo = tmp_path / "archivo"
    archivo.write_text("x")
    with pytest.raises(FileWatcherError) as exc:
        ensure_directory_exists(archivo)
    assert exc.value.code == FileWatcherErrorCode.INVALID_PATH


# --- Tests para move_file ---
def test_move_file_crea_destino(tmp_path):
    origen = tmp_path / "in" / "doc.xml"
    origen.parent.mkdir()
    origen.write_text("<a/>")

    destino = move_file(origen, tmp_path / "out" / "sub", "renombrado.xml")

    assert destino == tmp_path / "out" / "sub" / "renombrado.xml"
    assert destino.read_text() == "<a/>"
    assert not origen.exists()


def test_move_file_fallback_entre_dispositivos(tmp_path):
    """
    Verifica que un EXDEV en rename cae a copiar + borrar.
    """
    origen = tmp_path / "doc.xml"
    origen.write_text("<a/>")

    with patch.object(path_guard.os, "rename", side_effect=OSError(errno.EXDEV, "cross-device")):
        destino = move_file(origen, tmp_path / "out")

    assert destino.read_text() == "<a/>"
    assert not origen.exists()


def test_move_file_otros_errores_se_propagan(tmp_path):
    origen = tmp_path / "doc.xml"
    origen.write_text("<a/>")

    with patch.object(path_guard.os, "rename", side_effect=OSError(errno.EACCES, "denied")):
        with pytest.raises(OSError):
            move_file(origen, tmp_path / "out")
    assert origen.exists()


# --- Tests para build_timestamped_name ---
def test_build_timestamped_name_formato():
    """
    Verifica el formato <base>_<ISO con guiones><ext> en UTC con milisegundos.
    """
    momento = datetime(2025, 1, 1, 10, 15, 30, 123456, tzinfo=timezone.utc)
    assert build_timestamped_name("TLOG_20250101.xml", momento) == "TLOG_20250101_2025-01-01T10-15-30-123Z.xml"


def test_build_timestamped_name_sin_extension():
    momento = datetime(2025, 6, 30, 23, 59, 59, tzinfo=timezone.utc)
    assert build_timestamped_name("README", momento) == "README_2025-06-30T23-59-59-000Z"


def test_build_timestamped_name_sin_caracteres_invalidos():
    nombre = build_timestamped_name("a.xml")
    assert ":" not in nombre
    assert nombre.startswith("a_") and nombre.endswith("Z.xml")
