"""
Guardia de rutas y operaciones de archivo.

- Rechaza rutas con segmentos '..' (path traversal) antes de tocar el disco.
- Verifica existencia y permisos de lectura.
- Crea directorios de destino y mueve archivos (rename atómico con
  fallback copiar+borrar entre dispositivos).
"""
from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Optional, Union
import errno
import logging
import os
import shutil

from pos_exchange.domain.exceptions.domain_exception import FileWatcherError, FileWatcherErrorCode

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def has_traversal(path: PathLike) -> bool:
    """True si la ruta (cruda o normalizada) contiene un segmento '..'."""
    raw = str(path)
    partes_crudas = raw.replace('\\', '/').split('/')
    if '..' in partes_crudas:
        return True
    return '..' in PurePath(os.path.normpath(raw)).parts


def validate_path(path: PathLike) -> None:
    """
    Valida una ruta antes de observarla o leerla.

    Args:
        path: Ruta a validar

    Raises:
        FileWatcherError: PATH_TRAVERSAL, FILE_NOT_FOUND o PERMISSION_DENIED
    """
    if has_traversal(path):
        raise FileWatcherError(
            FileWatcherErrorCode.PATH_TRAVERSAL,
            "Path traversal detected",
            {'path': str(path)},
        )

    try:
        os.stat(path)
    except FileNotFoundError:
        raise FileWatcherError(
            FileWatcherErrorCode.FILE_NOT_FOUND,
            f"Path does not exist: {path}",
            {'path': str(path)},
        )
    except PermissionError:
        raise FileWatcherError(
            FileWatcherErrorCode.PERMISSION_DENIED,
            f"Permission denied: {path}",
            {'path': str(path)},
        )

    if not os.access(path, os.R_OK):
        raise FileWatcherError(
            FileWatcherErrorCode.PERMISSION_DENIED,
            f"Permission denied: {path}",
            {'path': str(path)},
        )


def ensure_directory_exists(path: PathLike) -> Path:
    """
    Crea el directorio (y sus padres) si no existe. Idempotente.

    Raises:
        FileWatcherError: INVALID_PATH si la ruta existe y no es directorio
    """
    p = Path(path)
    if p.exists() and not p.is_dir():
        raise FileWatcherError(
            FileWatcherErrorCode.INVALID_PATH,
            f"Path exists and is not a directory: {path}",
            {'path': str(path)},
        )
    p.mkdir(parents=True, exist_ok=True)
    return p


def move_file(source: PathLike, dest_dir: PathLike, dest_name: Optional[str] = None) -> Path:
    """
    Mueve un archivo a dest_dir (creándolo si hace falta).

    Usa os.rename; si el destino está en otro dispositivo (EXDEV) copia y
    luego borra el origen.

    Args:
        source: Archivo a mover
        dest_dir: Directorio destino
        dest_name: Nombre final (por defecto el nombre original)

    Returns:
        Ruta final del archivo
    """
    src = Path(source)
    destino_dir = ensure_directory_exists(dest_dir)
    destino = destino_dir / (dest_name or src.name)

    try:
        os.rename(src, destino)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        logger.debug("Rename entre dispositivos para '%s', usando copia + borrado", src.name)
        shutil.copy2(src, destino)
        os.unlink(src)

    logger.info("Archivo '%s' movido a %s", src.name, destino_dir)
    return destino


def build_timestamped_name(file_name: str, now: Optional[datetime] = None) -> str:
    """
    Construye "<base>_<ISO con guiones><ext>".

    Ej: TLOG_20250101.xml -> TLOG_20250101_2025-01-01T10-15-30-123Z.xml
    El timestamp va en UTC con milisegundos; ':' y '.' se reemplazan por '-'.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    ts = now.strftime('%Y-%m-%dT%H-%M-%S-') + f"{now.microsecond // 1000:03d}Z"

    base, ext = os.path.splitext(file_name)
    return f"{base}_{ts}{ext}"
