"""
Excepciones del dominio de intercambio de archivos POS.

Los códigos son estables (no dependen del tipo de excepción) para que la capa
HTTP/CLI pueda traducirlos sin conocer los detalles internos.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Excepción base del dominio"""
    pass


class ValueObjectValidationException(DomainException):
    """Excepción para validaciones de value objects y entidades de configuración"""
    pass


class FileWatcherErrorCode(str, Enum):
    """Códigos de error del watcher de archivos."""
    INVALID_PATH = "FILE_WATCHER_INVALID_PATH"
    PATH_TRAVERSAL = "FILE_WATCHER_PATH_TRAVERSAL"
    FILE_NOT_FOUND = "FILE_WATCHER_FILE_NOT_FOUND"
    PERMISSION_DENIED = "FILE_WATCHER_PERMISSION_DENIED"
    PROCESSING_ERROR = "FILE_WATCHER_PROCESSING_ERROR"
    DUPLICATE_FILE = "FILE_WATCHER_DUPLICATE_FILE"
    WATCHER_ALREADY_RUNNING = "FILE_WATCHER_ALREADY_RUNNING"
    WATCHER_NOT_FOUND = "FILE_WATCHER_NOT_FOUND"

    def __str__(self) -> str:
        return self.value


class FileWatcherError(DomainException):
    """
    Error de configuración o ciclo de vida del watcher.

    Attributes:
        code: Código estable (FileWatcherErrorCode)
        message: Descripción del error
        details: Datos adicionales para diagnóstico (opcional)
    """

    def __init__(
        self,
        code: FileWatcherErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class FileLogErrorCode(str, Enum):
    """Códigos de error del registro durable de archivos (file log)."""
    DUPLICATE_HASH = "FILE_LOG_DUPLICATE_HASH"
    NOT_FOUND = "FILE_LOG_NOT_FOUND"


class FileLogError(DomainException):
    """
    Error reportado por el almacén de file log.

    DUPLICATE_HASH se usa cuando ya existe una entrada para el mismo
    contenido en la misma tienda; el procesador lo trata como un SKIPPED.
    """

    def __init__(self, code: FileLogErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def is_duplicate_hash(self) -> bool:
        return self.code == FileLogErrorCode.DUPLICATE_HASH
