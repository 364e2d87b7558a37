"""
Interfaz del file log durable (Dependency Inversion Principle).
"""
from abc import ABC, abstractmethod
from typing import Optional

from ..dto.file_log_dto import FileLogEntryDTO


class IFileLogStore(ABC):
    """
    Historial durable de archivos procesados por tienda.

    Es la fuente de verdad de idempotencia: un mismo contenido (hash) no se
    procesa dos veces para la misma tienda, aun después de reiniciar.
    """

    @abstractmethod
    def is_already_processed(self, store_id: str, file_hash: str) -> bool:
        """
        Verifica si un hash ya fue procesado (o está en proceso) para la tienda.

        Args:
            store_id: Tienda
            file_hash: SHA-256 hex del contenido

        Returns:
            True si existe una entrada que impide reprocesar
        """
        pass

    @abstractmethod
    def create_entry(self, entry: FileLogEntryDTO) -> str:
        """
        Crea la entrada de pre-registro.

        Returns:
            Identificador de la entrada (log_id)

        Raises:
            FileLogError: Con código DUPLICATE_HASH si (store_id, hash) ya existe
        """
        pass

    @abstractmethod
    def mark_processing_started(self, log_id: str) -> None:
        """Marca la entrada como PROCESSING."""
        pass

    @abstractmethod
    def mark_processing_success(
        self,
        log_id: str,
        record_count: int,
        processing_time_ms: int,
        moved_to: Optional[str] = None
    ) -> None:
        """Cierra la entrada como SUCCESS."""
        pass

    @abstractmethod
    def mark_processing_failed(
        self,
        log_id: str,
        reason_code: str,
        message: str,
        processing_time_ms: int
    ) -> None:
        """
        Cierra la entrada como FAILED.

        Args:
            reason_code: VALIDATION_FAILED o PROCESSING_ERROR
            message: Detalle del fallo
        """
        pass
