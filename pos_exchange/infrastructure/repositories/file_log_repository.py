"""
Implementación del file log sobre SQL Server.

La tabla tiene un índice único (StoreId, FileHash) filtrado a los estados
que bloquean reprocesar; la violación se traduce a FileLogError(DUPLICATE_HASH).
"""
from typing import Optional
import logging
import uuid

import pyodbc

from pos_exchange.application.dto.file_log_dto import FileLogEntryDTO
from pos_exchange.application.interfaces.i_database_writer import DatabaseWriteException
from pos_exchange.application.interfaces.i_file_log_store import IFileLogStore
from pos_exchange.domain.exceptions.domain_exception import FileLogError, FileLogErrorCode
from pos_exchange.domain.value_objects.processing_status import FileLogStatus
from pos_exchange.infrastructure.database.connection import IDatabaseConnection


logger = logging.getLogger(__name__)


class SqlServerFileLogRepository(IFileLogStore):
    """
    Repositorio del file log (tabla configurable, por defecto PosFileLog).
    """

    def __init__(self, connection: IDatabaseConnection, table: str = 'PosFileLog'):
        """
        Args:
            connection: Conexión a la base de datos
            table: Nombre de la tabla (validado en StorageConfig)
        """
        self._connection = connection
        self._table = table

    def is_already_processed(self, store_id: str, file_hash: str) -> bool:
        query = f"""
            SELECT COUNT(*)
            FROM {self._table}
            WHERE StoreId = ? AND FileHash = ? AND Status IN (?, ?, ?)
        """
        try:
            count = self._connection.execute_scalar(query, [
                store_id, file_hash,
                FileLogStatus.PENDING.value, FileLogStatus.PROCESSING.value, FileLogStatus.SUCCESS.value,
            ])
            return count is not None and int(count) > 0
        except pyodbc.Error as e:
            logger.error(f"Error verificando hash {file_hash[:12]} de tienda {store_id}: {e}", exc_info=True)
            raise DatabaseWriteException("Error verificando duplicados en file log", inner_exception=e)

    def create_entry(self, entry: FileLogEntryDTO) -> str:
        if self.is_already_processed(entry.store_id, entry.file_hash):
            raise FileLogError(
                FileLogErrorCode.DUPLICATE_HASH,
                f"Hash ya registrado para tienda {entry.store_id}",
            )

        log_id = str(uuid.uuid4())
        query = f"""
            INSERT INTO {self._table} (
                LogId, StoreId, PosIntegrationId, FileName, FileType,
                FileSizeBytes, FileHash, SourcePath, Direction, Status, CreatedAt
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = [
            log_id, entry.store_id, entry.pos_integration_id, entry.file_name, entry.file_type,
            entry.file_size_bytes, entry.file_hash, entry.source_path, entry.direction,
            FileLogStatus.PENDING.value, entry.created_at,
        ]
        try:
            self._connection.execute_non_query(query, params)
        except pyodbc.IntegrityError as e:
            logger.info(f"Conflicto de unicidad para hash {entry.file_hash[:12]} (tienda {entry.store_id})")
            raise FileLogError(FileLogErrorCode.DUPLICATE_HASH, f"Hash ya registrado: {e}")
        except pyodbc.Error as e:
            raise DatabaseWriteException(f"Error creando entrada de file log para {entry.file_name}",
                                         inner_exception=e)

        logger.debug(f"Entrada de file log {log_id} creada para {entry.file_name}")
        return log_id

    def mark_processing_started(self, log_id: str) -> None:
        self._update(log_id, "Status = ?, StartedAt = SYSDATETIME()",
                     [FileLogStatus.PROCESSING.value])

    def mark_processing_success(
        self,
        log_id: str,
        record_count: int,
        processing_time_ms: int,
        moved_to: Optional[str] = None
    ) -> None:
        self._update(
            log_id,
            "Status = ?, RecordCount = ?, ProcessingTimeMs = ?, MovedTo = ?, CompletedAt = SYSDATETIME()",
            [FileLogStatus.SUCCESS.value, record_count, processing_time_ms, moved_to],
        )

    def mark_processing_failed(
        self,
        log_id: str,
        reason_code: str,
        message: str,
        processing_time_ms: int
    ) -> None:
        self._update(
            log_id,
            "Status = ?, ErrorCode = ?, ErrorMessage = ?, ProcessingTimeMs = ?, CompletedAt = SYSDATETIME()",
            [FileLogStatus.FAILED.value, reason_code, (message or '')[:4000], processing_time_ms],
        )

    def _update(self, log_id: str, set_clause: str, params: list) -> None:
        query = f"UPDATE {self._table} SET {set_clause} WHERE LogId = ?"
        try:
            filas = self._connection.execute_non_query(query, params + [log_id])
        except pyodbc.Error as e:
            raise DatabaseWriteException("Error actualizando file log", inner_exception=e, entry_id=log_id)
        if filas == 0:
            raise FileLogError(FileLogErrorCode.NOT_FOUND, f"Entrada de file log no encontrada: {log_id}")
