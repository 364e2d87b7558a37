"""
Implementación de la auditoría de intercambios sobre SQL Server.
"""
import json
import logging
import uuid

import pyodbc

from pos_exchange.application.dto.audit_dto import (
    AuditRecordDTO,
    AuditUpdateDTO,
    AUDIT_STATUS_FAILED,
)
from pos_exchange.application.interfaces.i_audit_store import IAuditStore
from pos_exchange.application.interfaces.i_database_writer import DatabaseWriteException
from pos_exchange.infrastructure.database.connection import IDatabaseConnection


logger = logging.getLogger(__name__)


class SqlServerAuditRepository(IAuditStore):
    """
    Repositorio de auditoría (tabla configurable, por defecto PosDataExchangeAudit).

    La metadata se guarda como JSON en una columna NVARCHAR(MAX).
    """

    def __init__(self, connection: IDatabaseConnection, table: str = 'PosDataExchangeAudit'):
        self._connection = connection
        self._table = table

    def create_record(self, record: AuditRecordDTO) -> str:
        audit_id = str(uuid.uuid4())
        query = f"""
            INSERT INTO {self._table} (
                AuditId, ExchangeId, StoreId, CompanyId, ExchangeType, Direction,
                DataCategory, SourceSystem, SourceIdentifier, DestinationSystem,
                AccessedByUserId, AccessReason, Metadata, Status, CreatedAt
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = [
            audit_id, record.exchange_id, record.store_id, record.company_id,
            record.exchange_type, record.direction, record.data_category.value,
            record.source_system, record.source_identifier, record.destination_system,
            record.user_id, record.access_reason,
            json.dumps(record.metadata, default=str, ensure_ascii=False),
            record.status, record.created_at,
        ]
        try:
            self._connection.execute_non_query(query, params)
        except pyodbc.Error as e:
            raise DatabaseWriteException(f"Error creando auditoría {record.exchange_id}", inner_exception=e)

        logger.debug(f"Auditoría {audit_id} creada ({record.exchange_id})")
        return audit_id

    def update_record(self, audit_id: str, update: AuditUpdateDTO) -> None:
        query = f"""
            UPDATE {self._table}
            SET Status = ?, RecordCount = ?, DataSizeBytes = ?, FileHash = ?,
                CompletedAt = SYSDATETIME()
            WHERE AuditId = ?
        """
        self._execute(audit_id, query, [
            update.status, update.record_count, update.data_size_bytes, update.file_hash, audit_id,
        ])

    def fail_record(self, audit_id: str, error_code: str, message: str) -> None:
        query = f"""
            UPDATE {self._table}
            SET Status = ?, ErrorCode = ?, ErrorMessage = ?, CompletedAt = SYSDATETIME()
            WHERE AuditId = ?
        """
        self._execute(audit_id, query, [AUDIT_STATUS_FAILED, error_code, (message or '')[:4000], audit_id])

    def _execute(self, audit_id: str, query: str, params: list) -> None:
        try:
            filas = self._connection.execute_non_query(query, params)
        except pyodbc.Error as e:
            raise DatabaseWriteException("Error actualizando auditoría", inner_exception=e, entry_id=audit_id)
        if filas == 0:
            logger.warning(f"Auditoría {audit_id} no encontrada al actualizar")
