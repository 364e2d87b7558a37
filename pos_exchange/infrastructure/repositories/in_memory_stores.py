"""
Implementaciones en memoria del file log y la auditoría.

Se usan cuando no hay SQL Server configurado (STORAGE_BACKEND=memory) y en
pruebas. Son thread-safe: los timers de varias tiendas escriben a la vez.
"""
from __future__ import annotations
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional
import itertools
import logging
import threading

from pos_exchange.application.dto.audit_dto import (
    AuditRecordDTO,
    AuditUpdateDTO,
    AUDIT_STATUS_FAILED,
)
from pos_exchange.application.dto.file_log_dto import FileLogEntryDTO
from pos_exchange.application.interfaces.i_audit_store import IAuditStore
from pos_exchange.application.interfaces.i_file_log_store import IFileLogStore
from pos_exchange.domain.exceptions.domain_exception import FileLogError, FileLogErrorCode
from pos_exchange.domain.value_objects.processing_status import FileLogStatus

logger = logging.getLogger(__name__)

# Estados que bloquean reprocesar el mismo contenido (FAILED permite reintentar)
_BLOCKING_STATUSES = (FileLogStatus.PENDING, FileLogStatus.PROCESSING, FileLogStatus.SUCCESS)


class InMemoryFileLogStore(IFileLogStore):
    def __init__(self):
        self._entries: Dict[str, FileLogEntryDTO] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def is_already_processed(self, store_id: str, file_hash: str) -> bool:
        with self._lock:
            return self._find_blocking(store_id, file_hash) is not None

    def create_entry(self, entry: FileLogEntryDTO) -> str:
        with self._lock:
            existente = self._find_blocking(entry.store_id, entry.file_hash)
            if existente is not None:
                raise FileLogError(
                    FileLogErrorCode.DUPLICATE_HASH,
                    f"Hash {entry.file_hash[:12]} ya registrado para tienda {entry.store_id} "
                    f"(entrada {existente.log_id})",
                )
            log_id = f"log-{next(self._ids)}"
            self._entries[log_id] = replace(entry, log_id=log_id)
            logger.debug("Entrada de file log creada: %s (%s)", log_id, entry.file_name)
            return log_id

    def mark_processing_started(self, log_id: str) -> None:
        with self._lock:
            entry = self._get(log_id)
            entry.status = FileLogStatus.PROCESSING
            entry.started_at = datetime.now()

    def mark_processing_success(
        self,
        log_id: str,
        record_count: int,
        processing_time_ms: int,
        moved_to: Optional[str] = None
    ) -> None:
        with self._lock:
            entry = self._get(log_id)
            entry.status = FileLogStatus.SUCCESS
            entry.record_count = record_count
            entry.processing_time_ms = processing_time_ms
            entry.moved_to = moved_to
            entry.completed_at = datetime.now()

    def mark_processing_failed(
        self,
        log_id: str,
        reason_code: str,
        message: str,
        processing_time_ms: int
    ) -> None:
        with self._lock:
            entry = self._get(log_id)
            entry.status = FileLogStatus.FAILED
            entry.error_code = reason_code
            entry.error_message = message
            entry.processing_time_ms = processing_time_ms
            entry.completed_at = datetime.now()

    # ===== Consultas (reportes / pruebas) =====

    def get(self, log_id: str) -> Optional[FileLogEntryDTO]:
        with self._lock:
            entry = self._entries.get(log_id)
            return replace(entry) if entry else None

    def entries_for_store(self, store_id: str) -> List[FileLogEntryDTO]:
        with self._lock:
            return [replace(e) for e in self._entries.values() if e.store_id == store_id]

    def _find_blocking(self, store_id: str, file_hash: str) -> Optional[FileLogEntryDTO]:
        for entry in self._entries.values():
            if (entry.store_id == store_id and entry.file_hash == file_hash
                    and entry.status in _BLOCKING_STATUSES):
                return entry
        return None

    def _get(self, log_id: str) -> FileLogEntryDTO:
        entry = self._entries.get(log_id)
        if entry is None:
            raise FileLogError(FileLogErrorCode.NOT_FOUND, f"Entrada de file log no encontrada: {log_id}")
        return entry


class InMemoryAuditStore(IAuditStore):
    def __init__(self):
        self._records: Dict[str, AuditRecordDTO] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_record(self, record: AuditRecordDTO) -> str:
        with self._lock:
            audit_id = f"audit-{next(self._ids)}"
            self._records[audit_id] = replace(record, audit_id=audit_id, metadata=dict(record.metadata))
            logger.debug("Registro de auditoría %s creado (%s)", audit_id, record.exchange_id)
            return audit_id

    def update_record(self, audit_id: str, update: AuditUpdateDTO) -> None:
        with self._lock:
            record = self._get(audit_id)
            record.status = update.status
            record.record_count = update.record_count
            record.data_size_bytes = update.data_size_bytes
            record.file_hash = update.file_hash
            record.completed_at = datetime.now()

    def fail_record(self, audit_id: str, error_code: str, message: str) -> None:
        with self._lock:
            record = self._get(audit_id)
            record.status = AUDIT_STATUS_FAILED
            record.error_code = error_code
            record.error_message = message
            record.completed_at = datetime.now()

    def get(self, audit_id: str) -> Optional[AuditRecordDTO]:
        with self._lock:
            record = self._records.get(audit_id)
            return replace(record) if record else None

    def records_for_store(self, store_id: str) -> List[AuditRecordDTO]:
        with self._lock:
            return [replace(r) for r in self._records.values() if r.store_id == store_id]

    def _get(self, audit_id: str) -> AuditRecordDTO:
        record = self._records.get(audit_id)
        if record is None:
            raise KeyError(f"Registro de auditoría no encontrado: {audit_id}")
        return record
