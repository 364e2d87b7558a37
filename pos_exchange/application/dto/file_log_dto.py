"""
Data Transfer Objects para el file log (historial durable de archivos).

Los DTOs transportan datos entre capas, sin lógica de negocio.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pos_exchange.domain.value_objects.processing_status import FileLogStatus

FILE_LOG_DIRECTION_IMPORT = "IMPORT"
CONTENT_SOURCE_PATH = "content-import"


@dataclass
class FileLogEntryDTO:
    """
    Entrada del file log creada ANTES de validar (pre-registro).

    La combinación (store_id, file_hash) es única: es la fuente de verdad
    de idempotencia entre reinicios.
    """

    # ═══════════════════════════════════════════════════════════
    # CAMPOS OBLIGATORIOS
    # ═══════════════════════════════════════════════════════════
    store_id: str
    pos_integration_id: str
    file_name: str
    file_type: str          # tipo de documento pre-clasificado
    file_size_bytes: int
    file_hash: str
    source_path: str        # ruta original o "content-import"

    # ═══════════════════════════════════════════════════════════
    # CAMPOS OPCIONALES
    # ═══════════════════════════════════════════════════════════
    direction: str = FILE_LOG_DIRECTION_IMPORT
    status: FileLogStatus = FileLogStatus.PENDING
    log_id: Optional[str] = None
    record_count: Optional[int] = None
    processing_time_ms: Optional[int] = None
    moved_to: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
