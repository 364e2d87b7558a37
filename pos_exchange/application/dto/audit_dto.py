"""
Data Transfer Objects para la auditoría de intercambio de datos.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from pos_exchange.domain.value_objects.processing_status import DataCategory

EXCHANGE_TYPE_FILE_IMPORT = "FILE_IMPORT"
DIRECTION_INBOUND = "INBOUND"
SOURCE_SYSTEM_FILE = "NAXML_FILE"
SOURCE_SYSTEM_API = "API_UPLOAD"
DESTINATION_SYSTEM = "NUVANA"
EXCHANGE_PREFIX_FILE = "FILE"
EXCHANGE_PREFIX_CONTENT = "CONTENT"
ACCESS_REASON_FILE = "NAXML file import"
ACCESS_REASON_CONTENT = "Manual NAXML content import via API"

AUDIT_STATUS_PENDING = "PENDING"
AUDIT_STATUS_SUCCESS = "SUCCESS"
AUDIT_STATUS_FAILED = "FAILED"


@dataclass
class AuditRecordDTO:
    """
    Registro de auditoría creado antes de validar el documento.

    Attributes:
        exchange_id: Identificador legible "PREFIX-<base36>-<aleatorio>"
        data_category: Categoría inferida del nombre de archivo
        metadata: Datos libres (hash, nombre de archivo, etc.)
    """
    exchange_id: str
    store_id: str
    company_id: str
    data_category: DataCategory
    source_system: str
    source_identifier: str
    access_reason: str
    exchange_type: str = EXCHANGE_TYPE_FILE_IMPORT
    direction: str = DIRECTION_INBOUND
    destination_system: str = DESTINATION_SYSTEM
    user_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    status: str = AUDIT_STATUS_PENDING
    audit_id: Optional[str] = None
    record_count: Optional[int] = None
    data_size_bytes: Optional[int] = None
    file_hash: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class AuditUpdateDTO:
    """Cierre exitoso de un registro de auditoría."""
    status: str
    record_count: int
    data_size_bytes: int
    file_hash: str
