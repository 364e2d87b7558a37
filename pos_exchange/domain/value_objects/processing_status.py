"""
Value Objects relacionados con estados de procesamiento y tipos de documento.

Los Value Objects son inmutables y se comparan por valor, no por identidad.
"""
from __future__ import annotations
from enum import Enum
from typing import Optional


class ProcessingStatus(str, Enum):
    """
    Estado final de un archivo o contenido procesado.

    Attributes:
        SUCCESS: Validado, importado y (en modo ruta) archivado
        FAILED: Falló la lectura, la validación o la importación
        SKIPPED: Contenido ya procesado (hash duplicado)
    """
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"

    @property
    def es_exitoso(self) -> bool:
        return self == ProcessingStatus.SUCCESS

    def __str__(self) -> str:
        return self.value


class FileLogStatus(str, Enum):
    """Estados de una entrada del file log durable."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class FailureReason(str, Enum):
    """Razón de fallo registrada en file log y auditoría."""
    VALIDATION_FAILED = "VALIDATION_FAILED"
    PROCESSING_ERROR = "PROCESSING_ERROR"

    def __str__(self) -> str:
        return self.value


class DocumentType(str, Enum):
    """Tipos de documento NAXML reconocidos."""
    TRANSACTION_DOCUMENT = "TransactionDocument"
    DEPARTMENT_MAINTENANCE = "DepartmentMaintenance"
    TENDER_MAINTENANCE = "TenderMaintenance"
    TAX_RATE_MAINTENANCE = "TaxRateMaintenance"
    PRICE_BOOK_MAINTENANCE = "PriceBookMaintenance"
    EMPLOYEE_MAINTENANCE = "EmployeeMaintenance"
    INVENTORY_MOVEMENT = "InventoryMovement"
    ACKNOWLEDGMENT = "Acknowledgment"

    @classmethod
    def from_root_name(cls, root_name: str) -> Optional['DocumentType']:
        """
        Detecta el tipo a partir del nombre del elemento raíz.

        Se compara por contenido (no igualdad) porque algunos proveedores
        prefijan o sufijan el nombre, ej: "NAXML-DepartmentMaintenance".

        Returns:
            DocumentType o None si no se reconoce
        """
        if not root_name:
            return None
        for tipo in cls:
            if tipo.value in root_name:
                return tipo
        return None

    def __str__(self) -> str:
        return self.value


class DataCategory(str, Enum):
    """Categoría de datos para el registro de auditoría."""
    TRANSACTION = "TRANSACTION"
    DEPARTMENT = "DEPARTMENT"
    TENDER_TYPE = "TENDER_TYPE"
    TAX_RATE = "TAX_RATE"
    PRICEBOOK = "PRICEBOOK"
    EMPLOYEE = "EMPLOYEE"
    SYSTEM_CONFIG = "SYSTEM_CONFIG"

    def __str__(self) -> str:
        return self.value
