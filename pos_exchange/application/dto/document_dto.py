"""
DTOs de validación e importación de documentos NAXML.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from pos_exchange.domain.value_objects.processing_status import DocumentType

VALIDATION_ERROR_SEPARATOR = "; "


@dataclass
class ValidationResult:
    """
    Resultado de validar un documento.

    Attributes:
        is_valid: True si el documento puede importarse
        document_type: Tipo detectado (None si no se pudo determinar)
        version: Versión declarada en el documento
        errors: Errores que impiden la importación
        warnings: Observaciones que no bloquean
    """
    is_valid: bool
    document_type: Optional[DocumentType] = None
    version: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def error_summary(self) -> str:
        """Errores unidos con '; ' (formato de file log y auditoría)."""
        return VALIDATION_ERROR_SEPARATOR.join(self.errors)


@dataclass(frozen=True)
class ImportResult:
    """Resultado de un importador por tipo."""
    record_count: int
