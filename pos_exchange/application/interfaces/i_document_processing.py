"""
Interfaces de validación e importación de documentos (Dependency Inversion Principle).

La capa de aplicación depende de estas abstracciones; las implementaciones
NAXML por defecto viven en application/processors/xml.
"""
from abc import ABC, abstractmethod

from ..dto.document_dto import ValidationResult, ImportResult


class IDocumentValidator(ABC):
    """Validador de documentos de intercambio."""

    @abstractmethod
    def validate(self, content: str) -> ValidationResult:
        """
        Valida un documento y detecta su tipo.

        Args:
            content: Contenido textual del documento

        Returns:
            ValidationResult con tipo, versión, errores y advertencias

        Notes:
            Un documento malformado NO debe lanzar excepción: se reporta
            como is_valid=False con el detalle en errors.
        """
        pass


class IDocumentImporter(ABC):
    """
    Importadores por tipo de documento.

    Cada método recibe el contenido ya validado y retorna la cantidad de
    registros importados.

    Raises:
        Cualquier excepción se trata como PROCESSING_ERROR del archivo.
    """

    @abstractmethod
    def import_transactions(self, content: str) -> ImportResult:
        """Importa un TransactionDocument (transacciones de venta)."""
        pass

    @abstractmethod
    def import_departments(self, content: str) -> ImportResult:
        """Importa un DepartmentMaintenance."""
        pass

    @abstractmethod
    def import_tender_types(self, content: str) -> ImportResult:
        """Importa un TenderMaintenance (medios de pago)."""
        pass

    @abstractmethod
    def import_tax_rates(self, content: str) -> ImportResult:
        """Importa un TaxRateMaintenance."""
        pass
