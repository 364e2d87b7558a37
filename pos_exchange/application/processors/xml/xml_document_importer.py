"""
Importador NAXML por defecto.

Cuenta los registros de cada documento de mantenimiento; los datos de
negocio los persiste otro servicio (fuera de este paquete).
"""
from __future__ import annotations
import logging

from pos_exchange.application.dto.document_dto import ImportResult
from pos_exchange.application.interfaces.i_document_processing import IDocumentImporter
from pos_exchange.application.processors.xml.xml_document_validator import local_name, parse_document

logger = logging.getLogger(__name__)


class NaxmlDocumentImporter(IDocumentImporter):
    def import_transactions(self, content: str) -> ImportResult:
        # Un TransactionDocument es una transacción
        parse_document(content)
        return ImportResult(record_count=1)

    def import_departments(self, content: str) -> ImportResult:
        return self._count(content, 'Department')

    def import_tender_types(self, content: str) -> ImportResult:
        return self._count(content, 'Tender')

    def import_tax_rates(self, content: str) -> ImportResult:
        return self._count(content, 'TaxRate')

    @staticmethod
    def _count(content: str, element: str) -> ImportResult:
        root = parse_document(content)
        total = sum(1 for el in root.iter() if local_name(el.tag) == element)
        logger.debug("Importados %d elementos '%s'", total, element)
        return ImportResult(record_count=total)
