"""
Validador NAXML por defecto (solo estructura, tipo y versión).
No interpreta el contenido de negocio; eso queda para los importadores.
"""
from __future__ import annotations
from typing import Optional
import xml.etree.ElementTree as ET
import logging

from pos_exchange.application.dto.document_dto import ValidationResult
from pos_exchange.application.interfaces.i_document_processing import IDocumentValidator
from pos_exchange.domain.value_objects.processing_status import DocumentType

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = ("3.2", "3.4", "4.0")
DEFAULT_VERSION = "3.4"


def local_name(tag: str) -> str:
    """Nombre sin namespace: '{ns}Department' o 'ns:Department' -> 'Department'."""
    return tag.rsplit('}', 1)[-1].rsplit(':', 1)[-1]


def parse_document(content: str) -> ET.Element:
    """Parsea el documento y retorna la raíz (ET.ParseError si está mal formado)."""
    return ET.fromstring(content.lstrip('\ufeff'))


class NaxmlDocumentValidator(IDocumentValidator):
    def __init__(self, default_version: str = DEFAULT_VERSION):
        self._default_version = default_version

    def validate(self, content: str) -> ValidationResult:
        if not content or not content.strip():
            return ValidationResult(is_valid=False, errors=["Document is empty"])

        try:
            root = parse_document(content)
        except ET.ParseError as e:
            logger.debug("XML mal formado: %s", e)
            return ValidationResult(is_valid=False, errors=[f"Invalid XML structure: {e}"])

        document_type = DocumentType.from_root_name(local_name(root.tag))
        if document_type is None:
            return ValidationResult(is_valid=False, errors=["Unable to determine NAXML document type"])

        version = self._extract_version(root)
        warnings = []
        if version not in SUPPORTED_VERSIONS:
            warnings.append(f"NAXML version {version} may not be fully supported")
            logger.warning("Documento %s con versión no soportada: %s", document_type, version)

        return ValidationResult(
            is_valid=True,
            document_type=document_type,
            version=version,
            warnings=warnings,
        )

    def _extract_version(self, root: ET.Element) -> str:
        version: Optional[str] = root.get('version')
        if not version:
            return self._default_version
        version = version.strip()
        if version.startswith('3.2'):
            return '3.2'
        if version.startswith('3.4'):
            return '3.4'
        if version.startswith('4'):
            return '4.0'
        return version
