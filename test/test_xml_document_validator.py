import xml.etree.ElementTree as ET

import pytest

from naxml_samples import DEPARTMENT_XML, PRICEBOOK_XML, TENDER_XML, TRANSACTION_XML
from pos_exchange.application.processors.xml.xml_document_importer import NaxmlDocumentImporter
from pos_exchange.application.processors.xml.xml_document_validator import NaxmlDocumentValidator, local_name
from pos_exchange.domain.value_objects.processing_status import DocumentType


@pytest.fixture
def validador():
    return NaxmlDocumentValidator()


# --- Tests para NaxmlDocumentValidator ---
@pytest.mark.parametrize("contenido, tipo, version", [
    (DEPARTMENT_XML, DocumentType.DEPARTMENT_MAINTENANCE, "3.4"),
    (TRANSACTION_XML, DocumentType.TRANSACTION_DOCUMENT, "3.4"),
    (TENDER_XML, DocumentType.TENDER_MAINTENANCE, "4.0"),
    (PRICEBOOK_XML, DocumentType.PRICE_BOOK_MAINTENANCE, "3.4"),
])
def test_validate_documentos_validos(validador, contenido, tipo, version):
    resultado = validador.validate(contenido)

    assert resultado.is_valid
    assert resultado.document_type == tipo
    assert resultado.version == version
    assert resultado.errors == []


def test_validate_documento_vacio(validador):
    resultado = validador.validate("   ")
    assert not resultado.is_valid
    assert resultado.errors == ["Document is empty"]


def test_validate_xml_mal_formado(validador):
    resultado = validador.validate("<NAXML-TenderMaintenance><Tender>")
    assert not resultado.is_valid
    assert resultado.error_summary.startswith("Invalid XML structure")


def test_validate_raiz_desconocida(validador):
    resultado = validador.validate("<Inventario/>")
    assert not resultado.is_valid
    assert resultado.errors == ["Unable to determine NAXML document type"]


def test_validate_con_namespace_y_bom(validador):
    """
    Verifica que el namespace y un BOM inicial no impiden detectar el tipo.
    """
    contenido = '\ufeff<n:NAXML-TaxRateMaintenance xmlns:n="urn:naxml" version="3.2.1"/>'
    resultado = validador.validate(contenido)

    assert resultado.is_valid
    assert resultado.document_type == DocumentType.TAX_RATE_MAINTENANCE
    assert resultado.version == "3.2"


@pytest.mark.parametrize("declarada, normalizada", [
    ("3.4.0", "3.4"),
    ("4", "4.0"),
    ("4.1", "4.0"),
    (None, "3.4"),
])
def test_validate_normaliza_version(validador, declarada, normalizada):
    atributo = f' version="{declarada}"' if declarada else ""
    resultado = validador.validate(f"<NAXML-TenderMaintenance{atributo}/>")
    assert resultado.version == normalizada
    assert resultado.warnings == []


def test_validate_version_no_soportada_es_advertencia(validador):
    resultado = validador.validate('<NAXML-TenderMaintenance version="2.9"/>')

    assert resultado.is_valid
    assert resultado.warnings == ["NAXML version 2.9 may not be fully supported"]


def test_local_name():
    assert local_name("{urn:naxml}Department") == "Department"
    assert local_name("n:Department") == "Department"
    assert local_name("Department") == "Department"


# --- Tests para NaxmlDocumentImporter ---
def test_importer_cuenta_registros():
    importador = NaxmlDocumentImporter()

    assert importador.import_departments(DEPARTMENT_XML).record_count == 3
    assert importador.import_tender_types(TENDER_XML).record_count == 2
    assert importador.import_transactions(TRANSACTION_XML).record_count == 1


def test_importer_ignora_elementos_con_nombre_parecido():
    """
    Verifica que solo cuenta el nombre exacto (TaxRateID no es TaxRate).
    """
    contenido = "<NAXML-TaxRateMaintenance><TaxRate/><TaxRateID/><x:TaxRate xmlns:x='urn:x'/></NAXML-TaxRateMaintenance>"
    assert NaxmlDocumentImporter().import_tax_rates(contenido).record_count == 2


def test_importer_xml_invalido_lanza():
    with pytest.raises(ET.ParseError):
        NaxmlDocumentImporter().import_departments("<roto>")
