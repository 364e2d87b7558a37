import hashlib

import pytest

from pos_exchange.application.services.document_classifier import (
    compute_hash,
    detect_data_category,
    find_root_name,
    hash_file,
    sniff_document_type,
)
from pos_exchange.domain.value_objects.processing_status import DataCategory, DocumentType


# --- Tests de hash ---
def test_compute_hash_sha256_hex():
    """
    Verifica que el hash es SHA-256 en hexadecimal y que str se codifica en UTF-8.
    """
    esperado = hashlib.sha256("<a>ñ</a>".encode("utf-8")).hexdigest()
    assert compute_hash("<a>ñ</a>") == esperado
    assert compute_hash("<a>ñ</a>".encode("utf-8")) == esperado
    assert len(esperado) == 64


def test_hash_file_igual_a_compute_hash(tmp_path):
    ruta = tmp_path / "doc.xml"
    contenido = b"<x>" + b"0" * 200_000 + b"</x>"
    ruta.write_bytes(contenido)

    assert hash_file(ruta) == compute_hash(contenido)


# --- Tests de categoría de datos ---
@pytest.mark.parametrize("nombre, categoria", [
    ("TLOG_20250101.xml", DataCategory.TRANSACTION),
    ("Transactions.xml", DataCategory.TRANSACTION),
    ("dept_export.xml", DataCategory.DEPARTMENT),
    ("TENDERS.xml", DataCategory.TENDER_TYPE),
    ("payment_types.xml", DataCategory.TENDER_TYPE),
    ("tax_rates.xml", DataCategory.TAX_RATE),
    ("pricebook.xml", DataCategory.PRICEBOOK),
    ("PLU_update.xml", DataCategory.PRICEBOOK),
    ("cashiers.xml", DataCategory.EMPLOYEE),
    ("config.xml", DataCategory.SYSTEM_CONFIG),
])
def test_detect_data_category(nombre, categoria):
    assert detect_data_category(nombre) == categoria


def test_detect_data_category_respeta_orden_de_reglas():
    """
    'trans' gana sobre 'tax' porque la regla de transacciones va primero.
    """
    assert detect_data_category("trans_tax.xml") == DataCategory.TRANSACTION


# --- Tests de pre-clasificación ---
def test_find_root_name_ignora_declaracion_y_comentarios():
    contenido = '<?xml version="1.0"?>\n<!-- export -->\n<!DOCTYPE x>\n<ns:NAXML-TenderMaintenance/>'
    assert find_root_name(contenido) == "NAXML-TenderMaintenance"


def test_find_root_name_comentario_sin_cerrar():
    assert find_root_name("<!-- sin cierre <Root/>") is None


def test_sniff_document_type_detecta_por_contenido_del_nombre():
    assert sniff_document_type("<NAXML-DepartmentMaintenance/>") == DocumentType.DEPARTMENT_MAINTENANCE


def test_sniff_document_type_por_defecto_transaccion():
    """
    Verifica que contenido no reconocible se pre-clasifica como TransactionDocument.
    """
    assert sniff_document_type("esto no es xml") == DocumentType.TRANSACTION_DOCUMENT
    assert sniff_document_type("") == DocumentType.TRANSACTION_DOCUMENT
