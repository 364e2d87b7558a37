from unittest.mock import MagicMock, patch

import pytest

from naxml_samples import DEPARTMENT_XML, PRICEBOOK_XML, TENDER_XML, TRANSACTION_XML
from pos_exchange.application.dto.audit_dto import (
    AUDIT_STATUS_FAILED,
    AUDIT_STATUS_SUCCESS,
    SOURCE_SYSTEM_API,
    SOURCE_SYSTEM_FILE,
)
from pos_exchange.application.dto.document_dto import ImportResult, ValidationResult
from pos_exchange.application.processors.xml.xml_document_validator import NaxmlDocumentValidator
from pos_exchange.application.services import file_processor as file_processor_module
from pos_exchange.application.services.document_classifier import compute_hash
from pos_exchange.application.services.file_processor import DUPLICATE_MESSAGE, FileProcessor
from pos_exchange.domain.entities.watcher import WatcherConfig
from pos_exchange.domain.exceptions.domain_exception import FileLogError, FileLogErrorCode
from pos_exchange.domain.value_objects.processing_status import (
    DataCategory,
    DocumentType,
    FileLogStatus,
    ProcessingStatus,
)


@pytest.fixture
def carpetas(tmp_path):
    watch = tmp_path / "incoming"
    watch.mkdir()
    return {
        "watch": watch,
        "processed": tmp_path / "processed",
        "error": tmp_path / "error",
    }


@pytest.fixture
def watcher_config(carpetas):
    return WatcherConfig(
        store_id="store-1",
        watch_path=str(carpetas["watch"]),
        processed_path=str(carpetas["processed"]),
        error_path=str(carpetas["error"]),
    )


# --- Tests de modo ruta ---
def test_process_path_departamentos_exito(processor, store_context, watcher_config, carpetas, file_log, audit_store):
    """
    Verifica el flujo completo: importación, archivado con timestamp, file log y auditoría.
    """
    ruta = carpetas["watch"] / "DEPT_20250101.xml"
    ruta.write_text(DEPARTMENT_XML, encoding="utf-8")

    result = processor.process_path(ruta, store_context, watcher_config)

    assert result.status == ProcessingStatus.SUCCESS
    assert result.success is True
    assert result.document_type == "DepartmentMaintenance"
    assert result.record_count == 3
    assert result.file_hash == compute_hash(DEPARTMENT_XML)
    assert result.file_size == len(DEPARTMENT_XML.encode("utf-8"))
    assert result.processing_time_ms >= 0
    assert not ruta.exists()

    archivados = list(carpetas["processed"].iterdir())
    assert len(archivados) == 1
    assert archivados[0].name.startswith("DEPT_20250101_")
    assert archivados[0].name.endswith("Z.xml")
    assert result.moved_to == str(archivados[0])

    entrada = file_log.entries_for_store("store-1")[0]
    assert entrada.status == FileLogStatus.SUCCESS
    assert entrada.record_count == 3
    assert entrada.moved_to == result.moved_to
    assert entrada.file_type == "DepartmentMaintenance"
    assert entrada.source_path == str(ruta)

    registro = audit_store.records_for_store("store-1")[0]
    assert registro.status == AUDIT_STATUS_SUCCESS
    assert registro.source_system == SOURCE_SYSTEM_FILE
    assert registro.data_category == DataCategory.DEPARTMENT
    assert registro.exchange_id.startswith("FILE-")
    assert registro.exchange_id == registro.exchange_id.upper()
    assert registro.data_size_bytes == result.file_size
    assert registro.user_id == "user-1"


def test_process_path_duplicado_se_omite(processor, store_context, watcher_config, carpetas, file_log):
    """
    Verifica que el mismo contenido (otro nombre) se omite sin efectos secundarios.
    """
    primero = carpetas["watch"] / "a.xml"
    primero.write_text(TRANSACTION_XML, encoding="utf-8")
    assert processor.process_path(primero, store_context, watcher_config).status == ProcessingStatus.SUCCESS

    segundo = carpetas["watch"] / "b.xml"
    segundo.write_text(TRANSACTION_XML, encoding="utf-8")
    result = processor.process_path(segundo, store_context, watcher_config)

    assert result.status == ProcessingStatus.SKIPPED
    assert result.error_message == DUPLICATE_MESSAGE
    assert result.moved_to is None
    assert segundo.exists()
    assert len(file_log.entries_for_store("store-1")) == 1


def test_process_path_validacion_fallida_mueve_a_errores(processor, store_context, watcher_config, carpetas,
                                                          file_log, audit_store):
    """
    Verifica que un documento inválido termina en errores con su nombre original.
    """
    ruta = carpetas["watch"] / "roto.xml"
    ruta.write_text("<NAXML-DepartmentMaintenance><sin-cerrar>", encoding="utf-8")

    result = processor.process_path(ruta, store_context, watcher_config)

    assert result.status == ProcessingStatus.FAILED
    assert result.moved_to == str(carpetas["error"] / "roto.xml")
    assert (carpetas["error"] / "roto.xml").exists()
    assert "Invalid XML structure" in result.error_message

    entrada = file_log.entries_for_store("store-1")[0]
    assert entrada.status == FileLogStatus.FAILED
    assert entrada.error_code == "VALIDATION_FAILED"
    assert audit_store.records_for_store("store-1")[0].status == AUDIT_STATUS_FAILED


def test_process_path_archivo_ilegible(processor, store_context, watcher_config, carpetas, file_log, audit_store):
    """
    Verifica que un fallo de lectura retorna FAILED sin llamadas externas.
    """
    result = processor.process_path(carpetas["watch"] / "fantasma.xml", store_context, watcher_config)

    assert result.status == ProcessingStatus.FAILED
    assert result.file_hash == ""
    assert result.file_size == 0
    assert file_log.entries_for_store("store-1") == []
    assert audit_store.records_for_store("store-1") == []


def test_process_path_error_de_importador(store_context, watcher_config, carpetas, file_log, audit_store):
    """
    Verifica que una excepción del importador produce PROCESSING_ERROR y mueve a errores.
    """
    importer = MagicMock()
    importer.import_departments.side_effect = RuntimeError("db caída")
    validator = MagicMock()
    validator.validate.return_value = ValidationResult(
        is_valid=True, document_type=DocumentType.DEPARTMENT_MAINTENANCE, version="3.4")
    processor = FileProcessor(validator, importer, file_log, audit_store)

    ruta = carpetas["watch"] / "dept.xml"
    ruta.write_text(DEPARTMENT_XML, encoding="utf-8")
    result = processor.process_path(ruta, store_context, watcher_config)

    assert result.status == ProcessingStatus.FAILED
    assert result.error_message == "db caída"
    assert result.document_type == "DepartmentMaintenance"
    assert result.moved_to == str(carpetas["error"] / "dept.xml")
    entrada = file_log.entries_for_store("store-1")[0]
    assert entrada.error_code == "PROCESSING_ERROR"


def test_process_path_sin_config_no_archiva(processor, store_context, carpetas):
    """
    Verifica que la importación manual (sin config) no mueve el archivo.
    """
    ruta = carpetas["watch"] / "TLOG_1.xml"
    ruta.write_text(TRANSACTION_XML, encoding="utf-8")

    result = processor.process_path(ruta, store_context)

    assert result.status == ProcessingStatus.SUCCESS
    assert result.record_count == 1
    assert result.moved_to is None
    assert ruta.exists()


def test_process_path_fallo_de_archivado_conserva_exito(processor, store_context, watcher_config, carpetas, file_log):
    """
    Verifica que si el archivado falla el resultado sigue siendo SUCCESS.
    """
    ruta = carpetas["watch"] / "TLOG_1.xml"
    ruta.write_text(TRANSACTION_XML, encoding="utf-8")

    with patch.object(file_processor_module, "move_file", side_effect=OSError("disco lleno")):
        result = processor.process_path(ruta, store_context, watcher_config)

    assert result.status == ProcessingStatus.SUCCESS
    assert result.moved_to is None
    assert "archival failed" in result.error_message
    assert file_log.entries_for_store("store-1")[0].status == FileLogStatus.SUCCESS


def test_tipo_valido_sin_importador_registra_cero(processor, store_context, carpetas):
    ruta = carpetas["watch"] / "pricebook.xml"
    ruta.write_text(PRICEBOOK_XML, encoding="utf-8")

    result = processor.process_path(ruta, store_context)

    assert result.status == ProcessingStatus.SUCCESS
    assert result.record_count == 0
    assert result.document_type == "PriceBookMaintenance"


# --- Tests de modo contenido ---
def test_process_content_basura_falla_sin_tocar_disco(processor, store_context):
    """
    Verifica que contenido inválido retorna FAILED con detalle y sin acceso al disco.
    """
    with patch.object(file_processor_module, "move_file") as mock_move:
        result = processor.process_content("esto no es xml", "upload.xml", store_context)

    assert result.status == ProcessingStatus.FAILED
    assert result.error_message
    assert result.file_path == "content-import"
    assert result.moved_to is None
    mock_move.assert_not_called()


def test_process_content_exito_metadata_api(processor, store_context, audit_store, file_log):
    result = processor.process_content(TENDER_XML, "tenders.xml", store_context)

    assert result.status == ProcessingStatus.SUCCESS
    assert result.record_count == 2
    registro = audit_store.records_for_store("store-1")[0]
    assert registro.source_system == SOURCE_SYSTEM_API
    assert registro.exchange_id.startswith("CONTENT-")
    assert file_log.entries_for_store("store-1")[0].source_path == "content-import"


def test_process_content_duplicado(processor, store_context):
    processor.process_content(TENDER_XML, "tenders.xml", store_context)
    result = processor.process_content(TENDER_XML, "otra-vez.xml", store_context)

    assert result.status == ProcessingStatus.SKIPPED
    assert result.error_message == DUPLICATE_MESSAGE


def test_mismo_contenido_dos_veces_importa_una_sola_vez(file_log, audit_store, store_context):
    """
    Verifica que dos envíos idénticos invocan al importador exactamente una vez.
    """
    importer = MagicMock()
    importer.import_tender_types.return_value = ImportResult(record_count=2)
    processor = FileProcessor(
        validator=NaxmlDocumentValidator(),
        importer=importer,
        file_log=file_log,
        audit_store=audit_store,
    )

    primero = processor.process_content(TENDER_XML, "tenders.xml", store_context)
    segundo = processor.process_content(TENDER_XML, "tenders.xml", store_context)

    assert primero.status == ProcessingStatus.SUCCESS
    assert segundo.status == ProcessingStatus.SKIPPED
    assert importer.import_tender_types.call_count == 1
    assert len(file_log.entries_for_store("store-1")) == 1


def test_source_identifier_de_auditoria(processor, store_context, audit_store, carpetas):
    """
    Verifica que la auditoría identifica la ruta completa (archivo) o el nombre (contenido).
    """
    ruta = carpetas["watch"] / "TENDERS.xml"
    ruta.write_text(TENDER_XML, encoding="utf-8")

    processor.process_path(ruta, store_context)
    processor.process_content(DEPARTMENT_XML, "dept.xml", store_context)

    por_sistema = {r.source_system: r for r in audit_store.records_for_store("store-1")}
    assert por_sistema[SOURCE_SYSTEM_FILE].source_identifier == str(ruta)
    assert por_sistema[SOURCE_SYSTEM_API].source_identifier == "dept.xml"


def test_process_content_aislado_por_tienda(processor, store_context):
    """
    Verifica que el mismo contenido en otra tienda no es duplicado.
    """
    from pos_exchange.domain.value_objects.store_context import StoreContext

    processor.process_content(TENDER_XML, "tenders.xml", store_context)
    otra = StoreContext(store_id="store-2", pos_integration_id="pos-2", company_id="company-1")
    result = processor.process_content(TENDER_XML, "tenders.xml", otra)

    assert result.status == ProcessingStatus.SUCCESS


# --- Tests de best-effort ---
def test_fallo_de_auditoria_no_bloquea(file_log, store_context):
    """
    Verifica que un fallo al crear la auditoría se registra y no detiene la importación.
    """
    audit = MagicMock()
    audit.generate_exchange_id.return_value = "FILE-X-Y"
    audit.create_record.side_effect = RuntimeError("auditoría caída")
    importer = MagicMock()
    importer.import_tender_types.return_value = ImportResult(record_count=2)
    validator = MagicMock()
    validator.validate.return_value = ValidationResult(is_valid=True, document_type=DocumentType.TENDER_MAINTENANCE)

    result = FileProcessor(validator, importer, file_log, audit).process_content(TENDER_XML, "t.xml", store_context)

    assert result.status == ProcessingStatus.SUCCESS
    audit.update_record.assert_not_called()


def test_conflicto_de_hash_al_crear_entrada_es_skip(audit_store, store_context):
    """
    Verifica que DUPLICATE_HASH en create_entry se trata igual que un duplicado.
    """
    file_log = MagicMock()
    file_log.is_already_processed.return_value = False
    file_log.create_entry.side_effect = FileLogError(FileLogErrorCode.DUPLICATE_HASH, "carrera")
    validator = MagicMock()
    importer = MagicMock()

    result = FileProcessor(validator, importer, file_log, audit_store).process_content(
        TENDER_XML, "t.xml", store_context)

    assert result.status == ProcessingStatus.SKIPPED
    assert result.error_message == DUPLICATE_MESSAGE
    validator.validate.assert_not_called()
    assert audit_store.records_for_store("store-1") == []


def test_fallo_de_file_log_no_bloquea(audit_store, store_context):
    file_log = MagicMock()
    file_log.is_already_processed.return_value = False
    file_log.create_entry.side_effect = RuntimeError("sin conexión")
    validator = MagicMock()
    validator.validate.return_value = ValidationResult(is_valid=True, document_type=DocumentType.ACKNOWLEDGMENT)

    result = FileProcessor(validator, MagicMock(), file_log, audit_store).process_content(
        "<Acknowledgment/>", "ack.xml", store_context)

    assert result.status == ProcessingStatus.SUCCESS
    file_log.mark_processing_started.assert_not_called()
    file_log.mark_processing_success.assert_not_called()
