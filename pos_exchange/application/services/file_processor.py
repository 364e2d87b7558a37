"""
Pipeline de procesamiento de archivos/contenido de intercambio POS.

Flujo:
    1. Leer bytes (archivo o contenido recibido)
    2. Hash SHA-256
    3. Verificación durable de duplicados (file log)
    4. Pre-registro en file log + auditoría (best-effort)
    5. Validar -> importar según tipo
    6. Archivar (procesados / errores) y cerrar file log + auditoría

Los registros de file log y auditoría son observabilidad: sus fallos se
registran en el log y nunca bloquean la importación.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
import logging
import time

from pos_exchange.application.dto.audit_dto import (
    AuditRecordDTO,
    AuditUpdateDTO,
    AUDIT_STATUS_SUCCESS,
    EXCHANGE_PREFIX_FILE,
    EXCHANGE_PREFIX_CONTENT,
    SOURCE_SYSTEM_FILE,
    SOURCE_SYSTEM_API,
    ACCESS_REASON_FILE,
    ACCESS_REASON_CONTENT,
)
from pos_exchange.application.dto.document_dto import ValidationResult
from pos_exchange.application.dto.file_log_dto import FileLogEntryDTO, CONTENT_SOURCE_PATH
from pos_exchange.application.interfaces.i_audit_store import IAuditStore
from pos_exchange.application.interfaces.i_document_processing import IDocumentImporter, IDocumentValidator
from pos_exchange.application.interfaces.i_file_log_store import IFileLogStore
from pos_exchange.application.services.document_classifier import (
    compute_hash,
    detect_data_category,
    sniff_document_type,
)
from pos_exchange.domain.entities.watcher import ProcessingResult, WatcherConfig
from pos_exchange.domain.exceptions.domain_exception import FileLogError
from pos_exchange.domain.value_objects.processing_status import (
    DocumentType,
    FailureReason,
    ProcessingStatus,
)
from pos_exchange.domain.value_objects.store_context import StoreContext
from pos_exchange.infrastructure.file_system.path_guard import build_timestamped_name, move_file

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "File already processed (duplicate hash)"


@dataclass(frozen=True)
class SideCallOutcome:
    """Resultado de una llamada best-effort: valor o error (ya registrado)."""
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class _Source:
    """Origen del contenido en curso."""
    file_name: str
    source_path: str
    path: Optional[Path]
    config: Optional[WatcherConfig]

    @property
    def is_content(self) -> bool:
        return self.path is None


class FileProcessor:
    """
    Procesa un archivo (modo ruta) o un contenido (modo contenido) de una tienda.

    Uso:
        processor = FileProcessor(validator, importer, file_log, audit_store)
        result = processor.process_path(ruta, context, config)
        result = processor.process_content(xml, "dept.xml", context)
    """

    def __init__(
        self,
        validator: IDocumentValidator,
        importer: IDocumentImporter,
        file_log: IFileLogStore,
        audit_store: IAuditStore,
    ):
        self._validator = validator
        self._importer = importer
        self._file_log = file_log
        self._audit = audit_store

    # ═══════════════════════════════════════════════════════════
    # ENTRADAS PÚBLICAS
    # ═══════════════════════════════════════════════════════════

    def process_path(
        self,
        file_path: Union[str, Path],
        context: StoreContext,
        config: Optional[WatcherConfig] = None,
    ) -> ProcessingResult:
        """
        Procesa un archivo del disco.

        Args:
            file_path: Archivo a procesar
            context: Contexto de la tienda
            config: Configuración del watcher; sin ella no se archiva el archivo
                    (importación manual)

        Returns:
            ProcessingResult (nunca None)

        Raises:
            Exception: Solo si falla la verificación durable de duplicados
        """
        inicio = time.perf_counter()
        ruta = Path(file_path)
        source = _Source(ruta.name, str(ruta), ruta, config)

        try:
            data = ruta.read_bytes()
        except OSError as e:
            logger.error("No se pudo leer '%s' (tienda %s): %s", ruta, context.store_id, e)
            return self._result(
                source, inicio, ProcessingStatus.FAILED, file_hash="", file_size=0,
                error_message=f"Failed to read file: {e}",
            )

        content = data.decode('utf-8', errors='replace')
        return self._run(source, data, content, context, inicio)

    def process_content(self, content: str, file_name: str, context: StoreContext) -> ProcessingResult:
        """
        Procesa contenido recibido por API. No toca el sistema de archivos.
        """
        inicio = time.perf_counter()
        source = _Source(file_name, CONTENT_SOURCE_PATH, None, None)
        data = (content or '').encode('utf-8')
        return self._run(source, data, content or '', context, inicio)

    # ═══════════════════════════════════════════════════════════
    # PIPELINE
    # ═══════════════════════════════════════════════════════════

    def _run(
        self,
        source: _Source,
        data: bytes,
        content: str,
        context: StoreContext,
        inicio: float,
    ) -> ProcessingResult:
        file_hash = compute_hash(data)
        file_size = len(data)
        store_id = context.store_id

        if self._file_log.is_already_processed(store_id, file_hash):
            logger.info("Archivo '%s' ya procesado para tienda %s (hash duplicado), se omite",
                        source.file_name, store_id)
            return self._skipped(source, inicio, file_hash, file_size)

        tipo_previo = sniff_document_type(content)

        try:
            log_id = self._create_file_log_entry(source, context, tipo_previo, file_hash, file_size)
        except FileLogError:
            logger.info("Conflicto de hash al registrar '%s' (tienda %s), se omite",
                        source.file_name, store_id)
            return self._skipped(source, inicio, file_hash, file_size)

        audit_id = self._create_audit_record(source, context, file_hash)

        if log_id:
            self._best_effort("marcar inicio en file log", source, store_id,
                              self._file_log.mark_processing_started, log_id)

        validation: Optional[ValidationResult] = None
        try:
            validation = self._validator.validate(content)
            if not validation.is_valid:
                return self._fail(
                    source, context, inicio, file_hash, file_size, log_id, audit_id,
                    FailureReason.VALIDATION_FAILED, validation.error_summary, validation,
                )
            record_count = self._dispatch(validation.document_type, content)
        except Exception as e:
            logger.exception("Error procesando '%s' (tienda %s)", source.file_name, store_id)
            return self._fail(
                source, context, inicio, file_hash, file_size, log_id, audit_id,
                FailureReason.PROCESSING_ERROR, str(e) or e.__class__.__name__, validation,
            )

        moved_to, archive_error = self._archive_processed(source, store_id)
        elapsed = self._elapsed_ms(inicio)

        if log_id:
            self._best_effort("cerrar file log (éxito)", source, store_id,
                              self._file_log.mark_processing_success,
                              log_id, record_count, elapsed, moved_to)
        if audit_id:
            self._best_effort("cerrar auditoría (éxito)", source, store_id,
                              self._audit.update_record, audit_id,
                              AuditUpdateDTO(AUDIT_STATUS_SUCCESS, record_count, file_size, file_hash))

        logger.info("Archivo '%s' importado para tienda %s: %s, %d registros",
                    source.file_name, store_id, validation.document_type, record_count)
        return self._result(
            source, inicio, ProcessingStatus.SUCCESS, file_hash, file_size,
            document_type=self._type_name(validation),
            record_count=record_count,
            error_message=archive_error,
            moved_to=moved_to,
        )

    def _dispatch(self, document_type: Optional[DocumentType], content: str) -> int:
        """Invoca el importador del tipo; tipos sin importador retornan 0."""
        importadores: Dict[DocumentType, Callable] = {
            DocumentType.TRANSACTION_DOCUMENT: self._importer.import_transactions,
            DocumentType.DEPARTMENT_MAINTENANCE: self._importer.import_departments,
            DocumentType.TENDER_MAINTENANCE: self._importer.import_tender_types,
            DocumentType.TAX_RATE_MAINTENANCE: self._importer.import_tax_rates,
        }
        importador = importadores.get(document_type)
        if importador is None:
            logger.info("Tipo de documento '%s' válido sin importador, 0 registros", document_type)
            return 0
        return importador(content).record_count

    def _fail(
        self,
        source: _Source,
        context: StoreContext,
        inicio: float,
        file_hash: str,
        file_size: int,
        log_id: Optional[str],
        audit_id: Optional[str],
        reason: FailureReason,
        message: str,
        validation: Optional[ValidationResult],
    ) -> ProcessingResult:
        store_id = context.store_id
        elapsed = self._elapsed_ms(inicio)

        if reason == FailureReason.VALIDATION_FAILED:
            logger.warning("Validación fallida para '%s' (tienda %s): %s",
                           source.file_name, store_id, message)

        if log_id:
            self._best_effort("cerrar file log (fallo)", source, store_id,
                              self._file_log.mark_processing_failed,
                              log_id, reason.value, message, elapsed)
        if audit_id:
            self._best_effort("cerrar auditoría (fallo)", source, store_id,
                              self._audit.fail_record, audit_id, reason.value, message)

        moved_to = self._move_to_errors(source, store_id)
        return self._result(
            source, inicio, ProcessingStatus.FAILED, file_hash, file_size,
            document_type=self._type_name(validation),
            error_message=message,
            moved_to=moved_to,
        )

    # ═══════════════════════════════════════════════════════════
    # REGISTRO (FILE LOG / AUDITORÍA)
    # ═══════════════════════════════════════════════════════════

    def _create_file_log_entry(
        self,
        source: _Source,
        context: StoreContext,
        tipo_previo: DocumentType,
        file_hash: str,
        file_size: int,
    ) -> Optional[str]:
        """
        Pre-registra el archivo.

        Returns:
            log_id, o None si el registro falló (se registra y se continúa)

        Raises:
            FileLogError: Solo el conflicto DUPLICATE_HASH se propaga
        """
        entry = FileLogEntryDTO(
            store_id=context.store_id,
            pos_integration_id=context.pos_integration_id,
            file_name=source.file_name,
            file_type=tipo_previo.value,
            file_size_bytes=file_size,
            file_hash=file_hash,
            source_path=source.source_path,
        )
        try:
            return self._file_log.create_entry(entry)
        except Exception as e:
            if isinstance(e, FileLogError) and e.is_duplicate_hash:
                raise
            logger.error("No se pudo crear entrada de file log para '%s' (tienda %s): %s",
                         source.file_name, context.store_id, e)
        return None

    def _create_audit_record(self, source: _Source, context: StoreContext, file_hash: str) -> Optional[str]:
        def _crear() -> str:
            prefijo = EXCHANGE_PREFIX_CONTENT if source.is_content else EXCHANGE_PREFIX_FILE
            record = AuditRecordDTO(
                exchange_id=self._audit.generate_exchange_id(prefijo),
                store_id=context.store_id,
                company_id=context.company_id,
                data_category=detect_data_category(source.file_name),
                source_system=SOURCE_SYSTEM_API if source.is_content else SOURCE_SYSTEM_FILE,
                source_identifier=source.file_name if source.is_content else source.source_path,
                access_reason=ACCESS_REASON_CONTENT if source.is_content else ACCESS_REASON_FILE,
                user_id=context.user_id,
                metadata={
                    'file_name': source.file_name,
                    'file_hash': file_hash,
                    'source_path': source.source_path,
                    'pos_integration_id': context.pos_integration_id,
                },
            )
            return self._audit.create_record(record)

        outcome = self._best_effort("crear registro de auditoría", source, context.store_id, _crear)
        return outcome.value if outcome.ok else None

    def _best_effort(self, descripcion: str, source: _Source, store_id: str,
                     func: Callable, *args) -> SideCallOutcome:
        try:
            return SideCallOutcome(value=func(*args))
        except Exception as e:
            logger.error("Fallo al %s para '%s' (tienda %s): %s",
                         descripcion, source.file_name, store_id, e)
            return SideCallOutcome(error=e)

    # ===== Archivado =====

    def _archive_processed(self, source: _Source, store_id: str):
        """
        Mueve el archivo importado a procesados con nombre con timestamp.

        Returns:
            (moved_to, mensaje_error). Un fallo aquí conserva el éxito del
            procesamiento: los registros ya fueron importados.
        """
        if source.path is None or source.config is None or not source.config.processed_path:
            return None, None
        try:
            destino = move_file(source.path, source.config.processed_path,
                                build_timestamped_name(source.file_name))
            return str(destino), None
        except Exception as e:
            logger.error("Archivo '%s' importado pero no se pudo archivar (tienda %s): %s",
                         source.file_name, store_id, e, exc_info=True)
            return None, f"Imported successfully but archival failed: {e}"

    def _move_to_errors(self, source: _Source, store_id: str) -> Optional[str]:
        if source.path is None or source.config is None or not source.config.error_path:
            return None
        try:
            return str(move_file(source.path, source.config.error_path, source.file_name))
        except Exception as e:
            logger.error("No se pudo mover '%s' a errores (tienda %s): %s",
                         source.file_name, store_id, e)
            return None

    # ===== Resultados =====

    def _skipped(self, source: _Source, inicio: float, file_hash: str, file_size: int) -> ProcessingResult:
        return self._result(source, inicio, ProcessingStatus.SKIPPED, file_hash, file_size,
                            error_message=DUPLICATE_MESSAGE)

    def _result(
        self,
        source: _Source,
        inicio: float,
        status: ProcessingStatus,
        file_hash: str,
        file_size: int,
        document_type: Optional[str] = None,
        record_count: Optional[int] = None,
        error_message: Optional[str] = None,
        moved_to: Optional[str] = None,
    ) -> ProcessingResult:
        return ProcessingResult(
            success=status.es_exitoso,
            file_name=source.file_name,
            file_path=source.source_path,
            file_hash=file_hash,
            file_size=file_size,
            status=status,
            processing_time_ms=self._elapsed_ms(inicio),
            document_type=document_type,
            record_count=record_count,
            error_message=error_message,
            moved_to=moved_to,
        )

    @staticmethod
    def _type_name(validation: Optional[ValidationResult]) -> Optional[str]:
        if validation is None or validation.document_type is None:
            return None
        return validation.document_type.value

    @staticmethod
    def _elapsed_ms(inicio: float) -> int:
        return int((time.perf_counter() - inicio) * 1000)
