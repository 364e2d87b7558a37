"""
Contenedor de Dependencias (DI) sin librerías externas.

Objetivos:
- Centralizar la creación de objetos con su configuración.
- Mantener bajo acoplamiento (DIP) y facilitar pruebas (mocks/fakes).

Config, conexión DB, almacenes, bus de eventos y registro son Singleton "soft"
POR CONTENEDOR (un registro de watchers por proceso); validador, importador
y styler son Factory.
"""
from __future__ import annotations
from typing import Optional

# Config y DB
from pos_exchange.infrastructure.config.settings import AppConfig, get_config
from pos_exchange.infrastructure.database.connection import SqlServerConnection

# Almacenes (file log / auditoría)
from pos_exchange.application.interfaces.i_audit_store import IAuditStore
from pos_exchange.application.interfaces.i_file_log_store import IFileLogStore
from pos_exchange.infrastructure.repositories.in_memory_stores import InMemoryAuditStore, InMemoryFileLogStore
from pos_exchange.infrastructure.repositories.file_log_repository import SqlServerFileLogRepository
from pos_exchange.infrastructure.repositories.audit_repository import SqlServerAuditRepository

# Procesadores NAXML
from pos_exchange.application.processors.xml.xml_document_validator import NaxmlDocumentValidator
from pos_exchange.application.processors.xml.xml_document_importer import NaxmlDocumentImporter

# Servicios y orquestadores
from pos_exchange.application.services.event_bus import EventBus
from pos_exchange.application.services.file_processor import FileProcessor
from pos_exchange.application.orchestrators.watcher_registry import WatcherRegistry

# Excel
from pos_exchange.infrastructure.excel.excel_styler import ExcelStyler
from pos_exchange.infrastructure.excel.processing_report import ProcessingReportWriter


class ApplicationContainer:
    """
    Uso básico:
        container = ApplicationContainer()
        registry = container.watcher_registry()
        registry.start_watching(config, context)
    """

    def __init__(self, config: Optional[AppConfig] = None):
        # ====== SINGLETON-LIKE ======
        self._config = config
        self._db_connection: Optional[SqlServerConnection] = None
        self._file_log: Optional[IFileLogStore] = None
        self._audit: Optional[IAuditStore] = None
        self._events: Optional[EventBus] = None
        self._registry: Optional[WatcherRegistry] = None
        self._report: Optional[ProcessingReportWriter] = None

    # ---------- Config ----------
    def config(self) -> AppConfig:
        """Singleton soft de Config (Pydantic)."""
        if self._config is None:
            self._config = get_config()
        return self._config

    # ---------- DB Connection ----------
    def db_connection(self) -> SqlServerConnection:
        """Conexión compartida por los repositorios SQL (perezosa: conecta al primer uso)."""
        if self._db_connection is None:
            self._db_connection = SqlServerConnection(self.config().database)
        return self._db_connection

    # ========== ALMACENES ==========
    def file_log_store(self) -> IFileLogStore:
        if self._file_log is None:
            storage = self.config().storage
            if storage.uses_sql_server:
                self._file_log = SqlServerFileLogRepository(self.db_connection(), storage.file_log_table)
            else:
                self._file_log = InMemoryFileLogStore()
        return self._file_log

    def audit_store(self) -> IAuditStore:
        if self._audit is None:
            storage = self.config().storage
            if storage.uses_sql_server:
                self._audit = SqlServerAuditRepository(self.db_connection(), storage.audit_table)
            else:
                self._audit = InMemoryAuditStore()
        return self._audit

    # ====== NAXML ======
    def document_validator(self) -> NaxmlDocumentValidator:
        return NaxmlDocumentValidator()

    def document_importer(self) -> NaxmlDocumentImporter:
        return NaxmlDocumentImporter()

    # ========== SERVICIOS DE APLICACIÓN ==========
    def file_processor(self) -> FileProcessor:
        return FileProcessor(
            validator=self.document_validator(),
            importer=self.document_importer(),
            file_log=self.file_log_store(),
            audit_store=self.audit_store(),
        )

    def event_bus(self) -> EventBus:
        if self._events is None:
            self._events = EventBus()
        return self._events

    # ====== ORCHESTRATORS ======
    def watcher_registry(self) -> WatcherRegistry:
        if self._registry is None:
            self._registry = WatcherRegistry(
                processor=self.file_processor(),
                events=self.event_bus(),
            )
        return self._registry

    # ====== EXCEL ======
    def excel_styler(self) -> ExcelStyler:
        """Factory simple; la clase es estática pero lo exponemos para mantener patrón uniforme."""
        return ExcelStyler()

    def processing_report(self) -> ProcessingReportWriter:
        """Reporte suscrito al bus de eventos del contenedor."""
        if self._report is None:
            self._report = ProcessingReportWriter()
            self._report.attach(self.event_bus())
        return self._report

    # ====== CLEANUP ======
    def shutdown(self):
        """Detiene los watchers y cierra la conexión"""
        if self._registry is not None:
            self._registry.stop_all()
        if self._db_connection is not None:
            self._db_connection.close()
