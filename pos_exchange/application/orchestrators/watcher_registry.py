"""
Registro de watchers por tienda (multi-tenant).

Responsabilidades:
- Ciclo de vida de los watchers (start/stop/restart) con validación de rutas.
- Mantener config, contexto, estado y hashes de sesión por tienda.
- Exponer el bus de eventos y los puntos de entrada de importación manual.

Un tick en curso al detener un watcher termina normalmente y puede emitir
eventos aunque la tienda ya no esté registrada.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Union
import logging
import os
import threading

from pos_exchange.application.orchestrators.polling_engine import StorePollingEngine
from pos_exchange.application.services.event_bus import EventBus, WatcherEvent
from pos_exchange.application.services.file_processor import FileProcessor
from pos_exchange.domain.entities.watcher import ProcessingResult, WatcherConfig, WatcherStatus
from pos_exchange.domain.exceptions.domain_exception import (
    FileWatcherError,
    FileWatcherErrorCode,
    ValueObjectValidationException,
)
from pos_exchange.domain.value_objects.store_context import MANUAL_IMPORT_SENTINEL, StoreContext
from pos_exchange.infrastructure.file_system.file_watcher import PollingTimer
from pos_exchange.infrastructure.file_system.path_guard import (
    ensure_directory_exists,
    has_traversal,
    validate_path,
)

logger = logging.getLogger(__name__)


@dataclass
class WatcherHandle:
    """Temporizador activo + motor de una tienda."""
    engine: StorePollingEngine
    timer: PollingTimer


class WatcherRegistry:
    """
    Uso básico:
        registry = WatcherRegistry(processor)
        registry.on("file_processed", lambda result, store_id: ...)
        registry.start_watching(config, context)
        ...
        registry.stop_all()
    """

    def __init__(
        self,
        processor: FileProcessor,
        events: Optional[EventBus] = None,
        timer_factory: Callable[..., PollingTimer] = PollingTimer,
    ):
        self._processor = processor
        self.events = events or EventBus()
        self._timer_factory = timer_factory

        self._configs: Dict[str, WatcherConfig] = {}
        self._contexts: Dict[str, StoreContext] = {}
        self._statuses: Dict[str, WatcherStatus] = {}
        self._hashes: Dict[str, Set[str]] = {}
        self._handles: Dict[str, WatcherHandle] = {}
        # Solo protege mutaciones de los mapas; nunca se mantiene durante un tick
        self._lock = threading.RLock()

    def on(self, event: Union[str, WatcherEvent], handler: Callable) -> Callable[[], None]:
        """Atajo de events.subscribe()."""
        return self.events.subscribe(event, handler)

    # ═══════════════════════════════════════════════════════════
    # CICLO DE VIDA
    # ═══════════════════════════════════════════════════════════

    def start_watching(self, config: WatcherConfig, context: StoreContext) -> None:
        """
        Inicia el watcher de una tienda y ejecuta un sondeo inmediato.

        Raises:
            FileWatcherError: WATCHER_ALREADY_RUNNING, PATH_TRAVERSAL,
                FILE_NOT_FOUND, PERMISSION_DENIED o INVALID_PATH
            ValueObjectValidationException: Si el contexto es de otra tienda
        """
        store_id = config.store_id
        if context.store_id != store_id:
            raise ValueObjectValidationException(
                f"El contexto ({context.store_id}) no corresponde a la tienda {store_id}"
            )

        with self._lock:
            if store_id in self._handles:
                raise FileWatcherError(
                    FileWatcherErrorCode.WATCHER_ALREADY_RUNNING,
                    f"Watcher already running for store {store_id}",
                    {'store_id': store_id},
                )

            self._validate_paths(config)

            status = WatcherStatus.from_config(config, started_at=datetime.now())
            hashes: Set[str] = set()
            engine = StorePollingEngine(config, context, status, self._processor, self.events, hashes)
            timer = self._timer_factory(
                config.poll_interval_seconds, engine.poll, name=f"watcher-{store_id}"
            )

            self._configs[store_id] = config
            self._contexts[store_id] = context
            self._statuses[store_id] = status
            self._hashes[store_id] = hashes
            self._handles[store_id] = WatcherHandle(engine=engine, timer=timer)
            timer.start()

        logger.info("Watcher iniciado para tienda %s en '%s' (cada %ss, patrones: %s)",
                    store_id, config.watch_path, config.poll_interval_seconds,
                    ', '.join(config.file_patterns))
        self.events.emit(WatcherEvent.WATCHER_STARTED, store_id)

        engine.poll()

    def start_watcher(self, store_id: str, config: Optional[WatcherConfig] = None) -> None:
        """
        Inicia una tienda desde la config/contexto preparados (update_config/set_context).

        Raises:
            FileWatcherError: WATCHER_NOT_FOUND si falta config o contexto
        """
        with self._lock:
            config = config or self._configs.get(store_id)
            context = self._contexts.get(store_id)
        if config is None or context is None:
            raise FileWatcherError(
                FileWatcherErrorCode.WATCHER_NOT_FOUND,
                f"No configuration or context registered for store {store_id}",
                {'store_id': store_id},
            )
        self.start_watching(config, context)

    def stop_watching(self, store_id: str) -> None:
        """
        Detiene el watcher. Un tick en curso termina normalmente.

        Raises:
            FileWatcherError: WATCHER_NOT_FOUND si no hay watcher activo
        """
        with self._lock:
            handle = self._handles.pop(store_id, None)
            if handle is None:
                raise FileWatcherError(
                    FileWatcherErrorCode.WATCHER_NOT_FOUND,
                    f"No watcher running for store {store_id}",
                    {'store_id': store_id},
                )
            handle.timer.cancel()
            self._configs.pop(store_id, None)
            self._contexts.pop(store_id, None)
            self._hashes.pop(store_id, None)
            status = self._statuses.get(store_id)
            if status is not None:
                status.is_running = False

        logger.info("Watcher detenido para tienda %s", store_id)
        self.events.emit(WatcherEvent.WATCHER_STOPPED, store_id)

    def stop_all(self, join_timeout: Optional[float] = 5.0) -> None:
        """
        Detiene todos los watchers y espera a que terminen sus hilos.

        Args:
            join_timeout: Segundos máximos de espera por hilo (None = sin límite)
        """
        with self._lock:
            handles = dict(self._handles)
        for store_id in handles:
            try:
                self.stop_watching(store_id)
            except FileWatcherError:
                # Detenido en paralelo por otro hilo
                logger.debug("Watcher %s ya detenido", store_id)
        # Un tick en curso termina antes de que el hilo salga
        for handle in handles.values():
            handle.timer.join(join_timeout)
        if handles:
            logger.info("Detenidos %d watchers", len(handles))

    def restart_watcher(self, store_id: str) -> None:
        """
        Reinicia con la config/contexto almacenados.

        Raises:
            FileWatcherError: WATCHER_NOT_FOUND si no hay config/contexto guardados
        """
        with self._lock:
            config = self._configs.get(store_id)
            context = self._contexts.get(store_id)
        if config is None or context is None:
            raise FileWatcherError(
                FileWatcherErrorCode.WATCHER_NOT_FOUND,
                f"No stored configuration for store {store_id}",
                {'store_id': store_id},
            )

        if self.is_watching_store(store_id):
            self.stop_watching(store_id)
        self.start_watching(config, context)

    def poll_store(self, store_id: str) -> int:
        """
        Ejecuta un tick inmediato (sincrónico) de una tienda activa.

        Returns:
            Archivos que coincidieron con los patrones
        """
        with self._lock:
            handle = self._handles.get(store_id)
        if handle is None:
            raise FileWatcherError(
                FileWatcherErrorCode.WATCHER_NOT_FOUND,
                f"No watcher running for store {store_id}",
                {'store_id': store_id},
            )
        return handle.engine.poll()

    # ═══════════════════════════════════════════════════════════
    # CONSULTAS Y CONFIGURACIÓN
    # ═══════════════════════════════════════════════════════════

    def get_status(self, store_id: str) -> Optional[WatcherStatus]:
        with self._lock:
            status = self._statuses.get(store_id)
            return status.snapshot() if status is not None else None

    def get_all_statuses(self) -> List[WatcherStatus]:
        with self._lock:
            return [s.snapshot() for s in self._statuses.values()]

    def is_watching_store(self, store_id: str) -> bool:
        with self._lock:
            return store_id in self._handles

    def update_config(self, store_id: str, config: WatcherConfig) -> None:
        """Reemplaza la config guardada sin tocar el temporizador activo."""
        if config.store_id != store_id:
            raise ValueObjectValidationException(
                f"La configuración ({config.store_id}) no corresponde a la tienda {store_id}"
            )
        with self._lock:
            self._configs[store_id] = config

    def set_context(self, store_id: str, context: StoreContext) -> None:
        """Reemplaza el contexto guardado (último en escribir gana)."""
        if context.store_id != store_id:
            raise ValueObjectValidationException(
                f"El contexto ({context.store_id}) no corresponde a la tienda {store_id}"
            )
        with self._lock:
            self._contexts[store_id] = context

    def get_context(self, store_id: str) -> Optional[StoreContext]:
        with self._lock:
            return self._contexts.get(store_id)

    # ═══════════════════════════════════════════════════════════
    # IMPORTACIÓN MANUAL / CONTENIDO
    # ═══════════════════════════════════════════════════════════

    def process_file(self, file_path: Union[str, Path], context: StoreContext) -> ProcessingResult:
        """Procesa un archivo puntual para un contexto explícito (sin archivado)."""
        return self._processor.process_path(file_path, context)

    def queue_manual_import(
        self,
        store_id: str,
        file_path: Union[str, Path],
        file_type: Optional[str] = None,
        context: Optional[StoreContext] = None,
    ) -> ProcessingResult:
        """
        Importación manual de un archivo.

        Contexto: explícito -> registrado para la tienda -> mínimo ("manual-import").
        """
        contexto = context or self.get_context(store_id) or StoreContext.minimal(store_id)
        if contexto.is_minimal:
            logger.warning("Tienda %s sin contexto registrado: se usa el contexto mínimo '%s'",
                           store_id, MANUAL_IMPORT_SENTINEL)
        logger.info("Importación manual para tienda %s: '%s' (tipo indicado: %s)",
                    store_id, file_path, file_type or 'auto')
        return self._processor.process_path(file_path, contexto)

    def process_content(
        self,
        store_id: str,
        content: str,
        file_name: str,
        context: StoreContext,
    ) -> ProcessingResult:
        """
        Importa contenido recibido por API. No usa el sistema de archivos ni
        los hashes de sesión; solo la verificación durable de duplicados.
        """
        if context.store_id != store_id:
            logger.warning("process_content: store_id %s difiere del contexto (%s), se usa el contexto",
                           store_id, context.store_id)
        return self._processor.process_content(content, file_name, context)

    # ===== Validación de rutas =====

    def _validate_paths(self, config: WatcherConfig) -> None:
        validate_path(config.watch_path)
        if not os.path.isdir(config.watch_path):
            raise FileWatcherError(
                FileWatcherErrorCode.INVALID_PATH,
                f"Watch path is not a directory: {config.watch_path}",
                {'path': str(config.watch_path)},
            )

        for destino in (config.processed_path, config.error_path):
            if not destino:
                continue
            if has_traversal(destino):
                raise FileWatcherError(
                    FileWatcherErrorCode.PATH_TRAVERSAL,
                    "Path traversal detected",
                    {'path': str(destino)},
                )
            ensure_directory_exists(destino)
