"""
Motor de sondeo por tienda.

Cada tick lista el directorio observado, filtra por patrones, descarta los
hashes ya vistos en la sesión y envía el resto al FileProcessor. Los ticks
de una misma tienda nunca se solapan (lock por tienda); tiendas distintas
son independientes.
"""
from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set
import logging
import os
import threading

from pos_exchange.application.services.document_classifier import hash_file
from pos_exchange.application.services.event_bus import EventBus, WatcherEvent
from pos_exchange.application.services.file_processor import FileProcessor
from pos_exchange.domain.entities.watcher import WatcherConfig, WatcherStatus
from pos_exchange.domain.exceptions.domain_exception import FileWatcherError, FileWatcherErrorCode
from pos_exchange.domain.value_objects.processing_status import ProcessingStatus
from pos_exchange.domain.value_objects.store_context import StoreContext
from pos_exchange.infrastructure.file_system.pattern_matcher import list_matching_files

logger = logging.getLogger(__name__)


class StorePollingEngine:
    def __init__(
        self,
        config: WatcherConfig,
        context: StoreContext,
        status: WatcherStatus,
        processor: FileProcessor,
        events: EventBus,
        processed_hashes: Optional[Set[str]] = None,
    ):
        self._config = config
        self._context = context
        self._status = status
        self._processor = processor
        self._events = events
        self._hashes: Set[str] = processed_hashes if processed_hashes is not None else set()
        self._lock = threading.Lock()

    @property
    def store_id(self) -> str:
        return self._config.store_id

    @property
    def processed_hashes(self) -> Set[str]:
        return self._hashes

    def poll(self) -> int:
        """
        Ejecuta un tick completo.

        Returns:
            Cantidad de archivos que coincidieron con los patrones
            (0 si el directorio no se pudo listar)
        """
        with self._lock:
            try:
                archivos = self._list_candidates()
            except FileWatcherError as e:
                logger.error("Tienda %s: %s", self.store_id, e)
                return 0
            except OSError as e:
                logger.error("Tienda %s: error listando '%s': %s",
                             self.store_id, self._config.watch_path, e, exc_info=True)
                return 0

            self._status.last_poll_at = datetime.now()
            self._events.emit(WatcherEvent.POLL_COMPLETED, self.store_id, len(archivos))

            for ruta in archivos:
                self._handle_file(ruta)

            return len(archivos)

    def _list_candidates(self) -> List[Path]:
        watch_path = self._config.watch_path
        if not os.path.isdir(watch_path):
            raise FileWatcherError(
                FileWatcherErrorCode.FILE_NOT_FOUND,
                f"Watch directory not found: {watch_path}",
                {'path': str(watch_path), 'store_id': self.store_id},
            )
        return list_matching_files(Path(watch_path), self._config.file_patterns)

    def _handle_file(self, ruta: Path) -> None:
        try:
            file_hash = hash_file(ruta)
            if file_hash in self._hashes:
                logger.debug("Tienda %s: '%s' ya visto en esta sesión, se omite", self.store_id, ruta.name)
                return

            self._events.emit(WatcherEvent.FILE_DETECTED, str(ruta), self.store_id)
            result = self._processor.process_path(ruta, self._context, self._config)

            if result.file_hash:
                self._hashes.add(result.file_hash)

            if result.status == ProcessingStatus.SUCCESS:
                self._status.files_processed += 1
            elif result.status == ProcessingStatus.SKIPPED:
                self._status.files_skipped += 1
            else:
                self._status.files_errored += 1

            self._events.emit(WatcherEvent.FILE_PROCESSED, result, self.store_id)

        except Exception as e:
            logger.error("Tienda %s: error inesperado con '%s': %s",
                         self.store_id, ruta.name, e, exc_info=True)
            self._status.files_errored += 1
            self._events.emit(WatcherEvent.FILE_ERROR, e, str(ruta), self.store_id)
