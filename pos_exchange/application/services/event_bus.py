"""
Bus de eventos síncrono (pub/sub) del watcher.

Los manejadores se ejecutan en el mismo hilo que emite. Una excepción de
un manejador se registra y NO interrumpe el ciclo de sondeo.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, List
import logging
import threading

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class WatcherEvent(str, Enum):
    """
    Eventos publicados y sus argumentos:
        FILE_DETECTED(path, store_id)
        FILE_PROCESSED(result, store_id)
        FILE_ERROR(error, path, store_id)
        WATCHER_STARTED(store_id)
        WATCHER_STOPPED(store_id)
        POLL_COMPLETED(store_id, files_found)
    """
    FILE_DETECTED = "file_detected"
    FILE_PROCESSED = "file_processed"
    FILE_ERROR = "file_error"
    WATCHER_STARTED = "watcher_started"
    WATCHER_STOPPED = "watcher_stopped"
    POLL_COMPLETED = "poll_completed"

    @classmethod
    def from_string(cls, value: str) -> WatcherEvent:
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Evento desconocido: '{value}'")


class EventBus:
    def __init__(self):
        self._handlers: Dict[WatcherEvent, List[Handler]] = {e: [] for e in WatcherEvent}
        self._lock = threading.Lock()

    def subscribe(self, event, handler: Handler) -> Callable[[], None]:
        """
        Registra un manejador.

        Returns:
            Función que cancela la suscripción
        """
        evento = event if isinstance(event, WatcherEvent) else WatcherEvent.from_string(event)
        with self._lock:
            self._handlers[evento].append(handler)
        return lambda: self.unsubscribe(evento, handler)

    def unsubscribe(self, event, handler: Handler) -> None:
        evento = event if isinstance(event, WatcherEvent) else WatcherEvent.from_string(event)
        with self._lock:
            try:
                self._handlers[evento].remove(handler)
            except ValueError:
                pass

    def handler_count(self, event: WatcherEvent) -> int:
        with self._lock:
            return len(self._handlers[event])

    def emit(self, event: WatcherEvent, *args: Any) -> None:
        # Copia para permitir (des)suscripciones dentro de un manejador
        with self._lock:
            handlers = list(self._handlers[event])
        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                logger.exception("Error en manejador del evento '%s'", event.value)
