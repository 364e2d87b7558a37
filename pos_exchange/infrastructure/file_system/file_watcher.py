"""
Temporizador de sondeo (polling) por tienda, sin dependencias externas.
- Un hilo daemon por watcher que espera sobre un threading.Event.
- cancel() solo impide ticks futuros; un tick en curso termina normalmente.
"""
from __future__ import annotations
from typing import Callable, Optional
import logging
import threading

logger = logging.getLogger(__name__)


class PollingTimer:
    def __init__(self, interval_sec: float, on_tick: Callable[[], None], name: Optional[str] = None):
        self._interval_sec = interval_sec
        self._on_tick = on_tick
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._name = name or "polling-timer"

    def start(self):
        def _loop():
            # wait() retorna True al cancelar: sale sin ejecutar otro tick
            while not self._stop.wait(self._interval_sec):
                try:
                    self._on_tick()
                except Exception:
                    # Evitar que caiga el hilo por excepciones del callback
                    logger.exception("Error no controlado en tick de '%s'", self._name)
        self._thread = threading.Thread(target=_loop, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self):
        self._stop.set()

    def join(self, timeout: Optional[float] = None):
        """Espera a que el hilo termine (útil en pruebas y apagado)."""
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
