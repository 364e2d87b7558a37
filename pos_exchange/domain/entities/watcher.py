"""
Entidades del watcher: configuración, estado vivo y resultado de procesamiento.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pos_exchange.domain.exceptions.domain_exception import ValueObjectValidationException
from pos_exchange.domain.value_objects.processing_status import ProcessingStatus

DEFAULT_FILE_PATTERNS: Tuple[str, ...] = ("*.xml",)


@dataclass(frozen=True)
class WatcherConfig:
    """
    Configuración de observación de una tienda.

    Inmutable: para cambiarla de un watcher activo hay que detenerlo y
    arrancarlo de nuevo (o usar restart_watcher).

    Attributes:
        store_id: Tienda dueña del watcher
        watch_path: Directorio que se sondea
        processed_path: Directorio de archivado de éxitos (opcional)
        error_path: Directorio para archivos fallidos (opcional)
        file_patterns: Patrones glob aceptados (ej: "*.xml")
        poll_interval_seconds: Intervalo entre sondeos
    """
    store_id: str
    watch_path: str
    processed_path: Optional[str] = None
    error_path: Optional[str] = None
    file_patterns: Tuple[str, ...] = DEFAULT_FILE_PATTERNS
    poll_interval_seconds: float = 60

    def __post_init__(self):
        if not self.store_id or not str(self.store_id).strip():
            raise ValueObjectValidationException("store_id no puede estar vacío")
        if not self.watch_path or not str(self.watch_path).strip():
            raise ValueObjectValidationException("watch_path no puede estar vacío")

        # Acepta listas desde JSON/CLI pero se guarda como tupla (inmutable)
        patrones = self.file_patterns or ()
        if isinstance(patrones, str):
            patrones = patrones.split(',')
        patrones = tuple(str(p).strip() for p in patrones if p and str(p).strip())
        if not patrones:
            raise ValueObjectValidationException("Se requiere al menos un patrón de archivo")
        object.__setattr__(self, 'file_patterns', patrones)

        if self.poll_interval_seconds is None or self.poll_interval_seconds <= 0:
            raise ValueObjectValidationException(
                f"poll_interval_seconds debe ser mayor a 0 (recibido: {self.poll_interval_seconds})"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WatcherConfig:
        """
        Construye la configuración desde un diccionario (stores.json).

        Acepta claves snake_case y camelCase.
        """
        def _get(snake: str, camel: str, default=None):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        patrones = _get('file_patterns', 'filePatterns', DEFAULT_FILE_PATTERNS)
        if isinstance(patrones, str):
            patrones = [p.strip() for p in patrones.split(',')]

        return cls(
            store_id=str(_get('store_id', 'storeId', '')),
            watch_path=_get('watch_path', 'watchPath', ''),
            processed_path=_get('processed_path', 'processedPath'),
            error_path=_get('error_path', 'errorPath'),
            file_patterns=tuple(patrones),
            poll_interval_seconds=float(_get('poll_interval_seconds', 'pollIntervalSeconds', 60)),
        )


@dataclass
class WatcherStatus:
    """
    Estado vivo de un watcher.

    Solo lo muta su motor de sondeo o el registro; los observadores
    reciben copias mediante snapshot().
    """
    store_id: str
    is_running: bool
    watch_path: str
    processed_path: Optional[str] = None
    error_path: Optional[str] = None
    last_poll_at: Optional[datetime] = None
    files_processed: int = 0
    files_errored: int = 0
    files_skipped: int = 0
    started_at: Optional[datetime] = None

    @classmethod
    def from_config(cls, config: WatcherConfig, started_at: datetime) -> WatcherStatus:
        return cls(
            store_id=config.store_id,
            is_running=True,
            watch_path=config.watch_path,
            processed_path=config.processed_path,
            error_path=config.error_path,
            started_at=started_at,
        )

    def snapshot(self) -> WatcherStatus:
        """Copia independiente del estado actual."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'store_id': self.store_id,
            'is_running': self.is_running,
            'watch_path': self.watch_path,
            'processed_path': self.processed_path,
            'error_path': self.error_path,
            'last_poll_at': self.last_poll_at.isoformat() if self.last_poll_at else None,
            'files_processed': self.files_processed,
            'files_errored': self.files_errored,
            'files_skipped': self.files_skipped,
            'started_at': self.started_at.isoformat() if self.started_at else None,
        }


@dataclass(frozen=True)
class ProcessingResult:
    """
    Resultado de procesar un archivo o contenido.

    Attributes:
        success: True solo cuando status es SUCCESS
        file_name: Nombre del archivo (o nombre declarado del contenido)
        file_path: Ruta original ("content-import" para contenido)
        file_hash: SHA-256 hex del contenido ("" si no se pudo leer)
        file_size: Tamaño en bytes
        document_type: Tipo detectado por el validador
        record_count: Registros importados
        status: SUCCESS, FAILED o SKIPPED
        error_message: Detalle del fallo o de la omisión
        processing_time_ms: Tiempo transcurrido en milisegundos
        moved_to: Ruta final del archivo si se movió
    """
    success: bool
    file_name: str
    file_path: str
    file_hash: str
    file_size: int
    status: ProcessingStatus
    processing_time_ms: int = 0
    document_type: Optional[str] = None
    record_count: Optional[int] = None
    error_message: Optional[str] = None
    moved_to: Optional[str] = None
    processed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Representación plana para reportes."""
        return {
            'file_name': self.file_name,
            'file_path': self.file_path,
            'status': self.status.value,
            'success': self.success,
            'document_type': self.document_type,
            'record_count': self.record_count,
            'file_size': self.file_size,
            'file_hash': self.file_hash,
            'processing_time_ms': self.processing_time_ms,
            'moved_to': self.moved_to,
            'error_message': self.error_message,
            'processed_at': self.processed_at,
        }
