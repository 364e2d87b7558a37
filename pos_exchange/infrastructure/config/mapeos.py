"""
Mapeos y textos constantes del reporte de procesamiento.
"""
from typing import Dict, List


class TextosConstantes:
    """Textos constantes utilizados en el reporte Excel"""

    # Nombres de hojas Excel
    HOJA_PROCESAMIENTO = "PROCESAMIENTO"
    HOJA_WATCHERS = "WATCHERS"

    # Títulos (fila 1 de cada hoja)
    TITULO_PROCESAMIENTO = "ARCHIVOS PROCESADOS"
    TITULO_WATCHERS = "ESTADO DE WATCHERS"


class ColumnasReporte:
    """Columnas (en orden) y sus encabezados en español"""

    PROCESAMIENTO: Dict[str, str] = {
        'processed_at': 'FECHA',
        'store_id': 'TIENDA',
        'file_name': 'ARCHIVO',
        'status': 'ESTADO',
        'document_type': 'TIPO DOCUMENTO',
        'record_count': 'REGISTROS',
        'file_size': 'BYTES',
        'processing_time_ms': 'TIEMPO (MS)',
        'moved_to': 'MOVIDO A',
        'error_message': 'DETALLE',
        'file_hash': 'HASH',
    }

    WATCHERS: Dict[str, str] = {
        'store_id': 'TIENDA',
        'is_running': 'ACTIVO',
        'watch_path': 'CARPETA OBSERVADA',
        'processed_path': 'PROCESADOS',
        'error_path': 'ERRORES',
        'started_at': 'INICIO',
        'last_poll_at': 'ÚLTIMO SONDEO',
        'files_processed': 'PROCESADOS OK',
        'files_skipped': 'OMITIDOS',
        'files_errored': 'CON ERROR',
    }

    @classmethod
    def encabezados(cls, columnas: Dict[str, str]) -> List[str]:
        return list(columnas.values())


class ColoresEstado:
    """Color de relleno de la columna ESTADO"""
    SUCCESS = "C6EFCE"   # Verde claro
    FAILED = "FFC7CE"    # Rojo claro
    SKIPPED = "D9D9D9"   # Gris claro

    @classmethod
    def para(cls, estado: str):
        return getattr(cls, str(estado or '').upper(), None)
