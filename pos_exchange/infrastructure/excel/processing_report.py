"""
Reporte Excel de procesamiento para operadores.
    - Hoja PROCESAMIENTO: una fila por archivo/contenido procesado
    - Hoja WATCHERS: estado de cada watcher (opcional)
Cada hoja:
    - F1 título mergeado
    - F2+ tabla (header + datos) -> estilizada por ExcelStyler.aplicar_estilos_excel
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Dict, Any

import pandas as pd
from openpyxl import Workbook
from openpyxl.utils.dataframe import dataframe_to_rows

from pos_exchange.application.services.event_bus import EventBus, WatcherEvent
from pos_exchange.domain.entities.watcher import ProcessingResult, WatcherStatus
from pos_exchange.infrastructure.config.mapeos import ColumnasReporte, TextosConstantes
from pos_exchange.infrastructure.excel.excel_styler import ExcelStyler

logger = logging.getLogger(__name__)


class ProcessingReportWriter:
    """
    Acumula los resultados publicados en file_processed y los exporta a Excel.

    Uso:
        report = ProcessingReportWriter()
        report.attach(registry.events)
        ...
        report.write_excel(Path("reports/procesamiento.xlsx"), registry.get_all_statuses())
    """

    def __init__(self):
        self._rows: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def attach(self, events: EventBus):
        """Se suscribe a file_processed; retorna la función para desuscribirse."""
        return events.subscribe(WatcherEvent.FILE_PROCESSED, self.record)

    def record(self, result: ProcessingResult, store_id: str) -> None:
        fila = result.to_dict()
        fila['store_id'] = store_id
        with self._lock:
            self._rows.append(fila)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def to_dataframe(self) -> pd.DataFrame:
        """DataFrame con las columnas del reporte (encabezados en español)."""
        with self._lock:
            filas = list(self._rows)
        columnas = ColumnasReporte.PROCESAMIENTO
        if not filas:
            return pd.DataFrame(columns=ColumnasReporte.encabezados(columnas))
        df = pd.DataFrame(filas)
        df = df.reindex(columns=list(columnas.keys()))
        return df.rename(columns=columnas)

    @staticmethod
    def statuses_dataframe(statuses: Iterable[WatcherStatus]) -> pd.DataFrame:
        columnas = ColumnasReporte.WATCHERS
        filas = [s.to_dict() for s in statuses]
        if not filas:
            return pd.DataFrame(columns=ColumnasReporte.encabezados(columnas))
        df = pd.DataFrame(filas).reindex(columns=list(columnas.keys()))
        df['is_running'] = df['is_running'].map({True: 'SI', False: 'NO'})
        return df.rename(columns=columnas)

    def write_excel(self, ruta_excel: Path, statuses: Optional[Iterable[WatcherStatus]] = None) -> bool:
        """
        Escribe el reporte.

        Returns:
            True si se guardó el archivo
        """
        try:
            ruta_excel = Path(ruta_excel)
            ruta_excel.parent.mkdir(parents=True, exist_ok=True)
            wb = Workbook()
            if "Sheet" in wb.sheetnames:
                del wb["Sheet"]

            # ===== PROCESAMIENTO =====
            df = self.to_dataframe()
            ws = wb.create_sheet(title=TextosConstantes.HOJA_PROCESAMIENTO)
            self._escribir_hoja(ws, df, TextosConstantes.TITULO_PROCESAMIENTO,
                                group_col='TIENDA', status_col='ESTADO')

            # ===== WATCHERS =====
            if statuses is not None:
                df_w = self.statuses_dataframe(statuses)
                ws_w = wb.create_sheet(title=TextosConstantes.HOJA_WATCHERS)
                self._escribir_hoja(ws_w, df_w, TextosConstantes.TITULO_WATCHERS, group_col='TIENDA')

            wb.save(ruta_excel)
            logger.info("Reporte guardado: %s (%d filas)", ruta_excel.name, len(df))
            return True
        except Exception:
            logger.exception("Error creando reporte Excel de procesamiento")
            return False

    # ===================== Helpers privados =====================
    def _escribir_hoja(self, ws, df: pd.DataFrame, titulo: str,
                       group_col: Optional[str] = None, status_col: Optional[str] = None) -> None:
        ExcelStyler.aplicar_titulo(ws, titulo, len(df.columns))
        # Tabla desde la fila 2 (header incluido)
        for r_idx, row_data in enumerate(dataframe_to_rows(df, index=False, header=True), start=2):
            for c_idx, value in enumerate(row_data, 1):
                if isinstance(value, float) and pd.isna(value):
                    value = None
                ws.cell(row=r_idx, column=c_idx, value=value)

        group_idx = df.columns.get_loc(group_col) if group_col in df.columns else None
        status_idx = df.columns.get_loc(status_col) if status_col in df.columns else None
        ExcelStyler.aplicar_estilos_excel(ws, len(df), startrow=1,
                                          group_index=group_idx, status_index=status_idx)
