"""
ExcelStyler centralizado para los reportes de procesamiento.
API estable: aplicar_estilos_excel(worksheet, data_rows, startrow=0, group_index=None, status_index=None)
"""
from __future__ import annotations
from typing import Optional, Any
from openpyxl.styles import PatternFill, Font, Border, Side, Alignment
from openpyxl.utils import get_column_letter
import logging

from pos_exchange.infrastructure.config.mapeos import ColoresEstado

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
TITLE_FONT = Font(color="FFFFFF", bold=True, size=14)
TITLE_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
THIN = Side(style="thin", color="AAAAAA")
THIN_BORDER = Border(top=THIN, bottom=THIN, left=THIN, right=THIN)
CELL_ALIGNMENT = Alignment(horizontal='left', vertical='center', wrap_text=False)
CENTER = Alignment(horizontal='center', vertical='center', wrap_text=True)

LIGHT_ORANGE_FILL = PatternFill(start_color="FFE0B2", end_color="FFE0B2", fill_type="solid")
LIGHT_BLUE_FILL   = PatternFill(start_color="DEEBF7", end_color="DEEBF7", fill_type="solid")


class ExcelStyler:
    """
    Estilo de reportes:
      - título mergeado (opcional, fila 1)
      - encabezado azul oscuro + texto blanco
      - filas alternas (naranja/azul) por grupo (ej: TIENDA)
      - celda de ESTADO coloreada según SUCCESS / FAILED / SKIPPED
      - bordes finos y autoajuste de columnas
    """

    @staticmethod
    def aplicar_titulo(worksheet: Any, texto: str, columnas: int, row: int = 1) -> None:
        columnas = max(columnas, 1)
        if columnas > 1:
            worksheet.merge_cells(start_row=row, start_column=1, end_row=row, end_column=columnas)
        cell = worksheet.cell(row=row, column=1, value=texto)
        cell.fill = TITLE_FILL
        cell.font = TITLE_FONT
        cell.alignment = CENTER

    @staticmethod
    def aplicar_estilos_excel(
        worksheet: Any,
        data_rows: int,
        startrow: int = 0,
        group_index: Optional[int] = None,
        status_index: Optional[int] = None,
    ) -> None:
        try:
            if data_rows <= 0:
                logger.debug(f"[ExcelStyler] Sin filas para estilizar en '{worksheet.title}'.")
                return

            header_row = startrow + 1  # openpyxl es 1-based
            max_col = 0
            for cell in worksheet[header_row]:
                if cell.value is not None:
                    max_col = cell.column
            if max_col == 0:
                logger.warning(f"[ExcelStyler] No se detectaron encabezados en '{worksheet.title}'.")
                return

            # --- Encabezado ---
            for col in range(1, max_col + 1):
                cell = worksheet.cell(row=header_row, column=col)
                cell.fill = HEADER_FILL
                cell.font = HEADER_FONT
                cell.border = THIN_BORDER
                cell.alignment = CENTER

            # --- Filas de datos (alternando por grupo si viene índice) ---
            current_group = None
            use_orange = True
            for r in range(header_row + 1, header_row + data_rows + 1):
                if group_index is not None:
                    group_cell = worksheet.cell(row=r, column=group_index + 1)
                    if group_cell.value != current_group:
                        current_group = group_cell.value
                        use_orange = not use_orange

                fill = LIGHT_ORANGE_FILL if use_orange else LIGHT_BLUE_FILL
                for c in range(1, max_col + 1):
                    cell = worksheet.cell(row=r, column=c)
                    cell.border = THIN_BORDER
                    cell.alignment = CENTER if c <= 8 else CELL_ALIGNMENT
                    cell.fill = fill

                if status_index is not None:
                    status_cell = worksheet.cell(row=r, column=status_index + 1)
                    color = ColoresEstado.para(status_cell.value)
                    if color:
                        status_cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")

            # --- Auto ancho de columnas ---
            _col_widths = {}
            for r in range(header_row, header_row + data_rows + 1):
                for c in range(1, max_col + 1):
                    v = worksheet.cell(row=r, column=c).value
                    if v is None:
                        continue
                    _col_widths[c] = max(_col_widths.get(c, 0), len(str(v)))

            for c, w in _col_widths.items():
                worksheet.column_dimensions[get_column_letter(c)].width = max(min(w + 3, 60), 12)

            logger.info(f"[ExcelStyler] Estilo aplicado a '{worksheet.title}' (rows={data_rows}, startrow={startrow}).")

        except Exception as e:
            logger.error(f"[ExcelStyler] Error al aplicar estilos: {e}", exc_info=True)
