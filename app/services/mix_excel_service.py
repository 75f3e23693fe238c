"""
Job Mix Excel Export Service.
Generates the caldo sheet handed to the field crew.
"""
from io import BytesIO
from datetime import datetime
from typing import Dict, Any, Optional
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

MIX_GREEN = "16A34A"
MIX_DARK = "166534"
HEADER_BG = "DCFCE7"
NEGATIVE_RED = "DC2626"


class MixExcelService:
    """Service for generating job mix Excel sheets."""

    def __init__(self):
        self.header_fill = PatternFill(start_color=MIX_DARK, end_color=MIX_DARK, fill_type="solid")
        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.title_font = Font(bold=True, size=16, color=MIX_DARK)
        self.subtitle_font = Font(bold=True, size=12, color=MIX_DARK)
        self.light_fill = PatternFill(start_color=HEADER_BG, end_color=HEADER_BG, fill_type="solid")
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def _apply_header_style(self, ws, row_num: int, max_col: int):
        """Apply header styling to a row."""
        for col in range(1, max_col + 1):
            cell = ws.cell(row=row_num, column=col)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = self.border

    def _auto_adjust_columns(self, ws):
        for column in ws.columns:
            max_length = 0
            column_letter = get_column_letter(column[0].column)
            for cell in column:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))
            ws.column_dimensions[column_letter].width = min(max(max_length + 2, 12), 40)

    def generate_job_mix_excel(
        self,
        mix: Dict[str, Any],
        job: Optional[Dict[str, Any]] = None,
        user_name: str = "Usuario"
    ) -> BytesIO:
        """
        Generate the Excel sheet for a job mix.

        Args:
            mix: JobMixResult.to_dict() output
            job: Optional job header data (title, client, farm, cultivo)
            user_name: Name of the user requesting the sheet

        Returns:
            BytesIO with Excel file content
        """
        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_summary_sheet(wb, mix, job or {}, user_name)
        self._create_products_sheet(wb, mix)

        buffer = BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def _create_summary_sheet(self, wb, mix: Dict, job: Dict, user_name: str):
        ws = wb.create_sheet("Caldo")
        row = 1

        ws.cell(row=row, column=1, value="CÁLCULO DE CALDO").font = self.title_font
        ws.merge_cells(f'A{row}:D{row}')
        row += 1

        ws.cell(row=row, column=1, value=f"Generado: {datetime.now().strftime('%d/%m/%Y %H:%M')}").font = Font(italic=True)
        row += 2

        info_data = [
            ("Trabajo:", job.get('title') or 'Sin trabajo'),
            ("Cliente:", job.get('client_name') or 'N/A'),
            ("Campo:", job.get('farm_name') or 'N/A'),
            ("Cultivo:", job.get('cultivo') or 'N/A'),
            ("Usuario:", user_name),
            ("Hectáreas a aplicar:", round(mix.get('hectares', 0), 2)),
            ("Dosis de caldo (L/ha):", round(mix.get('dose_caldo', 0), 2)),
        ]
        if mix.get('total_job_hectares'):
            info_data.append(("Superficie del trabajo (ha):", round(mix['total_job_hectares'], 2)))

        for label, value in info_data:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=1).fill = self.light_fill
            ws.cell(row=row, column=2, value=value)
            ws.cell(row=row, column=1).border = self.border
            ws.cell(row=row, column=2).border = self.border
            row += 1

        row += 1
        ws.cell(row=row, column=1, value="VOLÚMENES (L)").font = self.subtitle_font
        row += 1

        totals = [
            ("Caldo total:", mix.get('caldo_total', 0)),
            ("Agua:", mix.get('agua_litros', 0)),
            ("Productos líquidos:", mix.get('total_liquid_products', 0)),
        ]
        for label, value in totals:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=1).fill = self.light_fill
            cell = ws.cell(row=row, column=2, value=round(value, 2))
            if value < 0:
                cell.font = Font(bold=True, color=NEGATIVE_RED)
            ws.cell(row=row, column=1).border = self.border
            cell.border = self.border
            row += 1

        self._auto_adjust_columns(ws)
        return ws

    def _create_products_sheet(self, wb, mix: Dict):
        ws = wb.create_sheet("Productos")
        headers = ["#", "Producto", "Dosis", "Unidad", "Cantidad", "Unidad total"]
        for col, header in enumerate(headers, 1):
            ws.cell(row=1, column=col, value=header)
        self._apply_header_style(ws, 1, len(headers))

        row = 2
        for index, product in enumerate(mix.get('products', []), 1):
            values = [
                index,
                product.get('product_name', ''),
                product.get('dose', 0),
                product.get('unit', ''),
                round(product.get('calculated_amount', 0), 3),
                product.get('display_unit', ''),
            ]
            for col, value in enumerate(values, 1):
                ws.cell(row=row, column=col, value=value).border = self.border
            row += 1

        if row == 2:
            ws.cell(row=row, column=1, value="Sin agroquímicos cargados")

        self._auto_adjust_columns(ws)
        return ws


mix_excel_service = MixExcelService()
