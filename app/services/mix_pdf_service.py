"""
Job Mix PDF Service.
Generates a printable caldo sheet for a job.
"""
import io
from datetime import datetime
from typing import Dict, Any, Optional
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.colors import HexColor
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.enums import TA_CENTER
import logging

from app.services.pdf_branding import (
    PDFBrandingContext,
    draw_professional_letterhead,
    draw_professional_footer,
    BRAND_GREEN,
)

logger = logging.getLogger(__name__)

MIX_COLOR = HexColor(BRAND_GREEN)
TEXT_COLOR = HexColor("#374151")
DANGER_COLOR = HexColor("#ef4444")
LIGHT_BG = HexColor("#f0fdf4")
HEADER_BG = HexColor("#166534")
GRID_COLOR = HexColor("#d1d5db")


def create_job_mix_pdf(
    mix: Dict[str, Any],
    job: Optional[Dict[str, Any]] = None,
    user_name: str = "Usuario"
) -> bytes:
    """
    Generate the PDF caldo sheet.

    Args:
        mix: JobMixResult.to_dict() output
        job: Optional job header data (id, title, client_name, farm_name, cultivo)
        user_name: Name of the user requesting the sheet

    Returns:
        PDF file as bytes
    """
    job = job or {}
    buffer = io.BytesIO()
    branding = PDFBrandingContext()

    def header_footer(canvas, doc):
        draw_professional_letterhead(
            canvas, doc, branding,
            report_title="CÁLCULO DE CALDO",
            folio=f"TR-{str(job.get('id', '0'))[:8]}",
            module_color=MIX_COLOR
        )
        draw_professional_footer(canvas, doc, branding)

    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=0.6*inch,
        leftMargin=0.6*inch,
        topMargin=1.35*inch,
        bottomMargin=0.8*inch
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'MixTitle',
        parent=styles['Title'],
        fontSize=16,
        textColor=MIX_COLOR,
        spaceAfter=6,
        alignment=TA_CENTER
    )
    heading_style = ParagraphStyle(
        'MixHeading',
        parent=styles['Heading2'],
        fontSize=11,
        textColor=MIX_COLOR,
        spaceBefore=8,
        spaceAfter=4
    )
    small_style = ParagraphStyle(
        'MixSmall',
        parent=styles['Normal'],
        fontSize=7,
        textColor=TEXT_COLOR,
        spaceAfter=2
    )

    story = []
    story.append(Paragraph(job.get('title') or "Cálculo de caldo", title_style))
    story.append(Spacer(1, 4))

    header_data = [
        ["Cliente:", job.get('client_name') or "N/A", "Fecha:", datetime.now().strftime("%d/%m/%Y %H:%M")],
        ["Campo:", job.get('farm_name') or "N/A", "Usuario:", user_name],
        ["Cultivo:", job.get('cultivo') or "N/A", "Hectáreas:", f"{mix.get('hectares', 0):.2f}"],
    ]
    header_table = Table(header_data, colWidths=[0.9*inch, 2.5*inch, 0.9*inch, 2.5*inch])
    header_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (0, -1), LIGHT_BG),
        ('BACKGROUND', (2, 0), (2, -1), LIGHT_BG),
        ('TEXTCOLOR', (0, 0), (-1, -1), TEXT_COLOR),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, GRID_COLOR),
        ('PADDING', (0, 0), (-1, -1), 4),
    ]))
    story.append(header_table)
    story.append(Spacer(1, 8))

    story.append(Paragraph("Volúmenes", heading_style))
    agua = mix.get('agua_litros', 0)
    volume_data = [
        ["Dosis de caldo", f"{mix.get('dose_caldo', 0):.2f} L/ha"],
        ["Caldo total", f"{mix.get('caldo_total', 0):.2f} L"],
        ["Agua", f"{agua:.2f} L"],
        ["Productos líquidos", f"{mix.get('total_liquid_products', 0):.2f} L"],
    ]
    volume_table = Table(volume_data, colWidths=[2.2*inch, 2.0*inch])
    volume_style = [
        ('BACKGROUND', (0, 0), (0, -1), LIGHT_BG),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, GRID_COLOR),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('PADDING', (0, 0), (-1, -1), 4),
    ]
    if agua < 0:
        volume_style.append(('TEXTCOLOR', (1, 2), (1, 2), DANGER_COLOR))
    volume_table.setStyle(TableStyle(volume_style))
    story.append(volume_table)
    story.append(Spacer(1, 8))

    story.append(Paragraph("Resumen de productos", heading_style))
    products = mix.get('products', [])
    if products:
        product_data = [["#", "Producto", "Dosis", "Cantidad"]]
        for index, p in enumerate(products, 1):
            product_data.append([
                str(index),
                Paragraph(p.get('product_name', ''), small_style),
                f"{p.get('dose', 0):g} {p.get('unit', '')}",
                f"{p.get('calculated_amount', 0):.3f} {p.get('display_unit', '')}",
            ])
        product_table = Table(product_data, colWidths=[0.4*inch, 3.4*inch, 1.4*inch, 1.6*inch], repeatRows=1)
        product_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_BG),
            ('TEXTCOLOR', (0, 0), (-1, 0), HexColor("#ffffff")),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 0.5, GRID_COLOR),
            ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('PADDING', (0, 0), (-1, -1), 4),
        ]))
        story.append(product_table)
    else:
        story.append(Paragraph("Agrega agroquímicos para ver el cálculo del caldo", small_style))

    story.append(Spacer(1, 10))
    story.append(Paragraph("<b>Caldo Total</b> = Hectáreas × Dosis de Caldo", small_style))
    story.append(Paragraph("<b>Agua</b> = Caldo Total - Total Productos Líquidos", small_style))
    story.append(Paragraph("<b>Productos</b> = Dosis × Hectáreas (para unidades /ha)", small_style))

    doc.build(story, onFirstPage=header_footer, onLaterPages=header_footer)
    pdf_bytes = buffer.getvalue()
    buffer.close()
    logger.info(f"Job mix PDF generated ({len(pdf_bytes)} bytes, {len(products)} products)")
    return pdf_bytes
