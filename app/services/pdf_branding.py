"""Letterhead and footer drawing for generated PDF sheets."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter

BRAND_GREEN = "#16a34a"


@dataclass
class PDFBrandingContext:
    company_name: str = "AgroJobs"
    company_tagline: Optional[str] = "Operaciones de pulverización y mapeo"
    company_address: Optional[str] = None
    company_email: Optional[str] = None
    company_phone: Optional[str] = None


def draw_professional_letterhead(canvas, doc, branding: PDFBrandingContext,
                                 report_title: str = "", folio: str = "",
                                 module_color=None) -> None:
    """Company band at the top of every page."""
    color = module_color or HexColor(BRAND_GREEN)
    width, height = doc.pagesize if doc is not None else letter

    canvas.saveState()
    canvas.setFillColor(color)
    canvas.rect(0, height - 0.9 * 72, width, 0.9 * 72, fill=1, stroke=0)

    canvas.setFillColor(HexColor("#ffffff"))
    canvas.setFont("Helvetica-Bold", 14)
    canvas.drawString(0.6 * 72, height - 0.45 * 72, branding.company_name)
    if branding.company_tagline:
        canvas.setFont("Helvetica", 8)
        canvas.drawString(0.6 * 72, height - 0.65 * 72, branding.company_tagline)

    if report_title:
        canvas.setFont("Helvetica-Bold", 10)
        canvas.drawRightString(width - 0.6 * 72, height - 0.45 * 72, report_title)
    if folio:
        canvas.setFont("Helvetica", 8)
        canvas.drawRightString(width - 0.6 * 72, height - 0.65 * 72, folio)
    canvas.restoreState()


def draw_professional_footer(canvas, doc, branding: PDFBrandingContext) -> None:
    width, _ = doc.pagesize if doc is not None else letter
    contact = " | ".join(
        part for part in (branding.company_address, branding.company_email, branding.company_phone) if part
    )

    canvas.saveState()
    canvas.setFont("Helvetica", 7)
    canvas.setFillColor(HexColor("#6b7280"))
    canvas.drawString(0.6 * 72, 0.4 * 72, contact or branding.company_name)
    canvas.drawRightString(
        width - 0.6 * 72, 0.4 * 72,
        f"Página {canvas.getPageNumber()} - {datetime.now().strftime('%d/%m/%Y %H:%M')}"
    )
    canvas.restoreState()
