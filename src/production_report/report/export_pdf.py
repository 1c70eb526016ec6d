"""PDF export of the production report (reportlab).

Layout: a title page with the generation date, then the annual table and one
table per quarter. Reportlab's built-in fonts have no Cyrillic glyphs, so a
TTF font is registered when one is configured (`PDF_FONT_PATH`) or found in
the usual system locations.
"""
from __future__ import annotations

import io
import logging
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from production_report.errors import StorageError
from production_report.report.model import ReportModel
from production_report.report.tables import PDF_ANNUAL_COLUMNS, annual_table, quarterly_tables

log = logging.getLogger(__name__)

REPORT_TITLE = "Производственный отчет"
FONT_NAME = "ReportSans"
FALLBACK_FONT = "Helvetica"
SYSTEM_FONTS = (
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
    Path("C:/Windows/Fonts/arial.ttf"),
)
HEADER_FILL = colors.Color(41 / 255, 128 / 255, 185 / 255)


def resolve_font(font_path: Path | None = None) -> str:
    """Register a Cyrillic-capable TTF font and return its reportlab name.

    Falls back to Helvetica (no Cyrillic) when no font file is available.
    """
    if FONT_NAME in pdfmetrics.getRegisteredFontNames():
        return FONT_NAME
    candidates = [font_path] if font_path is not None else []
    candidates.extend(SYSTEM_FONTS)
    for path in candidates:
        if path.is_file():
            pdfmetrics.registerFont(TTFont(FONT_NAME, str(path)))
            log.info("Registered PDF font %s", path)
            return FONT_NAME
    log.warning("No TTF font found; Cyrillic text will not render in the PDF")
    return FALLBACK_FONT


def make_table(frame: pd.DataFrame, font: str) -> Table:
    data = [list(frame.columns)] + frame.astype(str).values.tolist()
    t = Table(data, hAlign="LEFT", repeatRows=1)
    t.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), font),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.Color(0.96, 0.96, 0.96)]),
            ]
        )
    )
    return t


def build_pdf_bytes(model: ReportModel, font_path: Path | None = None) -> bytes:
    """Render the report to PDF and return the document bytes.

    Raises:
        ValueError: if the model has no workshops to report on.
    """
    if model.is_empty:
        raise ValueError("No data to export")

    font = resolve_font(font_path)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Title"], fontName=font, fontSize=22)
    sub_style = ParagraphStyle("ReportSub", parent=styles["Normal"], fontName=font, fontSize=14, alignment=1)
    h_style = ParagraphStyle("ReportH", parent=styles["Heading2"], fontName=font, fontSize=16)

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        title=REPORT_TITLE,
    )

    generated = model.generated_at.astimezone().strftime("%d.%m.%Y")
    story = [
        Paragraph(REPORT_TITLE, title_style),
        Paragraph(f"Дата формирования: {generated}", sub_style),
        Spacer(1, 12),
        Paragraph(f"Источник: {escape(model.source_name)}", sub_style),
        PageBreak(),
        Paragraph("Годовой отчет", h_style),
        make_table(annual_table(model, PDF_ANNUAL_COLUMNS), font),
    ]
    for quarter, frame in quarterly_tables(model).items():
        story.append(Spacer(1, 18))
        story.append(Paragraph(f"Квартал {quarter}", h_style))
        story.append(make_table(frame, font))

    doc.build(story)
    return buf.getvalue()


def report_filename(when: datetime) -> str:
    return f"production_report_{when.strftime('%Y-%m-%d')}.pdf"


def export_pdf(model: ReportModel, out_dir: Path, font_path: Path | None = None) -> Path:
    """Write the PDF report into `out_dir` and return its path.

    Raises:
        StorageError: if the directory or the file cannot be written.
    """
    data = build_pdf_bytes(model, font_path)
    out_path = out_dir / report_filename(model.generated_at)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)
    except OSError as e:
        raise StorageError(f"Cannot write PDF to {out_path}: {e}") from e
    log.info("Saved: %s (%d bytes)", out_path, len(data))
    return out_path
