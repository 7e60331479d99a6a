"""
Report exporters: CSV, Excel (openpyxl) and PDF (reportlab).

Each exporter takes the projected headers and rows plus a `ReportInfo` and
returns the file content as bytes.
"""
import csv
import io
import logging
import os
import random
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from xml.sax.saxutils import escape

from django.conf import settings
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

logger = logging.getLogger(__name__)

DEFAULT_BRAND_NAME = 'Department of Tourism'

EXPORT_FORMATS = {
    'pdf': ('application/pdf', 'pdf'),
    'excel': ('application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'xlsx'),
    'csv': ('text/csv', 'csv'),
}


# Devanagari-capable TrueType fonts commonly found on Linux hosts
FONT_CANDIDATES = (
    '/usr/share/fonts/truetype/noto/NotoSansDevanagari-Regular.ttf',
    '/usr/share/fonts/truetype/lohit-devanagari/Lohit-Devanagari.ttf',
    '/usr/share/fonts/truetype/freefont/FreeSans.ttf',
)
FALLBACK_FONTS = ('Helvetica', 'Helvetica-Bold')


def find_report_font():
    """REPORT_PDF_FONT when set, else the first installed candidate; None when nothing is found"""
    configured = getattr(settings, 'REPORT_PDF_FONT', '')
    for path in ([configured] if configured else []) + list(FONT_CANDIDATES):
        if os.path.isfile(path):
            return path
    return None


@lru_cache(maxsize=None)
def _register_font(path):
    name = os.path.splitext(os.path.basename(path))[0]
    pdfmetrics.registerFont(TTFont(name, path))
    return name


def report_fonts(path=None):
    """
    (regular, bold) font names for PDF text.

    Helvetica has no Devanagari glyphs, so Nepali values need a registered
    TrueType font. The same face serves for bold.
    """
    path = path or find_report_font()
    if not path:
        return FALLBACK_FONTS
    try:
        name = _register_font(path)
    except (TTFError, OSError) as e:
        logger.warning(f"Could not load report font {path}: {str(e)}")
        return FALLBACK_FONTS
    return name, name


class UnsupportedExportFormat(ValueError):
    pass


@dataclass
class ReportInfo:
    title: str
    description: str = ''
    brand_name: str = DEFAULT_BRAND_NAME
    contact_line: str = ''
    generated_on: date = field(default_factory=date.today)
    ref_no: str = ''

    def __post_init__(self):
        self.brand_name = self.brand_name or DEFAULT_BRAND_NAME
        if not self.ref_no:
            self.ref_no = f'HMS/{self.generated_on.year}/{random.randint(0, 999)}'

    @property
    def generated_label(self):
        return self.generated_on.strftime('%B %d, %Y')


def report_info_from_branding(branding, title, description=''):
    """ReportInfo with the brand name and contact line of a tenant admin's branding"""
    branding = branding or {}
    contact = branding.get('contact_details') or {}
    contact_line = ' | '.join(
        str(contact[key]) for key in ('address', 'phone', 'email', 'website') if contact.get(key)
    )
    return ReportInfo(
        title=title,
        description=description,
        brand_name=branding.get('brand_name') or DEFAULT_BRAND_NAME,
        contact_line=contact_line,
    )


def export_filename(report_type, export_format, today=None):
    """`Homestay_<Type>_Report_<YYYY-MM-DD>.<ext>`, e.g. Homestay_Infrastructure_Report_2024-05-01.pdf"""
    if export_format not in EXPORT_FORMATS:
        raise UnsupportedExportFormat(f'Unsupported export format: {export_format}')
    today = today or date.today()
    label = report_type[:1].upper() + report_type[1:].replace('-', '_')
    return f'Homestay_{label}_Report_{today.isoformat()}.{EXPORT_FORMATS[export_format][1]}'


def to_csv(headers, rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    writer.writerows(rows)
    # BOM so spreadsheet apps pick up UTF-8 (Nepali text)
    return buffer.getvalue().encode('utf-8-sig')


def _column_widths(headers, rows, minimum=5, maximum=60):
    widths = []
    for index, header in enumerate(headers):
        longest = max([len(str(header))] + [len(str(row[index])) for row in rows if index < len(row)])
        widths.append(min(max(longest + 2, minimum), maximum))
    return widths


def to_excel(headers, rows, info):
    """Workbook with a `Report Info` sheet and a `Homestays` data sheet"""
    workbook = Workbook()

    info_sheet = workbook.active
    info_sheet.title = 'Report Info'
    info_lines = [
        info.brand_name,
        'Government of Nepal',
        'Homestay Management System',
        '',
        f'Report: {info.title}',
        info.description,
        '',
        f'Generated on: {info.generated_label}',
        '',
        f'Ref. No: {info.ref_no}',
    ]
    for line in info_lines:
        info_sheet.append([line])
    info_sheet['A1'].font = Font(bold=True, size=14)
    info_sheet.column_dimensions['A'].width = 80

    data_sheet = workbook.create_sheet('Homestays')
    data_sheet.append(headers)
    header_fill = PatternFill(start_color='1F4E78', end_color='1F4E78', fill_type='solid')
    for cell in data_sheet[1]:
        cell.font = Font(bold=True, color='FFFFFF')
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    for row in rows:
        data_sheet.append(row)
    for index, width in enumerate(_column_widths(headers, rows), start=1):
        data_sheet.column_dimensions[get_column_letter(index)].width = width
    data_sheet.freeze_panes = 'A2'

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _draw_page_frame(info, fonts=FALLBACK_FONTS):
    """onPage callback drawing the branding header and page-number footer"""
    regular, bold = fonts

    def draw(canvas, doc):
        page_width, page_height = doc.pagesize
        canvas.saveState()

        top = page_height - 12 * mm
        canvas.setFont(bold, 14)
        canvas.drawCentredString(page_width / 2, top, info.brand_name)
        if info.contact_line:
            canvas.setFont(regular, 9)
            canvas.drawCentredString(page_width / 2, top - 5 * mm, info.contact_line)
        canvas.setFont(bold, 11)
        canvas.drawCentredString(page_width / 2, top - 11 * mm, f'{info.title} Report')
        canvas.setFont(regular, 8)
        canvas.drawRightString(page_width - doc.rightMargin, top - 11 * mm,
                               f'Generated on: {info.generated_label}')
        canvas.setStrokeColor(colors.grey)
        canvas.line(doc.leftMargin, top - 14 * mm, page_width - doc.rightMargin, top - 14 * mm)

        canvas.setFont(regular, 8)
        canvas.drawCentredString(page_width / 2, 8 * mm, f'Page {canvas.getPageNumber()}')
        canvas.drawString(doc.leftMargin, 8 * mm, f'Ref. No: {info.ref_no}')
        canvas.restoreState()
    return draw


def to_pdf(headers, rows, info):
    """Landscape A4 table, branding header and page number on every page"""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        topMargin=32 * mm,
        bottomMargin=16 * mm,
        title=f'{info.title} Report',
        author=info.brand_name,
    )

    regular, bold = report_fonts()
    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle('ReportCell', parent=styles['Normal'], fontName=regular,
                                fontSize=7, leading=9)
    header_style = ParagraphStyle('ReportHeader', parent=cell_style, fontName=bold,
                                  textColor=colors.white)

    data = [[Paragraph(escape(str(h)), header_style) for h in headers]]
    for row in rows:
        data.append([Paragraph(escape(str(value)), cell_style) for value in row])
    if not rows:
        data.append([Paragraph('No homestays found', cell_style)] + [''] * (len(headers) - 1))

    weights = _column_widths(headers, rows, minimum=4, maximum=40)
    total = float(sum(weights)) or 1.0
    col_widths = [doc.width * weight / total for weight in weights]

    table = Table(data, colWidths=col_widths, repeatRows=1)
    commands = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1F4E78')),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F2F2F2')]),
    ]
    if not rows:
        commands.append(('SPAN', (0, 1), (-1, 1)))
    table.setStyle(TableStyle(commands))

    frame = _draw_page_frame(info, (regular, bold))
    doc.build([table], onFirstPage=frame, onLaterPages=frame)
    return buffer.getvalue()


def render_report(headers, rows, export_format, info):
    """(content, content_type) for `export_format`"""
    if export_format == 'csv':
        content = to_csv(headers, rows)
    elif export_format == 'excel':
        content = to_excel(headers, rows, info)
    elif export_format == 'pdf':
        content = to_pdf(headers, rows, info)
    else:
        raise UnsupportedExportFormat(f'Unsupported export format: {export_format}')
    logger.info(f"Rendered {export_format} report '{info.title}' with {len(rows)} rows")
    return content, EXPORT_FORMATS[export_format][0]
