from __future__ import annotations

import io
import logging

import qrcode
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .model import PensionApplication

logger = logging.getLogger(__name__)


def certificate_number(app: PensionApplication) -> str:
    issued = app.approved_at or app.created_at
    return f"PEN-{issued:%Y%m%d}-{app.application_id:06d}"


def _money(value) -> str:
    return f"{value:,.0f}"


def _qr_image(data: str) -> Image:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return Image(buf, width=3.5 * cm, height=3.5 * cm)


def render_certificate(app: PensionApplication, *, holder_name: str) -> bytes:
    """Render the pension certificate of an approved application as PDF bytes."""
    if app.pension_details is None:
        raise ValueError("Only approved applications have a pension certificate")

    personal = app.details.personal_info
    service = app.details.service_info
    bank = app.details.bank_info
    nominee = app.details.nominee_info
    details = app.pension_details
    number = certificate_number(app)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
        title=f"Pension Certificate {number}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "CertTitle",
        parent=styles["Heading1"],
        fontSize=20,
        alignment=TA_CENTER,
        textColor=colors.HexColor("#1e3a8a"),
        spaceAfter=6,
    )
    subtitle_style = ParagraphStyle(
        "CertSubtitle",
        parent=styles["Normal"],
        fontSize=12,
        alignment=TA_CENTER,
        textColor=colors.HexColor("#475569"),
    )
    section_style = ParagraphStyle("CertSection", parent=styles["Heading3"], spaceBefore=12)
    small_style = ParagraphStyle("CertSmall", parent=styles["Normal"], fontSize=8, alignment=TA_CENTER)

    def _table(rows):
        table = Table(rows, colWidths=[6 * cm, 10 * cm])
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cbd5e1")),
                    ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#f1f5f9")),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return table

    content = [
        Paragraph("Government Pension Certificate", title_style),
        Paragraph(f"Certificate No. <b>{number}</b>", subtitle_style),
        Spacer(1, 16),
        Paragraph("Pension Holder", section_style),
        _table(
            [
                ["Name", personal.full_name or holder_name],
                ["NID", personal.nid],
                ["Employee ID", service.employee_id],
                ["Department", service.department or "N/A"],
                ["Designation", service.designation or "N/A"],
                ["Service years", f"{service.service_years or 0:g}"],
                ["Pension type", service.pension_type.value.title()],
            ]
        ),
        Paragraph("Pension Benefits", section_style),
        _table(
            [
                ["Last basic salary", _money(service.last_basic_salary)],
                ["Monthly pension", _money(details.monthly_pension)],
                ["Gratuity", _money(details.gratuity)],
                ["Provident fund", _money(details.provident_fund)],
                ["Calculated on", f"{details.calculated_at:%d %B %Y}"],
            ]
        ),
        Paragraph("Payment and Nominee", section_style),
        _table(
            [
                ["Bank", bank.bank_name or "N/A"],
                ["Branch", bank.branch_name or "N/A"],
                ["Account number", bank.account_number or "N/A"],
                ["Nominee", nominee.nominee_name or "N/A"],
                ["Relation", nominee.nominee_relation.value if nominee.nominee_relation else "N/A"],
            ]
        ),
        Spacer(1, 20),
        _qr_image(number),
        Spacer(1, 6),
        Paragraph(
            f"Approved on {(app.approved_at or details.calculated_at):%d %B %Y}. "
            "This certificate is generated electronically and needs no signature.",
            small_style,
        ),
    ]

    doc.build(content)
    logger.info("Rendered pension certificate %s", number)
    return buffer.getvalue()
