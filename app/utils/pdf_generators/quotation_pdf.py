from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from app.models.quotations.quotation_models import Quotation
from app.models.settings.company_models import CompanyProfile
from app.services.quotations.quotation_status_core import classify_quotation_status

# payload keys printed in the offer body, in order
OFFER_FIELDS = (
    ("incoterm", "Incoterm"),
    ("commodity", "Commodity"),
    ("tmode", "Transport mode"),
    ("via", "Via"),
    ("border_port", "Border port"),
    ("quotation_date", "Quotation date"),
    ("validity_date", "Valid until"),
)

TEXT_BLOCKS = (
    ("include", "Included"),
    ("exclude", "Excluded"),
    ("remark", "Remarks"),
    ("additional_info", "Additional information"),
)


def _text(value) -> str:
    return escape(str(value)) if value not in (None, "") else "-"


def _company_header(company: CompanyProfile | None, locale: str | None):
    if company is None:
        return "Freight Rate Offer", []

    translations = {t.locale: t for t in company.translations}
    translation = (
        translations.get(locale or "")
        or translations.get(company.default_locale)
        or next(iter(translations.values()), None)
    )

    title = translation.display_name if translation else (company.legal_name or "Freight Rate Offer")
    lines = []
    if translation and translation.address:
        lines.append(translation.address)
    contact = " | ".join(v for v in (company.email, company.phone, company.website) if v)
    if contact:
        lines.append(contact)
    if company.registration_number:
        lines.append(f"Reg. No: {company.registration_number}")
    return title, lines


def render_quotation_pdf(
    quotation: Quotation,
    company: CompanyProfile | None = None,
    locale: str | None = None,
) -> bytes:
    """
    Render a freight rate offer for one quotation.

    Returns the PDF as bytes; nothing is written to disk.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=30,
        title=quotation.quotation_number,
    )
    styles = getSampleStyleSheet()
    elements = []
    payload = quotation.payload or {}

    # -------------------------------
    # Header
    # -------------------------------
    title, header_lines = _company_header(company, locale)
    elements.append(Paragraph(f"<b>{escape(title)}</b>", styles["Title"]))
    for line in header_lines:
        elements.append(Paragraph(escape(line), styles["Normal"]))
    elements.append(Spacer(1, 12))

    classification = classify_quotation_status(quotation.status)
    elements.append(Paragraph(f"<b>Quotation #: </b>{escape(quotation.quotation_number)}", styles["Heading2"]))
    elements.append(Paragraph(f"Status: {classification.status.value}", styles["Normal"]))
    if quotation.created_at:
        elements.append(Paragraph(f"Issue Date: {quotation.created_at.strftime('%d-%m-%Y')}", styles["Normal"]))
    elements.append(Spacer(1, 10))

    # -------------------------------
    # Shipment
    # -------------------------------
    rows = [
        ["Client", _text(quotation.client)],
        ["Origin", _text(quotation.origin)],
        ["Destination", _text(quotation.destination)],
        ["Cargo type", _text(quotation.cargo_type)],
        ["Weight (kg)", _text(quotation.weight)],
        ["Volume (m3)", _text(quotation.volume)],
    ]
    rows.extend([label, _text(payload.get(key))] for key, label in OFFER_FIELDS if payload.get(key))

    table = Table(rows, colWidths=[140, 360])
    table.setStyle(
        TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ])
    )
    elements.append(table)
    elements.append(Spacer(1, 14))

    # -------------------------------
    # Rates
    # -------------------------------
    rate_rows = [["Service", "Amount", "Currency"]]
    for rate in payload.get("customer_rates") or []:
        if isinstance(rate, dict):
            rate_rows.append([
                _text(rate.get("name")),
                _text(rate.get("amount")),
                _text(rate.get("currency")),
            ])
    rate_rows.append(["Estimated total", f"{quotation.estimated_cost:,.2f}", _text(payload.get("currency"))])

    rates = Table(rate_rows, colWidths=[280, 120, 100])
    rates.setStyle(
        TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ])
    )
    elements.append(rates)
    elements.append(Spacer(1, 16))

    # -------------------------------
    # Terms
    # -------------------------------
    for key, label in TEXT_BLOCKS:
        value = payload.get(key)
        if not value:
            continue
        if isinstance(value, (list, tuple)):
            value = "<br/>".join(f"- {escape(str(v))}" for v in value)
        else:
            value = escape(str(value))
        elements.append(Paragraph(f"<b>{label}:</b>", styles["Heading4"]))
        elements.append(Paragraph(value, styles["Normal"]))
        elements.append(Spacer(1, 8))

    elements.append(Paragraph(f"Prepared by: {escape(quotation.created_by_email)}", styles["Normal"]))

    doc.build(elements)
    return buffer.getvalue()
