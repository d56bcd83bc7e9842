"""
Rendering sinks for ledger statements.

The engine hands over plain rows; formatting (currency symbol, thousand
separators) and page layout live here.
"""

from decimal import Decimal
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .config import Settings
from .models import LedgerStatement

TABLE_HEADERS = ["Month", "Due", "Paid", "Auction Credit", "Pending", "Running Due"]


def format_amount(value: Decimal, symbol: str = "Rs.") -> str:
    return f"{symbol} {value:,.2f}"


def statement_table(statement: LedgerStatement, symbol: str = "Rs.") -> list[list[str]]:
    rows = [list(TABLE_HEADERS)]
    for m in statement.months:
        rows.append([
            m.label + (" *" if m.is_winner else ""),
            format_amount(m.due, symbol),
            format_amount(m.paid, symbol),
            format_amount(m.auto_paid, symbol),
            format_amount(m.pending, symbol),
            format_amount(m.running_due, symbol),
        ])
    rows.append([
        "Total",
        format_amount(statement.total_due, symbol),
        format_amount(statement.total_paid, symbol),
        format_amount(statement.total_auto_paid, symbol),
        "",
        format_amount(statement.closing_due, symbol),
    ])
    return rows


def render_pdf(statement: LedgerStatement, settings: Settings) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        rightMargin=40, leftMargin=40, topMargin=40, bottomMargin=40,
        title="Ledger Statement",
    )
    styles = getSampleStyleSheet()
    symbol = settings.currency_symbol
    member = statement.member

    elements = [
        Paragraph(settings.company_name, styles["Title"]),
        Paragraph("LEDGER STATEMENT", styles["Heading2"]),
        Spacer(1, 10),
    ]

    period = "Full history"
    if statement.range_from or statement.range_to:
        start = statement.range_from.strftime("%d %b %Y") if statement.range_from else "Start"
        end = statement.range_to.strftime("%d %b %Y") if statement.range_to else "Today"
        period = f"{start} to {end}"

    details = Table([
        ["Name", member.name, "Group", member.group_name],
        ["Mobile", member.mobile, "Premium", format_amount(member.premium, symbol)],
        ["Enrolled", member.enrolled_at.strftime("%d %b %Y"), "Period", period],
    ], colWidths=[70, 170, 70, 170])
    details.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
    ]))
    elements.extend([details, Spacer(1, 14)])

    # repeatRows carries the header onto every page the table spills over
    table = Table(statement_table(statement, symbol), repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.darkblue),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("BACKGROUND", (0, -1), (-1, -1), colors.whitesmoke),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
    ]))
    elements.append(table)
    elements.append(Spacer(1, 8))

    notes = ["<font size=8>* Auction won; premium credited against the auction payout.</font>"]
    if statement.unallocated > 0:
        notes.append(
            f"<font size=8>Advance not yet applied: {format_amount(statement.unallocated, symbol)}</font>"
        )
    if statement.skipped_receipts:
        notes.append(
            f"<font size=8>{statement.skipped_receipts} receipt(s) excluded for an unreadable date.</font>"
        )
    notes.append(
        f"<font size=8>Generated on: {statement.generated_on.strftime('%d %b %Y')}</font>"
    )
    for note in notes:
        elements.append(Paragraph(note, styles["Normal"]))

    doc.build(elements)
    return buffer.getvalue()
