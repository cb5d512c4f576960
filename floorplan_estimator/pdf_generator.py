"""
PDF Estimate Report generator.

Generates the project cost estimation document from an estimate report
dict (see PricingEngine.build_estimate). Uses fpdf2 (pure Python, no system
dependencies).

Sections:
1. Header + generation date
2. Project Summary
3. Cost Breakdown by Category
4. Detailed Bill of Quantities

Formatting is display only - the numbers in the report dict are never
rounded or altered here.
"""

from datetime import datetime

from fpdf import FPDF

from .config import settings

AREA_UNIT_LABELS = {"sqm": "m²", "sqft": "ft²"}


def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount, currency: str = "INR") -> str:
    """
    Format an amount for display: "Rs. 1,23,456.00" for INR (lakh grouping),
    "<CODE> 123,456.00" for anything else.
    Built-in PDF fonts have no rupee glyph, hence "Rs.".
    """
    try:
        value = float(amount)
    except (ValueError, TypeError):
        value = 0.0
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")
    if currency == "INR":
        grouped = _group_indian(whole)
        symbol = "Rs."
    else:
        grouped = f"{int(whole):,}"
        symbol = currency
    return f"{symbol} {sign}{grouped}.{fraction}"


def _fmt_qty(quantity) -> str:
    try:
        return f"{float(quantity):,.2f}"
    except (ValueError, TypeError):
        return "0.00"


def _safe(text: str) -> str:
    """Replace Unicode chars that can't be rendered by built-in PDF fonts (latin-1)."""
    if not text:
        return ""
    return (
        str(text)
        .replace("•", "-")    # bullet
        .replace("—", " - ")  # em dash
        .replace("–", "-")    # en dash
        .replace("₹", "Rs.")  # rupee
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


class EstimatePDF(FPDF):
    """Custom PDF class for the estimate report."""

    def __init__(self, footer_text=""):
        super().__init__()
        self.footer_text = footer_text
        self.set_auto_page_break(auto=True, margin=20)

    def header(self):
        pass  # We handle headers manually per section

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, _safe(self.footer_text), align="L")
        self.set_x(self.l_margin)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")

    def section_header(self, title):
        """Render a section header bar."""
        self.set_font("Helvetica", "B", 11)
        self.set_fill_color(51, 65, 85)
        self.set_text_color(255, 255, 255)
        self.cell(0, 8, f"  {title}", fill=True, new_x="LMARGIN", new_y="NEXT")
        self.set_text_color(0, 0, 0)
        self.ln(2)

    def table_header(self, cols):
        """Render a table header row. cols: [(label, width, align), ...]"""
        self.set_font("Helvetica", "B", 8)
        self.set_fill_color(240, 240, 240)
        for label, width, align in cols:
            self.cell(width, 6, label, border="B", fill=True, align=align)
        self.ln()

    def table_row(self, values, cols, bold=False):
        """Render a table data row using the header's widths and alignment."""
        self.set_font("Helvetica", "B" if bold else "", 8)
        for val, (_, width, align) in zip(values, cols):
            self.cell(width, 5.5, _safe(str(val)), align=align)
        self.ln()

    def key_value_row(self, label, value):
        self.set_font("Helvetica", "B", 10)
        self.cell(60, 6, _safe(label))
        self.set_font("Helvetica", "", 10)
        self.cell(0, 6, _safe(value), align="R", new_x="LMARGIN", new_y="NEXT")


def total_area_label(estimate: dict) -> str:
    """Area shown in the summary: the calibration entry if any, else the analysis area."""
    unit = estimate.get("area_unit", "sqm")
    entered = estimate.get("calibration_area")
    if entered not in (None, ""):
        value = str(entered)
    elif unit == "sqft":
        value = f"{estimate.get('total_area_sq_ft', 0.0):.1f}"
    else:
        value = f"{estimate.get('total_area_sq_m', 0.0):.1f}"
    return f"{value} {AREA_UNIT_LABELS.get(unit, unit)}"


def generate_estimate_pdf(estimate: dict) -> bytes:
    """
    Generate the estimate report PDF.

    Args:
        estimate: report dict from PricingEngine.build_estimate

    Returns:
        PDF bytes
    """
    project_settings = estimate.get("settings", {})
    currency = project_settings.get("currency", settings.DEFAULT_CURRENCY)
    total_cost = estimate.get("total_project_cost", 0.0)

    pdf = EstimatePDF(footer_text=settings.REPORT_FOOTER)
    pdf.alias_nb_pages()
    pdf.add_page()

    # ── SECTION 1: Header ──
    pdf.set_font("Helvetica", "B", 20)
    pdf.set_text_color(40, 40, 40)
    pdf.cell(0, 10, "Project Cost Estimation Report", new_x="LMARGIN", new_y="NEXT")

    created = estimate.get("generated_at", "")
    try:
        date_str = datetime.fromisoformat(created.replace("Z", "+00:00")).strftime("%B %d, %Y")
    except (ValueError, AttributeError):
        date_str = datetime.utcnow().strftime("%B %d, %Y")
    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(100, 100, 100)
    pdf.cell(0, 6, f"Generated on: {date_str}", new_x="LMARGIN", new_y="NEXT")
    pdf.set_text_color(0, 0, 0)
    pdf.ln(6)

    # ── SECTION 2: Project Summary ──
    pdf.section_header("PROJECT SUMMARY")
    pdf.key_value_row("Total Estimated Cost", format_currency(total_cost, currency))
    pdf.key_value_row("Total Area", total_area_label(estimate))
    pdf.key_value_row("Number of Rooms", str(estimate.get("room_count", 0)))
    pdf.key_value_row("Wall Height", f"{project_settings.get('wall_height_m', settings.DEFAULT_WALL_HEIGHT_M)} m")
    pdf.ln(6)

    # ── SECTION 3: Cost Breakdown ──
    pdf.section_header("COST BREAKDOWN BY CATEGORY")
    cols = [("Category", 90, "L"), ("Cost", 60, "R"), ("% of Total", 40, "R")]
    pdf.table_header(cols)
    for row in estimate.get("consolidated_report", []):
        share = (row["cost"] / total_cost * 100) if total_cost else 0.0
        pdf.table_row([row["category"], format_currency(row["cost"], currency), f"{share:.1f}%"], cols)
    pdf.table_row(["Total", format_currency(total_cost, currency), "100.0%" if total_cost else "0.0%"],
                  cols, bold=True)
    pdf.ln(6)

    # ── SECTION 4: Detailed BOQ ──
    pdf.section_header("DETAILED BILL OF QUANTITIES")
    boq_cols = [("Material Item", 70, "L"), ("Quantity", 25, "R"), ("Unit", 20, "C"),
                ("Unit Rate", 35, "R"), ("Total Cost", 40, "R")]
    pdf.table_header(boq_cols)
    for line in estimate.get("boq", []):
        if line["quantity"] <= 0:
            continue
        pdf.table_row([
            line["name"][:40],
            _fmt_qty(line["quantity"]),
            line["unit"],
            format_currency(line["unit_rate"], currency),
            format_currency(line["total_cost"], currency),
        ], boq_cols)

    return bytes(pdf.output())
