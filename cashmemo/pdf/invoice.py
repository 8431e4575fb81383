from __future__ import annotations

import logging
from decimal import Decimal

from fpdf import FPDF

from cashmemo.constants import format_display_date
from cashmemo.finance import ZERO, payable_total
from cashmemo.models import format_taka
from cashmemo.models.invoice import Invoice
from cashmemo.settings import settings
from cashmemo.words import amount_to_words

logger = logging.getLogger(__name__)

FONT = "Helvetica"

PRIMARY = (33, 37, 94)
PRIMARY_LIGHT = (236, 238, 250)
ROW_ALT = (246, 247, 252)
BORDER = (180, 184, 210)
TEXT = (30, 30, 30)
MUTED = (110, 110, 120)
WHITE = (255, 255, 255)


def _latin1(value: str) -> str:
    """Core PDF fonts only cover latin-1; replace anything else."""
    return value.encode("latin-1", errors="replace").decode("latin-1")


def _money(amount: Decimal) -> str:
    return format_taka(amount, settings.currency_symbol)


class CashMemoPDF:
    def generate(
        self,
        invoice: Invoice,
        previous_due: Decimal = ZERO,
        include_previous_due: bool = False,
    ) -> bytes:
        pdf = FPDF(format="A5")
        pdf.add_page()
        pdf.set_auto_page_break(auto=True, margin=12)
        page_w = pdf.w - pdf.l_margin - pdf.r_margin

        self._draw_header(pdf, page_w)
        self._draw_customer(pdf, page_w, invoice)
        self._draw_table(pdf, page_w, invoice)
        self._draw_totals(pdf, page_w, invoice, previous_due, include_previous_due)
        self._draw_signatures(pdf, page_w)

        output = bytes(pdf.output())
        logger.debug(
            "PDF generated: serial=%s items=%d size=%d bytes",
            invoice.serial_no,
            len(invoice.items),
            len(output),
        )
        return output

    def _draw_header(self, pdf: FPDF, page_w: float) -> None:
        x = pdf.l_margin
        y = pdf.get_y()

        # Boxed title
        box_w = 50
        pdf.set_draw_color(*PRIMARY)
        pdf.set_line_width(0.6)
        pdf.rect(x + (page_w - box_w) / 2, y, box_w, 9, "D")
        pdf.set_xy(x, y)
        pdf.set_font(FONT, "B", 11)
        pdf.set_text_color(*PRIMARY)
        pdf.cell(page_w, 9, "CASH MEMO", align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.ln(3)

        pdf.set_font(FONT, "B", 15)
        pdf.cell(page_w, 8, _latin1(settings.shop_name), align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font(FONT, "", 8)
        pdf.set_text_color(*MUTED)
        if settings.shop_tagline:
            pdf.cell(page_w, 5, _latin1(settings.shop_tagline), align="C", new_x="LMARGIN", new_y="NEXT")
        contact = "  |  ".join(part for part in (settings.shop_phone, settings.shop_address) if part)
        if contact:
            pdf.cell(page_w, 5, _latin1(contact), align="C", new_x="LMARGIN", new_y="NEXT")

        pdf.ln(2)
        pdf.set_draw_color(*PRIMARY)
        pdf.set_line_width(0.8)
        y = pdf.get_y()
        pdf.line(x, y, x + page_w, y)
        pdf.ln(4)

    def _draw_customer(self, pdf: FPDF, page_w: float, invoice: Invoice) -> None:
        half = page_w / 2
        rows = [
            ("Name", invoice.customer_name, "Memo No", invoice.serial_no),
            ("Address", invoice.customer_address or "-", "Date", format_display_date(invoice.memo_date)),
            ("Mobile", invoice.customer_mobile or "-", "", ""),
        ]
        pdf.set_text_color(*TEXT)
        for left_label, left_value, right_label, right_value in rows:
            pdf.set_font(FONT, "B", 9)
            pdf.cell(18, 6, f"{left_label}:")
            pdf.set_font(FONT, "", 9)
            pdf.cell(half - 18, 6, _latin1(left_value))
            if right_label:
                pdf.set_font(FONT, "B", 9)
                pdf.cell(20, 6, f"{right_label}:")
                pdf.set_font(FONT, "", 9)
                pdf.cell(half - 20, 6, _latin1(right_value))
            pdf.ln(6)
        pdf.ln(3)

    def _draw_table(self, pdf: FPDF, page_w: float, invoice: Invoice) -> None:
        col_no = page_w * 0.08
        col_desc = page_w * 0.42
        col_qty = page_w * 0.16
        col_rate = page_w * 0.16
        col_total = page_w * 0.18
        line_h = 7

        pdf.set_fill_color(*PRIMARY)
        pdf.set_text_color(*WHITE)
        pdf.set_font(FONT, "B", 8)
        pdf.cell(col_no, line_h, "SL", fill=True, align="C")
        pdf.cell(col_desc, line_h, " Description", fill=True)
        pdf.cell(col_qty, line_h, "Qty", fill=True, align="C")
        pdf.cell(col_rate, line_h, "Rate", fill=True, align="R")
        pdf.cell(col_total, line_h, "Amount ", fill=True, align="R", new_x="LMARGIN", new_y="NEXT")

        pdf.set_text_color(*TEXT)
        pdf.set_font(FONT, "", 8)
        for i, item in enumerate(invoice.items):
            pdf.set_fill_color(*(ROW_ALT if i % 2 == 0 else WHITE))
            pdf.cell(col_no, line_h, str(i + 1), fill=True, align="C")
            pdf.cell(col_desc, line_h, _latin1(f" {item.description}"), fill=True)
            pdf.cell(col_qty, line_h, item.quantity_label, fill=True, align="C")
            pdf.cell(col_rate, line_h, f"{item.rate:,.2f}", fill=True, align="R")
            pdf.cell(
                col_total,
                line_h,
                f"{item.total:,.2f} ",
                fill=True,
                align="R",
                new_x="LMARGIN",
                new_y="NEXT",
            )

        pdf.set_draw_color(*BORDER)
        pdf.set_line_width(0.3)
        y = pdf.get_y()
        pdf.line(pdf.l_margin, y, pdf.l_margin + page_w, y)
        pdf.ln(2)

    def _draw_total_row(self, pdf: FPDF, page_w: float, label: str, amount: Decimal, bold: bool = False) -> None:
        col_label = page_w * 0.70
        col_amount = page_w * 0.30
        pdf.set_font(FONT, "B" if bold else "", 9)
        pdf.cell(col_label, 6, f"{label}  ", align="R")
        pdf.cell(col_amount, 6, f"{_money(amount)} ", align="R", new_x="LMARGIN", new_y="NEXT")

    def _draw_totals(
        self,
        pdf: FPDF,
        page_w: float,
        invoice: Invoice,
        previous_due: Decimal,
        include_previous_due: bool,
    ) -> None:
        self._draw_total_row(pdf, page_w, "Total", invoice.grand_total, bold=True)
        if include_previous_due and previous_due:
            label = "Previous Due" if previous_due > 0 else "Advance Deposit"
            self._draw_total_row(pdf, page_w, label, abs(previous_due))
            self._draw_total_row(
                pdf,
                page_w,
                "Net Payable",
                payable_total(invoice.grand_total, previous_due, include_previous_due),
                bold=True,
            )
        self._draw_total_row(pdf, page_w, "Advance", invoice.advance)
        self._draw_total_row(pdf, page_w, "Due", invoice.due, bold=True)

        words = amount_to_words(
            payable_total(invoice.grand_total, previous_due, include_previous_due),
            currency_unit=settings.currency_unit,
            minor_unit=settings.minor_unit,
        )
        pdf.ln(3)
        pdf.set_fill_color(*PRIMARY_LIGHT)
        pdf.set_font(FONT, "B", 8)
        pdf.cell(22, 7, " In Words:", fill=True)
        pdf.set_font(FONT, "", 8)
        pdf.multi_cell(page_w - 22, 7, words, fill=True, new_x="LMARGIN", new_y="NEXT")

        if invoice.is_paid:
            pdf.ln(2)
            pdf.set_font(FONT, "B", 12)
            pdf.set_text_color(20, 130, 60)
            pdf.cell(page_w, 8, "PAID", align="C", new_x="LMARGIN", new_y="NEXT")
            pdf.set_text_color(*TEXT)

    def _draw_signatures(self, pdf: FPDF, page_w: float) -> None:
        pdf.set_y(-30)
        line_w = 40
        x_left = pdf.l_margin
        x_right = pdf.l_margin + page_w - line_w
        y = pdf.get_y() + 8

        pdf.set_font(FONT, "B", 7)
        pdf.set_text_color(*PRIMARY)
        pdf.set_xy(x_right, y - 5)
        pdf.cell(line_w, 4, _latin1(settings.shop_name.split("&")[0].strip()), align="C")

        pdf.set_draw_color(*TEXT)
        pdf.set_line_width(0.3)
        pdf.line(x_left, y, x_left + line_w, y)
        pdf.line(x_right, y, x_right + line_w, y)

        pdf.set_text_color(*MUTED)
        pdf.set_xy(x_left, y + 1)
        pdf.cell(line_w, 4, "CUSTOMER SIGN", align="C")
        pdf.set_xy(x_right, y + 1)
        pdf.cell(line_w, 4, "AUTHORIZED SIGN", align="C")
