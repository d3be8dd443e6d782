# cryptogains/reporting/pdf_generator.py
import logging
from datetime import datetime
from fractions import Fraction
from typing import Any, List, Mapping, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

import cryptogains.config as app_config
from cryptogains.domain.enums import HoldingTerm
from cryptogains.domain.results import TaxEventSummary
from cryptogains.engine.aggregation import aggregate_totals
from cryptogains.reporting.console_reporter import REPORT_COLUMNS
from cryptogains.reporting.reporting_utils import format_amount_with_currency, format_usd
from cryptogains.utils.type_utils import format_quantity

logger = logging.getLogger(__name__)


class PdfReportGenerator:
    def __init__(self,
                 tax_event_summaries: List[TaxEventSummary],
                 balances: Mapping[str, Fraction],
                 source_file_name: Optional[str] = None,
                 report_version: str = app_config.REPORT_VERSION):
        self.tax_event_summaries = tax_event_summaries
        self.balances = balances
        self.source_file_name = source_file_name
        self.report_version = report_version

        self.styles = self._generate_styles()
        self.story: List[Any] = []

    def _generate_styles(self):
        styles = getSampleStyleSheet()

        styles.add(ParagraphStyle(name='H1', fontSize=16, leading=20, spaceAfter=10, alignment=TA_CENTER, fontName='Helvetica-Bold'))
        styles.add(ParagraphStyle(name='H2', fontSize=14, leading=18, spaceAfter=8, spaceBefore=12, fontName='Helvetica-Bold'))

        body_text_style = styles['BodyText']
        body_text_style.fontSize = 10
        body_text_style.leading = 12
        body_text_style.spaceAfter = 6
        body_text_style.fontName = 'Helvetica'

        styles.add(ParagraphStyle(name='Disclaimer', fontSize=8, leading=10, spaceAfter=12, alignment=TA_JUSTIFY, fontName='Helvetica'))
        styles.add(ParagraphStyle(name='TableHeader', alignment=TA_CENTER, fontSize=8, fontName='Helvetica-Bold', textColor=colors.black))
        styles.add(ParagraphStyle(name='TableCell', alignment=TA_LEFT, fontSize=8, fontName='Helvetica', textColor=colors.black))
        styles.add(ParagraphStyle(name='TableCellRight', alignment=TA_RIGHT, fontSize=8, fontName='Helvetica', textColor=colors.black))

        return styles

    def _cell(self, text: str, header: bool = False) -> Paragraph:
        if header:
            return Paragraph(text, self.styles['TableHeader'])
        # Dollar amounts and quantities are right-aligned
        if text.startswith("$") or (text[:1].isdigit()):
            return Paragraph(text, self.styles['TableCellRight'])
        return Paragraph(text, self.styles['TableCell'])

    def _create_styled_table(self, data: List[List[str]], col_widths: Optional[List[float]] = None,
                             extra_styles: Optional[List[Any]] = None, repeatRows=1) -> Table:
        styled_data = [
            [self._cell(str(cell), header=i < repeatRows) for cell in row]
            for i, row in enumerate(data)
        ]
        tbl = Table(styled_data, colWidths=col_widths, repeatRows=repeatRows)
        base_ts_cmds = [
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('LEFTPADDING', (0, 0), (-1, -1), 3),
            ('RIGHTPADDING', (0, 0), (-1, -1), 3),
            ('TOPPADDING', (0, 0), (-1, -1), 2),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ]
        if repeatRows > 0:
            base_ts_cmds.append(('BACKGROUND', (0, 0), (-1, repeatRows - 1), colors.lightgrey))
        if extra_styles:
            base_ts_cmds.extend(extra_styles)
        tbl.setStyle(TableStyle(base_ts_cmds))
        return tbl

    def _add_title_block(self):
        self.story.append(Paragraph("Capital Gains Report for Cryptocurrency Disposals", self.styles['H1']))
        self.story.append(Spacer(1, 0.5*cm))
        self.story.append(Paragraph(f"Taxpayer name: {app_config.TAXPAYER_NAME}", self.styles['BodyText']))
        if self.source_file_name:
            self.story.append(Paragraph(f"Transaction log: {self.source_file_name}", self.styles['BodyText']))
        self.story.append(Paragraph(f"Report date: {datetime.now().strftime('%Y-%m-%d')}", self.styles['BodyText']))
        self.story.append(Paragraph(f"Tool name and version: cryptogains {self.report_version}", self.styles['BodyText']))
        self.story.append(Spacer(1, 0.3*cm))
        disclaimer_text = ("This report was generated automatically from the supplied transaction log. "
                           "Lots are matched most-recently-acquired first. It is not tax advice; "
                           "check all figures before filing.")
        self.story.append(Paragraph(disclaimer_text, self.styles['Disclaimer']))

    def _add_sales_table(self):
        self.story.append(Paragraph("Sales and Trades", self.styles['H2']))
        if not self.tax_event_summaries:
            self.story.append(Paragraph("No disposals recorded.", self.styles['BodyText']))
            return

        data = [list(REPORT_COLUMNS)]
        for summary in self.tax_event_summaries:
            data.append([
                format_amount_with_currency(summary.amount, summary.currency),
                summary.acquisition_date_range,
                summary.date,
                format_usd(summary.proceeds),
                format_usd(summary.cost_basis),
                format_usd(summary.unit_sale_price),
                format_usd(summary.unit_cost_basis),
                format_usd(summary.gain),
                summary.term.value,
            ])
        col_widths = [3.2*cm, 4.6*cm, 2.2*cm, 2.6*cm, 2.6*cm, 2.4*cm, 2.4*cm, 2.6*cm, 1.4*cm]
        self.story.append(self._create_styled_table(data, col_widths=col_widths))

    def _add_totals(self):
        self.story.append(Paragraph("Totals by Term", self.styles['H2']))
        by_term, overall = aggregate_totals(self.tax_event_summaries)

        data = [["Term", "Proceeds", "Cost Basis", "Gain (or loss)"]]
        for term in HoldingTerm:
            totals = by_term[term]
            data.append([term.value, format_usd(totals.proceeds), format_usd(totals.cost_basis), format_usd(totals.gain)])
        data.append(["total", format_usd(overall.proceeds), format_usd(overall.cost_basis), format_usd(overall.gain)])

        extra = [('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold')]
        self.story.append(self._create_styled_table(data, col_widths=[3*cm, 4*cm, 4*cm, 4*cm], extra_styles=extra))

    def _add_balances(self):
        self.story.append(Paragraph("Balances", self.styles['H2']))
        data = [["Currency", "Balance"]]
        for currency in sorted(self.balances):
            data.append([currency, format_quantity(self.balances[currency])])
        self.story.append(self._create_styled_table(data, col_widths=[3*cm, 5*cm]))

    def generate_report(self, output_file_path: str):
        logger.info(f"Generating PDF report: {output_file_path}")
        doc = SimpleDocTemplate(output_file_path, pagesize=landscape(A4))

        self.story = []
        self._add_title_block()
        self._add_sales_table()
        self._add_totals()
        self._add_balances()

        try:
            doc.build(self.story)
        except Exception as e:
            logger.error(f"Error while building PDF report: {e}", exc_info=True)
            raise
        logger.info(f"PDF report written: {output_file_path}")
