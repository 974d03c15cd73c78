"""Splice schedule export (Excel/CSV) and PDF splice report generator."""

import logging
from typing import Dict, List, Optional
from pathlib import Path
from dataclasses import dataclass

import pandas as pd
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib import colors
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import Table, TableStyle

from ..engine.allocator import summarize_utilization
from ..engine.identifier_codec import try_parse_identifier
from ..engine.ribbon_segmenter import (
    describe_span,
    pair_colors,
    position_in_ribbon,
    ribbon_number,
    segment_circuit,
    strand_color,
)
from ..models import Cable, CableRole, Circuit, SpliceMode


logger = logging.getLogger(__name__)


SCHEDULE_COLUMNS = [
    "Distribution Cable",
    "Circuit",
    "Dist Ribbon",
    "Dist Positions",
    "Feed Cable",
    "Feed Ribbon",
    "Feed Positions",
    "Status",
]

STRAND_COLUMNS = [
    "Distribution Cable",
    "Circuit",
    "Dist Strand",
    "Dist Ribbon",
    "Dist Color",
    "Feed Cable",
    "Feed Strand",
    "Feed Ribbon",
    "Feed Color",
]

SUMMARY_COLUMNS = [
    "Cable",
    "Role",
    "Capacity",
    "Assigned",
    "Circuits",
    "Spliced",
    "Status",
]


# ============================================================================
# TABULAR EXPORT
# ============================================================================

def _splice_sort_key(circuit: Circuit):
    """Group by prefix, then by range start; malformed identifiers last."""
    parsed = try_parse_identifier(circuit.identifier)
    if parsed is None:
        return (1, circuit.identifier, 0)
    return (0, parsed.prefix, parsed.range_start)


def _unit_color(unit: int, mode: SpliceMode) -> str:
    if mode == SpliceMode.COPPER:
        tip, ring = pair_colors(unit)
        return f"{tip}/{ring}"
    return strand_color(unit)


def _positions(start: int, end: int) -> str:
    return str(start) if start == end else f"{start}-{end}"


def build_splice_schedule(store, mode=SpliceMode.FIBER, ribbon_view: bool = True) -> pd.DataFrame:
    """
    Build the splice schedule for every Distribution cable of a mode.

    Args:
        store: CircuitStore to read
        mode: Splice mode to report
        ribbon_view: One row per ribbon segment (True) or per strand (False)

    Returns:
        DataFrame with SCHEDULE_COLUMNS or STRAND_COLUMNS
    """
    mode = SpliceMode.parse(mode)
    feed_names = {c.id: c.name for c in store.list_cables(role=CableRole.FEED, mode=mode)}
    rows = []

    for cable in store.list_cables(role=CableRole.DISTRIBUTION, mode=mode):
        spliced = [c for c in store.list_circuits(cable.id) if c.is_spliced]
        for circuit in sorted(spliced, key=_splice_sort_key):
            feed_name = feed_names.get(circuit.feed_cable_id, "")
            if ribbon_view:
                rows.extend(_segment_rows(cable, circuit, feed_name))
            else:
                rows.extend(_strand_rows(cable, circuit, feed_name, mode))

    columns = SCHEDULE_COLUMNS if ribbon_view else STRAND_COLUMNS
    return pd.DataFrame(rows, columns=columns)


def _segment_rows(cable: Cable, circuit: Circuit, feed_name: str) -> List[Dict]:
    result = segment_circuit(circuit, cable.group_size)
    if not result.is_valid:
        return [{
            "Distribution Cable": cable.name,
            "Circuit": circuit.identifier,
            "Dist Ribbon": "",
            "Dist Positions": "",
            "Feed Cable": feed_name,
            "Feed Ribbon": "",
            "Feed Positions": "",
            "Status": f"INVALID: {result.reason}",
        }]

    parsed = try_parse_identifier(circuit.identifier)
    rows = []
    for segment in result.segments:
        rows.append({
            "Distribution Cable": cable.name,
            "Circuit": f"{parsed.prefix},{segment.circuit_sub_start}-{segment.circuit_sub_end}",
            "Dist Ribbon": segment.dist_ribbon,
            "Dist Positions": _positions(segment.dist_pos_start, segment.dist_pos_end),
            "Feed Cable": feed_name,
            "Feed Ribbon": segment.feed_ribbon,
            "Feed Positions": _positions(segment.feed_pos_start, segment.feed_pos_end),
            "Status": "OK",
        })
    return rows


def _strand_rows(cable: Cable, circuit: Circuit, feed_name: str, mode: SpliceMode) -> List[Dict]:
    parsed = try_parse_identifier(circuit.identifier)
    prefix = parsed.prefix if parsed else circuit.identifier
    first_number = parsed.range_start if parsed else 1
    group_size = cable.group_size

    rows = []
    for offset in range(max(circuit.strand_count, 1)):
        dist_strand = circuit.strand_start + offset
        feed_strand = circuit.feed_strand_start + offset if circuit.has_feed_range else None
        rows.append({
            "Distribution Cable": cable.name,
            "Circuit": f"{prefix},{first_number + offset}",
            "Dist Strand": dist_strand,
            "Dist Ribbon": ribbon_number(dist_strand, group_size) if dist_strand > 0 else "",
            "Dist Color": _unit_color(position_in_ribbon(dist_strand, group_size), mode) if dist_strand > 0 else "",
            "Feed Cable": feed_name,
            "Feed Strand": feed_strand if feed_strand is not None else "",
            "Feed Ribbon": ribbon_number(feed_strand, group_size) if feed_strand else "",
            "Feed Color": _unit_color(position_in_ribbon(feed_strand, group_size), mode) if feed_strand else "",
        })
    return rows


def build_cable_summary(store, mode=SpliceMode.FIBER) -> pd.DataFrame:
    """One row per cable with capacity pass/fail status."""
    mode = SpliceMode.parse(mode)
    rows = []
    for cable in store.list_cables(mode=mode):
        circuits = store.list_circuits(cable.id)
        utilization = summarize_utilization(circuits, cable.capacity)
        rows.append({
            "Cable": cable.name,
            "Role": cable.role.value,
            "Capacity": cable.capacity,
            "Assigned": utilization.assigned_strands,
            "Circuits": len(circuits),
            "Spliced": sum(1 for c in circuits if c.is_spliced),
            "Status": "PASS" if utilization.is_complete else "FAIL",
        })
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def export_splice_schedule(store, output_path: str, mode=SpliceMode.FIBER,
                           ribbon_view: bool = True) -> str:
    """
    Write the splice schedule to Excel (.xlsx) or CSV.

    Excel output carries a Summary sheet and a Splices sheet.

    Returns:
        The written path
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    schedule = build_splice_schedule(store, mode, ribbon_view)

    if output.suffix.lower() == '.csv':
        schedule.to_csv(output, index=False)
    else:
        summary = build_cable_summary(store, mode)
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            summary.to_excel(writer, sheet_name='Summary', index=False)
            schedule.to_excel(writer, sheet_name='Splices', index=False)

    logger.info("Wrote %d splice rows to %s", len(schedule), output)
    return str(output)


# ============================================================================
# PDF REPORT
# ============================================================================

@dataclass
class ReportConfig:
    """Configuration for splice report."""
    project_name: str = "Splice Report"
    project_number: str = ""
    location: str = ""
    revision: str = "A"
    prepared_by: str = ""
    checked_by: str = ""


class SpliceReportGenerator:
    """Generates PDF splice reports."""

    ROWS_PER_PAGE = 32

    def __init__(self, config: Optional[ReportConfig] = None):
        """Initialize the report generator."""
        self.config = config or ReportConfig()

    def generate_pdf(self, store, output_path: str, mode=SpliceMode.FIBER):
        """
        Generate PDF report for all cables of a mode.

        Args:
            store: CircuitStore to report
            output_path: Output PDF file path
            mode: Splice mode to report
        """
        mode = SpliceMode.parse(mode)
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        pagesize = landscape(A4)
        c = pdf_canvas.Canvas(output_path, pagesize=pagesize)
        width, height = pagesize

        # Draw header
        y_pos = self._draw_header(c, width, height, mode)

        # Draw cable summary
        y_pos = self._draw_cable_summary(c, store, mode, y_pos, width)

        # Draw circuit listing per cable
        for cable in store.list_cables(mode=mode):
            if y_pos < 150:
                self._draw_footer(c, width)
                c.showPage()
                y_pos = height - 50
            y_pos = self._draw_cable_circuits(c, cable, store.list_circuits(cable.id), y_pos, width)

        # Draw splice schedule on new pages
        schedule = build_splice_schedule(store, mode)
        if not schedule.empty:
            self._draw_footer(c, width)
            c.showPage()
            self._draw_schedule(c, schedule, width, height)

        # Draw footer
        self._draw_footer(c, width)

        c.save()

    def _draw_header(self, c: pdf_canvas.Canvas, width: float, height: float, mode: SpliceMode) -> float:
        """Draw report header."""
        y_pos = height - 40

        c.setFont("Helvetica-Bold", 18)
        c.drawCentredString(width/2, y_pos, f"{mode.value.upper()} SPLICE REPORT")
        y_pos -= 25

        c.setFont("Helvetica", 11)
        if self.config.project_name:
            c.drawCentredString(width/2, y_pos, f"Project: {self.config.project_name}")
            y_pos -= 15

        if self.config.project_number:
            c.drawCentredString(width/2, y_pos, f"Contract: {self.config.project_number}")
            y_pos -= 15

        if self.config.location:
            c.drawCentredString(width/2, y_pos, f"Location: {self.config.location}")
            y_pos -= 15

        y_pos -= 5

        # Draw separator line
        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        c.line(50, y_pos, width - 50, y_pos)
        y_pos -= 20

        return y_pos

    def _draw_cable_summary(self, c: pdf_canvas.Canvas, store, mode: SpliceMode,
                            y_pos: float, width: float) -> float:
        """Draw cable summary section."""
        c.setFont("Helvetica-Bold", 14)
        c.drawString(50, y_pos, "CABLE SUMMARY")
        y_pos -= 25

        summary = build_cable_summary(store, mode)
        data = [SUMMARY_COLUMNS] + [[str(v) for v in row] for row in summary.itertuples(index=False)]

        table = Table(data, colWidths=[90, 90, 60, 60, 60, 60, 60])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.Color(0.2, 0.2, 0.3)),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
        ]))

        # Highlight FAIL rows
        for i, row in enumerate(data[1:], start=1):
            if row[-1] == 'FAIL':
                table.setStyle(TableStyle([
                    ('TEXTCOLOR', (-1, i), (-1, i), colors.Color(0.8, 0.1, 0.1)),
                ]))

        table_width, table_height = table.wrap(width, 400)
        table.drawOn(c, 50, y_pos - table_height)

        return y_pos - table_height - 30

    def _draw_cable_circuits(self, c: pdf_canvas.Canvas, cable: Cable, circuits: List[Circuit],
                             y_pos: float, width: float) -> float:
        """Draw circuit allocation for one cable."""
        c.setFont("Helvetica-Bold", 11)
        c.drawString(50, y_pos, f"{cable.name} ({cable.role.value}, {cable.capacity} {cable.unit_name}s)")
        y_pos -= 15

        if not circuits:
            c.setFont("Helvetica", 9)
            c.drawString(60, y_pos, "No circuits")
            return y_pos - 20

        data = [["#", "Circuit", "Strands", cable.group_name.title() + "s", "Spliced", "Feed Strands"]]
        for circuit in circuits:
            feed = ""
            if circuit.is_spliced and circuit.has_feed_range:
                feed = f"{circuit.feed_strand_start}-{circuit.feed_strand_end}"
            data.append([
                str(circuit.order_index + 1),
                circuit.identifier,
                f"{circuit.strand_start}-{circuit.strand_end}",
                describe_span(circuit.strand_start, circuit.strand_end, cable.group_size)
                if circuit.strand_count else "",
                "Yes" if circuit.is_spliced else "",
                feed,
            ])

        table = Table(data, colWidths=[30, 110, 70, 200, 50, 80])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.Color(0.7, 0.7, 0.8)),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('TOPPADDING', (0, 0), (-1, -1), 3),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
        ]))

        table_width, table_height = table.wrap(width, 500)
        table.drawOn(c, 50, y_pos - table_height)

        return y_pos - table_height - 25

    def _draw_schedule(self, c: pdf_canvas.Canvas, schedule: pd.DataFrame, width: float, height: float):
        """Draw splice schedule, paginated."""
        rows = [[str(v) for v in row] for row in schedule.itertuples(index=False)]

        for page_start in range(0, len(rows), self.ROWS_PER_PAGE):
            if page_start:
                self._draw_footer(c, width)
                c.showPage()

            y_pos = height - 50
            c.setFont("Helvetica-Bold", 12)
            title = "SPLICE SCHEDULE" if not page_start else "SPLICE SCHEDULE (continued)"
            c.drawString(50, y_pos, title)
            y_pos -= 20

            data = [SCHEDULE_COLUMNS] + rows[page_start:page_start + self.ROWS_PER_PAGE]
            table = Table(data, colWidths=[90, 90, 60, 70, 80, 60, 70, 160])
            table.setStyle(TableStyle([
                ('BACKGROUND', (0, 0), (-1, 0), colors.Color(0.7, 0.75, 0.85)),
                ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, -1), 7),
                ('TOPPADDING', (0, 0), (-1, -1), 3),
                ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
                ('GRID', (0, 0), (-1, -1), 0.3, colors.gray),
                ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.Color(0.95, 0.95, 0.95)]),
            ]))

            # Highlight invalid rows
            for i, row in enumerate(data[1:], start=1):
                if row[-1].startswith('INVALID'):
                    table.setStyle(TableStyle([
                        ('BACKGROUND', (0, i), (-1, i), colors.Color(1.0, 0.95, 0.85)),
                    ]))

            table_width, table_height = table.wrap(width - 100, height)
            table.drawOn(c, 50, y_pos - table_height)

    def _draw_footer(self, c: pdf_canvas.Canvas, width: float):
        """Draw report footer."""
        c.setFont("Helvetica", 8)
        c.setFillColor(colors.Color(0.5, 0.5, 0.5))

        footer_y = 30
        c.drawString(50, footer_y, "Generated by fibersplice")
        c.drawRightString(width - 50, footer_y, f"Rev: {self.config.revision}")

        if self.config.prepared_by:
            c.drawString(50, footer_y - 12, f"Prepared by: {self.config.prepared_by}")
        if self.config.checked_by:
            c.drawString(250, footer_y - 12, f"Checked by: {self.config.checked_by}")

        c.setFillColor(colors.black)


def generate_splice_report(
    store,
    output_path: str,
    mode=SpliceMode.FIBER,
    config: Optional[ReportConfig] = None
):
    """
    Convenience function to generate a splice report.

    Args:
        store: CircuitStore to report
        output_path: Output PDF file path
        mode: Splice mode to report
        config: Optional report configuration
    """
    generator = SpliceReportGenerator(config)
    generator.generate_pdf(store, output_path, mode)
