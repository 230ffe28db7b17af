from __future__ import annotations
from datetime import datetime, timezone
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from ..checks.base import ComplianceReport

STATUS_COLORS = {
    "PASS": colors.HexColor("#d4edda"),
    "FAIL": colors.HexColor("#f8d7da"),
    "UNKNOWN": colors.HexColor("#fff3cd"),
}


def build_pdf(path: str, report: ComplianceReport, resource_group: str, subscription_id: str, tool_version: str = "1.0"):
    styles = getSampleStyleSheet()
    cell = styles["BodyText"].clone("cell", fontSize=7, leading=9)
    doc = SimpleDocTemplate(path, pagesize=landscape(A4), rightMargin=28, leftMargin=28, topMargin=28, bottomMargin=28)

    story = []
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

    story.append(Paragraph("Azure Resource Compliance Report", styles["Title"]))
    story.append(Spacer(1, 10))
    story.append(Paragraph(f"<b>Generated:</b> {now}", styles["Normal"]))
    story.append(Paragraph(f"<b>Subscription:</b> {escape(subscription_id)}", styles["Normal"]))
    story.append(Paragraph(f"<b>Resource group:</b> {escape(resource_group)}", styles["Normal"]))
    if report.scope:
        story.append(Paragraph(f"<b>Scope:</b> {escape(report.scope)}", styles["Normal"]))
    story.append(Paragraph(f"<b>Tool version:</b> {tool_version}", styles["Normal"]))
    story.append(Spacer(1, 12))

    summary_data = [
        ["Status", "Count"],
        ["PASS", str(report.passed_count)],
        ["FAIL", str(report.failed_count)],
        ["UNKNOWN", str(len(report.unknown))],
        ["RESULT", "COMPLIANT" if report.compliant else "NON-COMPLIANT"],
    ]
    t = Table(summary_data, hAlign="LEFT")
    t.setStyle(TableStyle([
        ("BACKGROUND", (0,0), (-1,0), colors.lightgrey),
        ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
    ]))
    story.append(Paragraph("Executive Summary", styles["Heading2"]))
    story.append(t)
    story.append(Spacer(1, 14))

    story.append(Paragraph("Findings", styles["Heading2"]))
    story.append(Paragraph("One row per evaluated check and resource, in evaluation order.", styles["Normal"]))
    story.append(Spacer(1, 8))

    rows = [["Check", "Phase", "Status", "Resource", "Result", "Remediation / Evidence"]]
    style_cmds = [
        ("BACKGROUND", (0,0), (-1,0), colors.lightgrey),
        ("GRID", (0,0), (-1,-1), 0.3, colors.grey),
        ("VALIGN", (0,0), (-1,-1), "TOP"),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
        ("FONTSIZE", (0,0), (-1,-1), 7),
    ]
    for i, x in enumerate(report.findings, start=1):
        rem_ev = escape(x.remediation or "")
        if x.evidence:
            # UNKNOWN evidence carries a traceback; the first line is enough here
            rem_ev += "<br/><br/><b>Evidence:</b> " + escape(x.evidence.splitlines()[0])
        rows.append([
            x.check_id,
            x.phase,
            x.status,
            Paragraph(escape(x.resource or x.category), cell),
            Paragraph(escape(x.message), cell),
            Paragraph(rem_ev, cell),
        ])
        style_cmds.append(("BACKGROUND", (2,i), (2,i), STATUS_COLORS.get(x.status, colors.white)))

    tbl = Table(rows, repeatRows=1, colWidths=[60, 65, 50, 110, 200, 300])
    tbl.setStyle(TableStyle(style_cmds))
    story.append(tbl)

    doc.build(story)
