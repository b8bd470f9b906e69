# src/generation/renderers/reportlab_renderer.py — v1
"""Reference renderer for student and semester reports using reportlab.

Layout is intentionally plain: header, identity block, one table per record
type, footer with date and signature line.
"""

from __future__ import annotations

import asyncio
import io
import re
from datetime import date
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from reportcache.generation.base_renderer import BaseRenderer
from reportcache.generation.models import SemesterReportInput, StudentReportInput

_MONTHS_ID = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)

_HEADER_BLUE = colors.HexColor("#2980b9")
_HEADER_LIGHT_BLUE = colors.HexColor("#3498db")
_HEADER_RED = colors.HexColor("#e74c3c")

_ROWS_PER_PAGE = 25


def truncate(text: str, limit: int) -> str:
    """Shorten text to limit characters, marking the cut with '...'."""
    text = text or "-"
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def format_date_id(value: date) -> str:
    """Long Indonesian date, e.g. '5 Januari 2026'."""
    return f"{value.day} {_MONTHS_ID[value.month - 1]} {value.year}"


def report_filename(student_name: str, on: date | None = None) -> str:
    """Download filename: Laporan_<Name_With_Underscores>_<YYYY-MM-DD>.pdf."""
    on = on or date.today()
    safe_name = re.sub(r"\s+", "_", student_name.strip())
    return f"Laporan_{safe_name}_{on.isoformat()}.pdf"


class ReportLabRenderer(BaseRenderer):
    """Render StudentReportInput / SemesterReportInput to PDF bytes."""

    def __init__(self) -> None:
        self._styles = getSampleStyleSheet()
        self._styles.add(ParagraphStyle(
            name="ReportTitle",
            parent=self._styles["Title"],
            fontName="Helvetica-Bold",
            fontSize=18,
            alignment=TA_CENTER,
            spaceAfter=4,
        ))
        self._styles.add(ParagraphStyle(
            name="ReportSubtitle",
            parent=self._styles["Normal"],
            fontSize=12,
            alignment=TA_CENTER,
            spaceAfter=2,
        ))
        self._styles.add(ParagraphStyle(
            name="SectionHeading",
            parent=self._styles["Heading4"],
            fontName="Helvetica-Bold",
            fontSize=11,
            spaceBefore=8,
            spaceAfter=4,
        ))

    async def render(self, render_input: Any) -> bytes:
        if isinstance(render_input, StudentReportInput):
            build = self._build_student_story
        elif isinstance(render_input, SemesterReportInput):
            build = self._build_semester_story
        else:
            raise TypeError(
                f"Unsupported render input: {type(render_input).__name__}"
            )
        return await asyncio.to_thread(self._render_sync, build, render_input)

    def page_count_hint(self, render_input: Any) -> int:
        if isinstance(render_input, StudentReportInput):
            rows = (
                len(render_input.journals)
                + len(render_input.meetings)
                + len(render_input.interventions)
            )
        elif isinstance(render_input, SemesterReportInput):
            rows = len(render_input.students)
        else:
            rows = 0
        return 1 + rows // _ROWS_PER_PAGE

    def _render_sync(self, build: Any, render_input: Any) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=self._title_for(render_input),
            invariant=1,
        )
        doc.build(build(render_input))
        return buffer.getvalue()

    @staticmethod
    def _title_for(render_input: Any) -> str:
        if isinstance(render_input, StudentReportInput):
            return f"Laporan Guru Wali - {render_input.student.name}"
        return f"Laporan Semester {render_input.semester} {render_input.academic_year}"

    # --- story builders ---

    def _p(self, text: str, style: str = "Normal") -> Paragraph:
        return Paragraph(escape(text), self._styles[style])

    def _table(
        self,
        head: list[str],
        rows: list[list[str]],
        widths_mm: list[int],
        header_color: colors.Color,
    ) -> Table:
        table = Table([head, *rows], colWidths=[w * mm for w in widths_mm], repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), header_color),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 9),
            ("FONTSIZE", (0, 1), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        return table

    def _footer(self, teacher_name: str, report_date: date | None) -> list[Any]:
        today = format_date_id(report_date or date.today())
        signature = Table(
            [["Guru Wali,"], [""], [""], [teacher_name]],
            colWidths=[60 * mm],
            hAlign="RIGHT",
        )
        return [
            Spacer(1, 8 * mm),
            self._p(f"Dibuat pada: {today}"),
            Spacer(1, 6 * mm),
            signature,
        ]

    def _build_student_story(self, data: StudentReportInput) -> list[Any]:
        student = data.student
        story: list[Any] = [
            self._p("LAPORAN GURU WALI", "ReportTitle"),
            self._p(data.school_name, "ReportSubtitle"),
            Spacer(1, 6 * mm),
            self._p("DATA SISWA", "SectionHeading"),
            self._p(f"Nama: {student.name}"),
            self._p(f"NISN: {student.nisn or '-'}"),
            self._p(f"Kelas: {student.class_name or '-'}"),
            self._p(f"Jenis Kelamin: {student.gender or '-'}"),
        ]

        if data.journals:
            story.append(self._p("JURNAL BULANAN", "SectionHeading"))
            story.append(self._table(
                ["Bulan", "Akademik", "Sosial", "Emosional", "Fisik", "Spiritual"],
                [
                    [
                        f"{j.month} {j.year}",
                        truncate(j.academic_progress, 30),
                        truncate(j.social_behavior, 30),
                        truncate(j.emotional_state, 30),
                        truncate(j.physical_health, 30),
                        truncate(j.spiritual_development, 30),
                    ]
                    for j in data.journals
                ],
                [25, 30, 30, 30, 30, 30],
                _HEADER_BLUE,
            ))

        if data.meetings:
            story.append(self._p("LOG PERTEMUAN", "SectionHeading"))
            story.append(self._table(
                ["Tanggal", "Tipe", "Topik", "Catatan"],
                [[m.date, m.type, truncate(m.topic, 40), truncate(m.notes, 50)]
                 for m in data.meetings],
                [30, 30, 50, 65],
                _HEADER_LIGHT_BLUE,
            ))

        if data.interventions:
            story.append(self._p("INTERVENSI", "SectionHeading"))
            story.append(self._table(
                ["Tanggal", "Masalah", "Tindakan", "Hasil"],
                [
                    [i.date, truncate(i.issue, 40), truncate(i.action, 40),
                     truncate(i.result, 40)]
                    for i in data.interventions
                ],
                [30, 50, 50, 45],
                _HEADER_RED,
            ))

        story.extend(self._footer(data.teacher_name, data.report_date))
        return story

    def _build_semester_story(self, data: SemesterReportInput) -> list[Any]:
        story: list[Any] = [
            self._p("LAPORAN SEMESTER", "ReportTitle"),
            self._p(data.school_name, "ReportSubtitle"),
            self._p(
                f"{data.semester} - Tahun Ajaran {data.academic_year}",
                "ReportSubtitle",
            ),
            Spacer(1, 6 * mm),
            self._p("RINGKASAN", "SectionHeading"),
            self._p(f"Total Siswa: {len(data.students)}"),
            self._p(f"Guru Wali: {data.teacher_name}"),
        ]

        if data.students:
            story.append(self._p("DAFTAR SISWA", "SectionHeading"))
            story.append(self._table(
                ["No", "NISN", "Nama", "Kelas", "Jenis Kelamin"],
                [
                    [str(idx), s.nisn or "-", s.name, s.class_name or "-",
                     s.gender or "-"]
                    for idx, s in enumerate(data.students, start=1)
                ],
                [15, 35, 60, 30, 35],
                _HEADER_BLUE,
            ))

        story.extend(self._footer(data.teacher_name, data.report_date))
        return story
