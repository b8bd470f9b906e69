# src/generation/models.py — v1
"""Generation models: progress events and report render inputs."""

from __future__ import annotations

from datetime import date
from typing import Callable, Literal

from pydantic import BaseModel, Field

ProgressStage = Literal["preparing", "rendering", "finalizing", "complete"]


class GenerationProgress(BaseModel):
    """Ephemeral progress event; emitted to a callback, never stored."""

    stage: ProgressStage
    percent: int = Field(ge=0, le=100)
    message: str


ProgressCallback = Callable[[GenerationProgress], None]


# === Render inputs ===


class StudentInfo(BaseModel):
    id: str
    name: str
    nisn: str = ""
    class_name: str = ""
    gender: str = ""


class JournalEntry(BaseModel):
    """One monthly journal, already summarised per development aspect."""

    month: str
    year: int
    academic_progress: str = "-"
    social_behavior: str = "-"
    emotional_state: str = "-"
    physical_health: str = "-"
    spiritual_development: str = "-"


class MeetingLog(BaseModel):
    date: str
    type: str
    topic: str
    notes: str = "-"


class Intervention(BaseModel):
    date: str
    issue: str
    action: str
    result: str = "Dalam proses"


class StudentReportInput(BaseModel):
    """Everything needed to render one student's report."""

    kind: Literal["student"] = "student"
    student: StudentInfo
    journals: list[JournalEntry] = Field(default_factory=list)
    meetings: list[MeetingLog] = Field(default_factory=list)
    interventions: list[Intervention] = Field(default_factory=list)
    teacher_name: str = "Guru Wali"
    school_name: str = "SMP Negeri 1"
    report_date: date | None = None


class SemesterReportInput(BaseModel):
    """Everything needed to render a semester-wide report."""

    kind: Literal["semester"] = "semester"
    semester: str
    academic_year: str
    students: list[StudentInfo] = Field(default_factory=list)
    teacher_name: str = "Guru Wali"
    school_name: str = "SMP Negeri 1"
    report_date: date | None = None


ReportInput = StudentReportInput | SemesterReportInput
