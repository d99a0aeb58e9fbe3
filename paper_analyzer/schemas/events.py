"""
Artifact: paper_analyzer/schemas/events.py
Purpose: Defines the typed analysis events produced by the streaming workflow.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added typed analysis events and factory helpers. (Paper Analyzer Team)
Preconditions:
- Pydantic BaseModel and typing modules are available.
Inputs:
- Acceptable: A `kind` discriminator plus the fields relevant to that kind.
- Unacceptable: Unknown kinds.
Postconditions:
- Events can be rendered as legacy plain-text fragments or as SSE frames.
Returns:
- `AnalysisEvent` model instances.
Errors/Exceptions:
- Pydantic validation errors for unknown kinds or bad field types.
"""

from typing import Literal, Optional

from pydantic import BaseModel

EventKind = Literal[
    "progress",
    "section",
    "file_summary",
    "synthesizing",
    "unified_analysis",
    "error",
    "completed",
]


class AnalysisEvent(BaseModel):
    kind: EventKind
    message: str = ""
    filename: Optional[str] = None
    section: Optional[int] = None
    total: Optional[int] = None
    summary: Optional[str] = None
    analysis: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in ("completed", "error")


def progress_event(filename: str) -> AnalysisEvent:
    return AnalysisEvent(kind="progress", filename=filename, message=f"Processing {filename}...")


def section_event(filename: str, section: int, total: int) -> AnalysisEvent:
    return AnalysisEvent(
        kind="section",
        filename=filename,
        section=section,
        total=total,
        message=f"Analyzing section {section} of {total} for {filename}",
    )


def file_summary_event(filename: str, summary: str) -> AnalysisEvent:
    return AnalysisEvent(
        kind="file_summary",
        filename=filename,
        summary=summary,
        message=f"Summary for {filename}",
    )


def synthesizing_event() -> AnalysisEvent:
    return AnalysisEvent(kind="synthesizing", message="Synthesizing findings...")


def unified_analysis_event(analysis: str) -> AnalysisEvent:
    return AnalysisEvent(kind="unified_analysis", analysis=analysis, message="Unified Analysis")


def error_event(message: str, filename: Optional[str] = None) -> AnalysisEvent:
    return AnalysisEvent(kind="error", filename=filename, message=message)


def completed_event() -> AnalysisEvent:
    return AnalysisEvent(kind="completed", message="Analysis completed")
