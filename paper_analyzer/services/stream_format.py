"""
Artifact: paper_analyzer/services/stream_format.py
Purpose: Renders analysis events into the plain-text fragment grammar and into SSE frames.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added text fragment rendering and SSE framing for analysis events. (Paper Analyzer Team)
Preconditions:
- Events are `AnalysisEvent` instances produced by the analysis workflow.
Inputs:
- Acceptable: Any known event kind.
- Unacceptable: Objects that are not `AnalysisEvent`.
Postconditions:
- Each visible event renders to exactly one text fragment; `completed` renders to nothing.
Returns:
- Fragment strings and SSE frame strings.
Errors/Exceptions:
- None expected for validated events.
"""

import json

from ..schemas.events import AnalysisEvent

SUMMARY_MARKER = "Summary for"
UNIFIED_ANALYSIS_MARKER = "Unified Analysis:"
ERROR_PREFIX = "Error:"


def render_text_fragment(event: AnalysisEvent) -> str:
    """Render an event in the line-oriented text protocol; clients parse these markers."""
    kind = event.kind
    if kind == "progress":
        return f"Processing {event.filename}...\n"
    if kind == "section":
        return f"🧠 Analyzing section {event.section} of {event.total} for {event.filename}\n"
    if kind == "file_summary":
        return f"{SUMMARY_MARKER} {event.filename}:\n{event.summary}\n\n"
    if kind == "synthesizing":
        return "🧪 Synthesizing findings...\n"
    if kind == "unified_analysis":
        return f"{UNIFIED_ANALYSIS_MARKER}\n{event.analysis}\n"
    if kind == "error":
        return f"{ERROR_PREFIX} {event.message}\n"
    return ""


def format_sse(event: AnalysisEvent, event_id: int) -> str:
    payload = json.dumps(event.model_dump(exclude_none=True), ensure_ascii=False)
    lines = [f"id: {event_id}", f"event: {event.kind}"]
    for line in payload.splitlines() or [""]:
        lines.append(f"data: {line}")
    lines.append("")
    return "\n".join(lines) + "\n"
