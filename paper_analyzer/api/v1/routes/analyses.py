"""
Artifact: paper_analyzer/api/v1/routes/analyses.py
Purpose: Defines the PDF analysis upload routes and streams workflow events to the client.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added text and SSE analysis upload routes. (Paper Analyzer Team)
Preconditions:
- Requests are multipart form data with a repeated `files` field.
Inputs:
- Acceptable: One or more PDF uploads.
- Unacceptable: Requests without any file (rejected with 400 before a stream opens).
Postconditions:
- Streams plain-text fragments or SSE frames and closes the stream exactly once.
Returns:
- `StreamingResponse` (text/plain or text/event-stream) or a 400 `PlainTextResponse`.
Errors/Exceptions:
- Workflow failures are converted into a terminal `Error:` fragment / `error` event.
"""

import traceback
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import PlainTextResponse, StreamingResponse
from langchain_core.language_models.chat_models import BaseChatModel

from ....core.config import Settings
from ....core.logging import get_logger
from ....schemas.events import error_event
from ....schemas.shared import UploadedPdf
from ....services.analysis_service import stream_analysis_workflow
from ....services.stream_format import format_sse, render_text_fragment
from ...deps import get_chat_model, get_settings

logger = get_logger("paper_analyzer.routes")
router = APIRouter(tags=["analyses"])

NO_FILES_MESSAGE = "No files uploaded"


def read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedPdf]:
    """Copy upload bodies out of the form so they outlive request parsing."""
    uploads = []
    for upload in files or []:
        if not upload.filename:
            continue
        uploads.append(UploadedPdf(filename=upload.filename, content=upload.file.read()))
    return uploads


def handle_analysis_request(
    uploads: List[UploadedPdf],
    settings: Settings,
    llm: BaseChatModel,
    route_path: str,
):
    """Shared plain-text streaming handler used by v1 and legacy routes."""
    if not uploads:
        logger.info("POST %s rejected: no files", route_path)
        return PlainTextResponse(NO_FILES_MESSAGE, status_code=400)

    def text_stream():
        try:
            for event in stream_analysis_workflow(uploads, llm, settings, route_path=route_path):
                fragment = render_text_fragment(event)
                if fragment:
                    yield fragment
        except Exception as e:
            logger.error("Analysis stream error: %s", repr(e))
            logger.debug("Traceback:\n%s", traceback.format_exc())
            yield render_text_fragment(error_event(str(e)))

    return StreamingResponse(
        text_stream(),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-cache, no-transform", "X-Accel-Buffering": "no"},
    )


def handle_analysis_stream_request(
    uploads: List[UploadedPdf],
    settings: Settings,
    llm: BaseChatModel,
    route_path: str,
):
    """Shared SSE streaming handler; each frame carries one typed event."""
    if not uploads:
        logger.info("POST %s rejected: no files", route_path)
        return PlainTextResponse(NO_FILES_MESSAGE, status_code=400)

    def event_stream():
        event_id = 0
        try:
            for event_id, event in enumerate(
                stream_analysis_workflow(uploads, llm, settings, route_path=route_path), start=1
            ):
                yield format_sse(event, event_id)
        except Exception as e:
            logger.error("Analysis SSE error: %s", repr(e))
            logger.debug("Traceback:\n%s", traceback.format_exc())
            yield format_sse(error_event(str(e)), event_id + 1)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-transform",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/analyses")
def create_analysis(
    files: Optional[List[UploadFile]] = File(None),
    settings: Settings = Depends(get_settings),
    llm: BaseChatModel = Depends(get_chat_model),
):
    return handle_analysis_request(read_uploads(files), settings, llm, route_path="/api/v1/analyses")


@router.post("/analyses/stream")
def create_analysis_stream(
    files: Optional[List[UploadFile]] = File(None),
    settings: Settings = Depends(get_settings),
    llm: BaseChatModel = Depends(get_chat_model),
):
    return handle_analysis_stream_request(
        read_uploads(files), settings, llm, route_path="/api/v1/analyses/stream"
    )
