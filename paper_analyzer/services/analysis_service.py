"""
Artifact: paper_analyzer/services/analysis_service.py
Purpose: Coordinates per-file summarization and cross-document synthesis as an ordered event stream.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added per-file summarization, failure policy and parallel workers with live streaming. (Paper Analyzer Team)
Preconditions:
- Uploads have been read into `UploadedPdf` models and settings are validated.
- A chat model is available for summarization and synthesis calls.
Inputs:
- Acceptable: Non-empty list of uploads in submission order.
- Unacceptable: Empty upload lists (rejected by the route layer before the stream opens).
Postconditions:
- Emits progress, section, per-file summary, synthesis and terminal events in submission order.
- Every staging directory created for the request has been removed when the stream ends, except
  for parallel workers abandoned on abort, which remove theirs when their in-flight call returns.
Returns:
- Generator of `AnalysisEvent` objects.
Errors/Exceptions:
- In-flight failures are converted into `error` events; nothing is raised to the caller.
"""

import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generator, List, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel

from ..core.config import Settings
from ..core.logging import get_logger
from ..orchestrators.research_orchestrator import summarize_chunk, synthesize_findings
from ..schemas.events import (
    AnalysisEvent,
    completed_event,
    error_event,
    file_summary_event,
    progress_event,
    section_event,
    synthesizing_event,
    unified_analysis_event,
)
from ..schemas.shared import UploadedPdf
from .document_service import load_and_split
from .staging_service import staged_upload
from .stream_format import render_text_fragment

logger = get_logger("paper_analyzer.analysis")


@dataclass
class FileOutcome:
    filename: str
    summary: str = ""
    error: Optional[str] = None
    sections: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def summary_block(self) -> str:
        """The `Summary for` fragment exactly as streamed, used as synthesis input."""
        return render_text_fragment(file_summary_event(self.filename, self.summary))


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def summarize_file(
    upload: UploadedPdf,
    llm: BaseChatModel,
    settings: Settings,
) -> Generator[AnalysisEvent, None, FileOutcome]:
    """
    Stage one upload, summarize its leading chunks and emit progress as it goes.

    Chunks past `max_chunks_per_file` are never sent to the model.
    Errors propagate to the caller; the staging area is removed either way.
    """
    name = upload.filename

    with staged_upload(upload, staging_root=settings.staging_root) as path:
        yield progress_event(name)

        chunks = load_and_split(path, settings.chunk_size, settings.chunk_overlap)
        total = min(len(chunks), settings.max_chunks_per_file)
        if len(chunks) > total:
            logger.info("Truncating %r to %d of %d chunks", name, total, len(chunks))
        if not chunks:
            logger.warning("No text extracted from %r", name)

        parts: List[str] = []
        for index, chunk in enumerate(chunks[:total], start=1):
            parts.append(summarize_chunk(llm, chunk.page_content))
            yield section_event(name, index, total)

    summary = " ".join(parts).strip()
    yield file_summary_event(name, summary)
    logger.info("Summarized %r | sections=%d summary_chars=%d", name, total, len(summary))
    return FileOutcome(filename=name, summary=summary, sections=total)


def _stream_file(
    upload: UploadedPdf,
    llm: BaseChatModel,
    settings: Settings,
) -> Generator[AnalysisEvent, None, FileOutcome]:
    try:
        outcome = yield from summarize_file(upload, llm, settings)
    except Exception as exc:
        logger.exception("Processing failed for %r", upload.filename)
        return FileOutcome(filename=upload.filename, error=_describe(exc))
    return outcome


def _pump_file(
    upload: UploadedPdf,
    llm: BaseChatModel,
    settings: Settings,
    sink: "queue.Queue",
    stop: threading.Event,
) -> None:
    """
    Run one file on a worker thread, forwarding each event to `sink` as it happens.

    The last item put on `sink` is always the file's `FileOutcome`. Once `stop` is set
    the file is abandoned at its next event and its staging area is removed.
    """
    outcome: Optional[FileOutcome] = None
    gen = _stream_file(upload, llm, settings)
    try:
        while not stop.is_set():
            try:
                sink.put(next(gen))
            except StopIteration as done:
                outcome = done.value
                break
    finally:
        gen.close()
        if outcome is None:
            outcome = FileOutcome(filename=upload.filename, error="Cancelled")
        sink.put(outcome)


def _failure_event(outcome: FileOutcome, settings: Settings) -> AnalysisEvent:
    if settings.file_failure_policy == "skip":
        return error_event(f"{outcome.filename}: {outcome.error}", filename=outcome.filename)
    return error_event(outcome.error or "Unknown error", filename=outcome.filename)


def _summarize_all(
    uploads: Sequence[UploadedPdf],
    llm: BaseChatModel,
    settings: Settings,
) -> Generator[AnalysisEvent, None, List[FileOutcome]]:
    """
    Summarize every upload, emitting events in submission order.

    With `file_concurrency > 1` files run on a thread pool. The earliest unfinished
    file streams live; later files queue their events until it is their turn.
    """
    outcomes: List[FileOutcome] = []
    abort_on_failure = settings.file_failure_policy == "abort"

    if settings.file_concurrency <= 1 or len(uploads) <= 1:
        for upload in uploads:
            outcome = yield from _stream_file(upload, llm, settings)
            outcomes.append(outcome)
            if not outcome.ok:
                yield _failure_event(outcome, settings)
                if abort_on_failure:
                    break
        return outcomes

    workers = min(settings.file_concurrency, len(uploads))
    logger.info("Processing %d files with %d workers", len(uploads), workers)
    stop = threading.Event()
    sinks = [queue.Queue() for _ in uploads]
    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pdf-summarizer")
    try:
        for upload, sink in zip(uploads, sinks):
            pool.submit(_pump_file, upload, llm, settings, sink, stop)

        for sink in sinks:
            item = sink.get()
            while not isinstance(item, FileOutcome):
                yield item
                item = sink.get()
            outcomes.append(item)
            if not item.ok:
                yield _failure_event(item, settings)
                if abort_on_failure:
                    break
    finally:
        # Workers still inside an LLM call exit at their next event.
        stop.set()
        pool.shutdown(wait=False, cancel_futures=True)
    return outcomes


def stream_analysis_workflow(
    uploads: Sequence[UploadedPdf],
    llm: BaseChatModel,
    settings: Settings,
    route_path: str = "",
) -> Generator[AnalysisEvent, None, None]:
    """
    Execute the analysis workflow and emit typed events.

    Event sequence per file:
      progress -> section* -> file_summary
    then:
      synthesizing -> unified_analysis -> completed
    or a single error event at the point of failure.
    """
    logger.info(
        "POST %s | files=%d | bytes=%d | policy=%s",
        route_path,
        len(uploads),
        sum(u.size for u in uploads),
        settings.file_failure_policy,
    )

    try:
        outcomes = yield from _summarize_all(uploads, llm, settings)

        failed = [o for o in outcomes if not o.ok]
        if failed and settings.file_failure_policy == "abort":
            return

        summaries = [o.summary_block for o in outcomes if o.ok]
        if not summaries:
            logger.warning("No files summarized; skipping synthesis")
            return

        yield synthesizing_event()
        analysis = synthesize_findings(
            llm,
            summaries,
            min_hypotheses=settings.min_hypotheses,
            max_hypotheses=settings.max_hypotheses,
            word_limit=settings.synthesis_word_limit,
        )
        yield unified_analysis_event(analysis)

        logger.info("Analysis completed | files=%d failed=%d", len(outcomes), len(failed))
        yield completed_event()
    except Exception as exc:
        logger.exception("Analysis stream failed")
        yield error_event(_describe(exc))
