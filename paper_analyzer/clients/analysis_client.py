"""
Artifact: paper_analyzer/clients/analysis_client.py
Purpose: Uploads PDFs to the analyzer and rebuilds structured results from the streamed response.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added legacy and structured stream parsers and the httpx upload client. (Paper Analyzer Team)
- 2026-10-16: Stream errors are detected only at the start of a read. (Paper Analyzer Team)
Preconditions:
- The analyzer service is reachable, or an `httpx.Client` (e.g. a FastAPI TestClient) is supplied.
Inputs:
- Acceptable: Paths to PDF files; stream text delivered in arbitrarily sized pieces.
- Unacceptable: Empty path lists (the service answers 400).
Postconditions:
- Returns an `AnalysisResult` with ordered summaries and the unified analysis, or an error message.
Returns:
- `AnalysisResult` objects; parsers also expose intermediate state.
Errors/Exceptions:
- AnalysisRequestError for non-2xx responses; httpx transport errors propagate.

Two parsers are provided. `LegacyStreamParser` reproduces the marker-substring rules of
the text protocol, including its known weaknesses: a marker split across two reads is
missed, text that itself contains a marker is misclassified, and progress lines that
arrive after a summary are appended to that summary. Only a read that begins with
`Error:` counts as a stream error, so summary text mentioning an error is never one.
`StructuredStreamParser` reads the SSE protocol and has none of these problems.
"""

import json
import os
from typing import Callable, Iterable, Iterator, List, Optional

import httpx

from ..core.errors import AnalyzerError
from ..core.logging import get_logger
from ..schemas.events import AnalysisEvent
from ..schemas.responses import AnalysisResult
from ..services.stream_format import ERROR_PREFIX, SUMMARY_MARKER, UNIFIED_ANALYSIS_MARKER

logger = get_logger("paper_analyzer.client")

LEGACY_PATH = "/api/process-pdfs"
STREAM_PATH = "/api/v1/analyses/stream"


class AnalysisRequestError(AnalyzerError):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Server responded with {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class LegacyStreamParser:
    """Incremental reconstruction over the plain-text fragment protocol."""

    def __init__(self):
        self.accumulated_text = ""
        self.current_summary = ""
        self.summaries: List[str] = []
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None

    def feed(self, chunk: str) -> Optional[AnalysisResult]:
        self.accumulated_text += chunk

        if SUMMARY_MARKER in chunk:
            if self.current_summary:
                self.summaries.append(self.current_summary.strip())
            self.current_summary = chunk.split(SUMMARY_MARKER)[1]
        elif self.current_summary:
            self.current_summary += chunk

        if UNIFIED_ANALYSIS_MARKER in chunk:
            if self.current_summary:
                self.summaries.append(self.current_summary.strip())
                self.current_summary = ""
            unified = self.accumulated_text.split(UNIFIED_ANALYSIS_MARKER)[1].strip()
            self.result = AnalysisResult(summaries=list(self.summaries), unifiedAnalysis=unified)

        if chunk.startswith(ERROR_PREFIX):
            self.error = chunk[len(ERROR_PREFIX):].strip()

        return self.result

    def finish(self) -> AnalysisResult:
        if self.result is not None:
            return self.result.model_copy(update={"error": self.error})
        return AnalysisResult(summaries=list(self.summaries), error=self.error)


class StructuredStreamParser:
    """Incremental reconstruction over SSE frames carrying typed events."""

    def __init__(self):
        self._buffer = ""
        self.events: List[AnalysisEvent] = []
        self.summaries: List[str] = []
        self.filenames: List[str] = []
        self.unified_analysis: Optional[str] = None
        self.error: Optional[str] = None

    def feed(self, text: str) -> List[AnalysisEvent]:
        """Consume any amount of stream text and return the events completed by it."""
        self._buffer += text.replace("\r\n", "\n")
        parsed = []
        while "\n\n" in self._buffer:
            frame, self._buffer = self._buffer.split("\n\n", 1)
            event = self._parse_frame(frame)
            if event is not None:
                self._apply(event)
                parsed.append(event)
        return parsed

    @staticmethod
    def _parse_frame(frame: str) -> Optional[AnalysisEvent]:
        data_lines = [line[5:].lstrip() for line in frame.splitlines() if line.startswith("data:")]
        if not data_lines:
            return None
        return AnalysisEvent.model_validate(json.loads("\n".join(data_lines)))

    def _apply(self, event: AnalysisEvent) -> None:
        self.events.append(event)
        if event.kind == "file_summary":
            self.summaries.append((event.summary or "").strip())
            self.filenames.append(event.filename or "")
        elif event.kind == "unified_analysis":
            self.unified_analysis = (event.analysis or "").strip()
        elif event.kind == "error":
            self.error = event.message

    @property
    def result(self) -> Optional[AnalysisResult]:
        if self.unified_analysis is None and self.error is None:
            return None
        return self.finish()

    def finish(self) -> AnalysisResult:
        return AnalysisResult(
            summaries=list(self.summaries),
            filenames=list(self.filenames),
            unifiedAnalysis=self.unified_analysis or "",
            error=self.error,
        )


class AnalysisClient:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "AnalysisClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def _multipart(paths: Iterable[str]) -> list:
        files = []
        for path in paths:
            with open(path, "rb") as f:
                files.append(("files", (os.path.basename(path), f.read(), "application/pdf")))
        return files

    def iter_stream(self, paths: Iterable[str], structured: bool = True) -> Iterator[str]:
        """Yield decoded response text as it arrives."""
        url = STREAM_PATH if structured else LEGACY_PATH
        files = self._multipart(paths)
        logger.info("POST %s | files=%d", url, len(files))

        with self._client.stream("POST", url, files=files) as response:
            if response.status_code >= 400:
                response.read()
                raise AnalysisRequestError(response.status_code, response.text)
            yield from response.iter_text()

    def analyze(
        self,
        paths: Iterable[str],
        structured: bool = True,
        on_progress: Optional[Callable[[str], None]] = None,
    ) -> AnalysisResult:
        """Run a full analysis, reporting progress text through `on_progress`."""
        if structured:
            parser = StructuredStreamParser()
            for text in self.iter_stream(paths, structured=True):
                for event in parser.feed(text):
                    if on_progress is not None:
                        on_progress(event.message)
            return parser.finish()

        legacy = LegacyStreamParser()
        for text in self.iter_stream(paths, structured=False):
            legacy.feed(text)
            if on_progress is not None:
                on_progress(text)
        return legacy.finish()
