import os
import tempfile
import threading
import time
import unittest
from unittest.mock import patch

from langchain_core.documents import Document
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from paper_analyzer.core.config import Settings
from paper_analyzer.core.errors import DocumentLoadError
from paper_analyzer.schemas.shared import UploadedPdf
from paper_analyzer.services.analysis_service import stream_analysis_workflow, summarize_file
from paper_analyzer.services.stream_format import render_text_fragment


def _chunks(n, label="chunk"):
    return [Document(page_content=f"{label} {i}") for i in range(n)]


def _kinds(events):
    return [e.kind for e in events]


class TestAnalysisService(unittest.TestCase):
    def setUp(self):
        self._root = tempfile.TemporaryDirectory()
        self.settings = Settings(llm_api_key="sk-test", staging_root=self._root.name)
        self.llm = FakeListChatModel(responses=["Chunk summary."])
        self.uploads = [
            UploadedPdf(filename="a.pdf", content=b"%PDF a"),
            UploadedPdf(filename="b.pdf", content=b"%PDF b"),
        ]

    def tearDown(self):
        self._root.cleanup()

    def _run(self, uploads=None, settings=None):
        return list(
            stream_analysis_workflow(
                uploads if uploads is not None else self.uploads,
                self.llm,
                settings or self.settings,
                route_path="/test",
            )
        )

    def test_two_files_three_chunks_each(self):
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=_chunks(3),
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
            return_value="Shared theme.",
        ):
            events = self._run()

        self.assertEqual(
            _kinds(events),
            ["progress", "section", "section", "section", "file_summary"] * 2
            + ["synthesizing", "unified_analysis", "completed"],
        )
        summaries = [e for e in events if e.kind == "file_summary"]
        self.assertEqual([e.filename for e in summaries], ["a.pdf", "b.pdf"])
        self.assertEqual(summaries[0].summary, "Chunk summary. Chunk summary. Chunk summary.")
        self.assertEqual(events[-2].analysis, "Shared theme.")
        self.assertNotIn("error", _kinds(events))
        self.assertEqual(os.listdir(self._root.name), [])

    def test_section_count_is_capped_at_max_chunks(self):
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=_chunks(12),
        ), patch(
            "paper_analyzer.services.analysis_service.summarize_chunk",
            return_value="s",
        ) as mock_summarize:
            events = list(summarize_file(self.uploads[0], self.llm, self.settings))

        sections = [e for e in events if e.kind == "section"]
        self.assertEqual(len(sections), 5)
        self.assertEqual([(e.section, e.total) for e in sections], [(i, 5) for i in range(1, 6)])
        self.assertEqual(mock_summarize.call_count, 5)
        summarized = [c.args[1] for c in mock_summarize.call_args_list]
        self.assertEqual(summarized, [f"chunk {i}" for i in range(5)])

    def test_summarize_file_returns_outcome(self):
        gen = summarize_file(self.uploads[0], self.llm, self.settings)
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=_chunks(2),
        ), patch(
            "paper_analyzer.services.analysis_service.summarize_chunk",
            side_effect=["  first ", " second  "],
        ):
            try:
                while True:
                    next(gen)
            except StopIteration as stop:
                outcome = stop.value

        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.summary, "first   second")
        self.assertEqual(outcome.sections, 2)
        self.assertEqual(outcome.summary_block, "Summary for a.pdf:\nfirst   second\n\n")

    def test_empty_document_still_emits_one_summary(self):
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=[],
        ):
            events = list(summarize_file(self.uploads[0], self.llm, self.settings))

        self.assertEqual(_kinds(events), ["progress", "file_summary"])
        self.assertEqual(events[-1].summary, "")

    def test_synthesis_receives_rendered_summary_blocks_in_order(self):
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=_chunks(1),
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
            return_value="Analysis.",
        ) as mock_synth:
            self._run()

        args, kwargs = mock_synth.call_args
        self.assertEqual(
            args[1],
            ["Summary for a.pdf:\nChunk summary.\n\n", "Summary for b.pdf:\nChunk summary.\n\n"],
        )
        self.assertEqual(kwargs["min_hypotheses"], 1)
        self.assertEqual(kwargs["max_hypotheses"], 3)
        self.assertEqual(kwargs["word_limit"], 500)

    def test_staging_failure_emits_single_error(self):
        with patch(
            "paper_analyzer.services.staging_service._write_bytes",
            side_effect=OSError(28, "No space left on device"),
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
        ) as mock_synth:
            events = self._run(uploads=self.uploads[:1])

        self.assertEqual(_kinds(events), ["error"])
        self.assertIn("No space left on device", events[0].message)
        mock_synth.assert_not_called()
        self.assertEqual(os.listdir(self._root.name), [])

    def test_abort_policy_stops_at_first_failed_file(self):
        def load(path, *_):
            if path.endswith("a.pdf"):
                raise DocumentLoadError("a.pdf", "corrupt xref")
            return _chunks(1)

        with patch("paper_analyzer.services.analysis_service.load_and_split", side_effect=load):
            events = self._run()

        self.assertEqual(_kinds(events), ["progress", "error"])
        self.assertEqual(events[-1].message, "Failed to load PDF 'a.pdf': corrupt xref")
        self.assertEqual(render_text_fragment(events[-1]), "Error: Failed to load PDF 'a.pdf': corrupt xref\n")
        self.assertEqual(os.listdir(self._root.name), [])

    def test_skip_policy_reports_failure_and_continues(self):
        settings = self.settings.model_copy(update={"file_failure_policy": "skip"})

        def load(path, *_):
            if path.endswith("a.pdf"):
                raise DocumentLoadError("a.pdf", "corrupt xref")
            return _chunks(1)

        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            side_effect=load,
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
            return_value="Only b.",
        ) as mock_synth:
            events = self._run(settings=settings)

        self.assertEqual(
            _kinds(events),
            ["progress", "error", "progress", "section", "file_summary", "synthesizing", "unified_analysis", "completed"],
        )
        self.assertTrue(events[1].message.startswith("a.pdf: "))
        self.assertEqual(mock_synth.call_args.args[1], ["Summary for b.pdf:\nChunk summary.\n\n"])

    def test_skip_policy_with_no_successes_skips_synthesis(self):
        settings = self.settings.model_copy(update={"file_failure_policy": "skip"})

        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            side_effect=DocumentLoadError("x.pdf", "bad"),
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
        ) as mock_synth:
            events = self._run(settings=settings)

        self.assertEqual(_kinds(events), ["progress", "error", "progress", "error"])
        mock_synth.assert_not_called()

    def test_synthesis_failure_after_all_summaries(self):
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=_chunks(2),
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
            side_effect=RuntimeError("LLM unavailable"),
        ):
            events = self._run()

        kinds = _kinds(events)
        self.assertEqual(kinds.count("file_summary"), 2)
        self.assertEqual(kinds.count("error"), 1)
        self.assertNotIn("unified_analysis", kinds)
        self.assertEqual(kinds[-1], "error")
        self.assertEqual(events[-1].message, "LLM unavailable")

    def test_chunk_summary_failure_aborts_remaining_files(self):
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=_chunks(3),
        ), patch(
            "paper_analyzer.services.analysis_service.summarize_chunk",
            side_effect=["ok", RuntimeError("rate limited")],
        ):
            events = self._run()

        self.assertEqual(_kinds(events), ["progress", "section", "error"])
        self.assertEqual(events[-1].message, "rate limited")
        self.assertEqual(os.listdir(self._root.name), [])

    def test_parallel_processing_preserves_submission_order(self):
        settings = self.settings.model_copy(update={"file_concurrency": 3})
        uploads = [UploadedPdf(filename=f"{name}.pdf", content=b"%PDF") for name in ("c", "a", "b")]

        def load(path, *_):
            return _chunks(2, label=os.path.basename(path))

        def summarize(_llm, text):
            return f"summary of {text}"

        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            side_effect=load,
        ), patch(
            "paper_analyzer.services.analysis_service.summarize_chunk",
            side_effect=summarize,
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
            return_value="Parallel analysis.",
        ):
            events = self._run(uploads=uploads, settings=settings)

        self.assertEqual(
            _kinds(events),
            ["progress", "section", "section", "file_summary"] * 3
            + ["synthesizing", "unified_analysis", "completed"],
        )
        self.assertEqual(
            [e.filename for e in events if e.kind == "file_summary"],
            ["c.pdf", "a.pdf", "b.pdf"],
        )
        first = next(e for e in events if e.kind == "file_summary")
        self.assertEqual(first.summary, "summary of c.pdf 0 summary of c.pdf 1")
        self.assertEqual(os.listdir(self._root.name), [])

    def test_parallel_processing_streams_first_file_live(self):
        settings = self.settings.model_copy(update={"file_concurrency": 2})

        def slow_summarize(_llm, _text):
            time.sleep(0.5)
            return "s"

        arrivals = []
        with patch(
            "paper_analyzer.services.analysis_service.load_and_split",
            return_value=_chunks(2),
        ), patch(
            "paper_analyzer.services.analysis_service.summarize_chunk",
            side_effect=slow_summarize,
        ), patch(
            "paper_analyzer.services.analysis_service.synthesize_findings",
            return_value="Analysis.",
        ):
            start = time.monotonic()
            for event in stream_analysis_workflow(self.uploads, self.llm, settings, route_path="/test"):
                arrivals.append((event.kind, event.filename, time.monotonic() - start))

        self.assertEqual(arrivals[0][:2], ("progress", "a.pdf"))
        self.assertLess(arrivals[0][2], 0.4)
        first_section = next(a for a in arrivals if a[0] == "section")
        self.assertLess(first_section[2], 0.9)
        self.assertEqual(arrivals[-1][0], "completed")
        self.assertGreaterEqual(arrivals[-1][2], 0.9)

    def test_parallel_abort_closes_without_waiting_for_running_files(self):
        settings = self.settings.model_copy(update={"file_concurrency": 2, "staging_root": None})
        release = threading.Event()

        def load(path, *_):
            if path.endswith("a.pdf"):
                raise DocumentLoadError("a.pdf", "corrupt xref")
            release.wait(timeout=5)
            return _chunks(1)

        try:
            with patch(
                "paper_analyzer.services.analysis_service.load_and_split",
                side_effect=load,
            ), patch(
                "paper_analyzer.services.analysis_service.synthesize_findings",
            ) as mock_synth:
                start = time.monotonic()
                events = self._run(settings=settings)
                elapsed = time.monotonic() - start
        finally:
            release.set()

        self.assertEqual(_kinds(events), ["progress", "error"])
        self.assertEqual(events[-1].message, "Failed to load PDF 'a.pdf': corrupt xref")
        self.assertLess(elapsed, 2.0)
        mock_synth.assert_not_called()


if __name__ == "__main__":
    unittest.main()
