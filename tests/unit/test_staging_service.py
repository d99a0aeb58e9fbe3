import os
import tempfile
import unittest
from unittest.mock import patch

from paper_analyzer.core.errors import StagingError
from paper_analyzer.schemas.shared import UploadedPdf
from paper_analyzer.services.staging_service import safe_filename, staged_upload


class TestStagingService(unittest.TestCase):
    def setUp(self):
        self._root = tempfile.TemporaryDirectory()
        self.root = self._root.name

    def tearDown(self):
        self._root.cleanup()

    def test_staged_file_is_readable_then_removed(self):
        upload = UploadedPdf(filename="paper.pdf", content=b"%PDF-1.4 body")

        with staged_upload(upload, staging_root=self.root) as path:
            self.assertTrue(os.path.isfile(path))
            self.assertEqual(os.path.basename(path), "paper.pdf")
            with open(path, "rb") as f:
                self.assertEqual(f.read(), b"%PDF-1.4 body")
            staging_dir = os.path.dirname(path)
            self.assertTrue(os.path.basename(staging_dir).startswith("pdf-upload-"))

        self.assertFalse(os.path.exists(staging_dir))
        self.assertEqual(os.listdir(self.root), [])

    def test_staging_area_is_removed_when_processing_fails(self):
        upload = UploadedPdf(filename="paper.pdf", content=b"data")

        with self.assertRaises(RuntimeError):
            with staged_upload(upload, staging_root=self.root):
                raise RuntimeError("loader exploded")

        self.assertEqual(os.listdir(self.root), [])

    def test_same_file_staged_twice_never_collides(self):
        upload = UploadedPdf(filename="same.pdf", content=b"data")

        with staged_upload(upload, staging_root=self.root) as first:
            with staged_upload(upload, staging_root=self.root) as second:
                self.assertNotEqual(os.path.dirname(first), os.path.dirname(second))
                self.assertEqual(len(os.listdir(self.root)), 2)

        self.assertEqual(os.listdir(self.root), [])

    def test_write_failure_raises_staging_error_and_cleans_up(self):
        upload = UploadedPdf(filename="full.pdf", content=b"data")

        with patch(
            "paper_analyzer.services.staging_service._write_bytes",
            side_effect=OSError(28, "No space left on device"),
        ):
            with self.assertRaises(StagingError) as exc:
                with staged_upload(upload, staging_root=self.root):
                    self.fail("body must not run when staging fails")

        self.assertIn("full.pdf", str(exc.exception))
        self.assertIn("No space left on device", str(exc.exception))
        self.assertEqual(os.listdir(self.root), [])

    def test_missing_staging_root_raises_staging_error(self):
        upload = UploadedPdf(filename="paper.pdf", content=b"data")
        missing = os.path.join(self.root, "does-not-exist")

        with self.assertRaises(StagingError):
            with staged_upload(upload, staging_root=missing):
                pass

    def test_safe_filename_strips_directories(self):
        self.assertEqual(safe_filename("../../etc/passwd"), "passwd")
        self.assertEqual(safe_filename("C:\\Users\\me\\paper.pdf"), "paper.pdf")
        self.assertEqual(safe_filename(""), "upload.pdf")
        self.assertEqual(safe_filename(".."), "upload.pdf")


if __name__ == "__main__":
    unittest.main()
