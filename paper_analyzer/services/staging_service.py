"""
Artifact: paper_analyzer/services/staging_service.py
Purpose: Writes an uploaded PDF into a uniquely named temporary directory for path-based loaders.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added per-upload temporary staging with guaranteed removal. (Paper Analyzer Team)
Preconditions:
- The process can create directories under the system temp dir or the configured staging root.
Inputs:
- Acceptable: `UploadedPdf` with any client-supplied file name (path components are stripped).
- Unacceptable: Staging roots that do not exist or are not writable.
Postconditions:
- The staging directory and its contents are removed when the context exits, on success or failure.
Returns:
- Filesystem path of the staged file (inside the context manager).
Errors/Exceptions:
- StagingError when the directory cannot be created or the bytes cannot be written.
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional

from ..core.errors import StagingError
from ..core.logging import get_logger
from ..schemas.shared import UploadedPdf

logger = get_logger("paper_analyzer.staging")

STAGING_PREFIX = "pdf-upload-"
FALLBACK_FILENAME = "upload.pdf"


def safe_filename(filename: str) -> str:
    """Drop directory parts from a client file name so it stays inside the staging dir."""
    name = os.path.basename((filename or "").replace("\\", "/")).strip()
    if name in ("", ".", ".."):
        return FALLBACK_FILENAME
    return name


def _write_bytes(path: str, content: bytes) -> None:
    with open(path, "wb") as f:
        f.write(content)


@contextmanager
def staged_upload(upload: UploadedPdf, staging_root: Optional[str] = None) -> Iterator[str]:
    """Stage `upload` on disk for the duration of the block, then remove it."""
    try:
        temp_dir = tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=staging_root)
    except OSError as e:
        raise StagingError(upload.filename, str(e)) from e

    try:
        path = os.path.join(temp_dir, safe_filename(upload.filename))
        try:
            _write_bytes(path, upload.content)
        except OSError as e:
            raise StagingError(upload.filename, str(e)) from e

        logger.debug("Staged %r (%d bytes) at %s", upload.filename, upload.size, path)
        yield path
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)
        logger.debug("Removed staging area %s", temp_dir)
