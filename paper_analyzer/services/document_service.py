"""
Artifact: paper_analyzer/services/document_service.py
Purpose: Loads a staged PDF into page documents and splits them into overlapping text chunks.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added PyMuPDF page loading, text cleanup and chunk splitting. (Paper Analyzer Team)
Preconditions:
- PyMuPDF (`pymupdf`) and `langchain_text_splitters` are installed.
Inputs:
- Acceptable: Path to a readable PDF file; positive chunk size with overlap smaller than it.
- Unacceptable: Missing files, encrypted or corrupt PDFs.
Postconditions:
- Returns page-ordered LangChain documents and order-preserving chunks.
Returns:
- `list[Document]` for both pages and chunks.
Errors/Exceptions:
- DocumentLoadError when PyMuPDF cannot open or read the file.
"""

import math
import os
import re
from collections import Counter
from typing import List

import pymupdf
from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

from ..core.errors import DocumentLoadError
from ..core.logging import get_logger

logger = get_logger("paper_analyzer.documents")

REPEATED_LINE_MIN_PAGES = 3
REPEATED_LINE_RATIO = 0.6
EDGE_LINES = 2


def _line_signature(line: str) -> str:
    """Collapse digits and spacing so 'Page 3 of 9' and 'Page 4 of 9' compare equal."""
    sig = re.sub(r"\d+", "#", line.lower())
    return re.sub(r"\s+", " ", sig).strip(" .:-|_")


def strip_running_headers(page_texts: List[str]) -> List[str]:
    """Remove header/footer lines that repeat at the edges of most pages."""
    if len(page_texts) < REPEATED_LINE_MIN_PAGES:
        return page_texts

    seen: Counter = Counter()
    for text in page_texts:
        lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
        edges = lines[:EDGE_LINES] + lines[-EDGE_LINES:]
        seen.update({_line_signature(ln) for ln in edges if len(ln) >= 4})

    threshold = max(REPEATED_LINE_MIN_PAGES, math.ceil(len(page_texts) * REPEATED_LINE_RATIO))
    repeated = {sig for sig, count in seen.items() if sig and count >= threshold}
    if not repeated:
        return page_texts

    return [
        "\n".join(ln for ln in text.splitlines() if _line_signature(ln) not in repeated).strip()
        for text in page_texts
    ]


def clean_page_text(text: str) -> str:
    """Normalize line endings, rejoin hyphenated words and squeeze blank runs."""
    if not text:
        return ""
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n").replace("\u00a0", " ")
    # "multi-\nline" -> "multiline"
    cleaned = re.sub(r"(?<=\w)-\n(?=\w)", "", cleaned)
    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def load_pdf_pages(path: str) -> List[Document]:
    """Read a PDF from disk into one document per page, in page order."""
    source = os.path.basename(path)
    try:
        with pymupdf.open(path) as doc:
            raw_pages = [page.get_text("text") or "" for page in doc]
    except Exception as e:
        raise DocumentLoadError(source, str(e)) from e

    page_texts = strip_running_headers([clean_page_text(t) for t in raw_pages])
    pages = [
        Document(page_content=text, metadata={"source": source, "page": number})
        for number, text in enumerate(page_texts, start=1)
    ]
    logger.info(
        "Loaded %r | pages=%d chars=%d",
        source,
        len(pages),
        sum(len(p.page_content) for p in pages),
    )
    return pages


def split_into_chunks(pages: List[Document], chunk_size: int, chunk_overlap: int) -> List[Document]:
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
    )
    chunks = splitter.split_documents(pages)
    logger.debug("Split %d pages into %d chunks (size=%d overlap=%d)", len(pages), len(chunks), chunk_size, chunk_overlap)
    return chunks


def load_and_split(path: str, chunk_size: int, chunk_overlap: int) -> List[Document]:
    return split_into_chunks(load_pdf_pages(path), chunk_size, chunk_overlap)
