"""Schema package exports for analyzer service contracts."""

from .events import AnalysisEvent
from .responses import AnalysisResult
from .shared import UploadedPdf

__all__ = [
    "AnalysisEvent",
    "AnalysisResult",
    "UploadedPdf",
]
