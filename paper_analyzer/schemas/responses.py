"""
Artifact: paper_analyzer/schemas/responses.py
Purpose: Defines the analysis result reconstructed by clients from the response stream.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added analysis result model for stream reconstruction. (Paper Analyzer Team)
Preconditions:
- Pydantic BaseModel is available.
Inputs:
- Acceptable: Ordered summary strings and a unified analysis string.
- Unacceptable: Non-string summaries.
Postconditions:
- Result objects can be rendered or serialized by clients.
Returns:
- `AnalysisResult` model instances.
Errors/Exceptions:
- Pydantic validation errors for incompatible field types.
"""

from typing import List, Optional

from pydantic import BaseModel


class AnalysisResult(BaseModel):
    summaries: List[str] = []
    unifiedAnalysis: str = ""
    filenames: List[str] = []
    error: Optional[str] = None
