"""
Artifact: paper_analyzer/schemas/shared.py
Purpose: Defines reusable schema objects shared by routes, services, and clients.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added uploaded PDF model. (Paper Analyzer Team)
Preconditions:
- Pydantic BaseModel is installed and importable.
Inputs:
- Acceptable: A file name string and raw PDF bytes read from a multipart upload.
- Unacceptable: Missing file name or non-bytes content.
Postconditions:
- Upload data is detached from the request so it can outlive the form parser.
Returns:
- `UploadedPdf` model instances.
Errors/Exceptions:
- Pydantic validation errors for invalid payload data.
"""

from pydantic import BaseModel


class UploadedPdf(BaseModel):
    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)
