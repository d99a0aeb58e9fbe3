"""
Artifact: paper_analyzer/api/v1/routes/health.py
Purpose: Liveness check for the analyzer, mounted under /api/v1 and at the legacy /health path.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added health check for the analyzer. (Paper Analyzer Team)
Preconditions:
- None; the check does not touch the LLM provider or the staging area.
Inputs:
- Acceptable: HTTP GET without body.
- Unacceptable: Other methods.
Postconditions:
- Nothing is staged or logged above DEBUG.
Returns:
- `{"ok": true}`.
Errors/Exceptions:
- None.
"""

from fastapi import APIRouter

from ....core.logging import get_logger

logger = get_logger("paper_analyzer.routes")
router = APIRouter(tags=["health"])


def get_health_status(route_path: str) -> dict:
    logger.debug("GET %s", route_path)
    return {"ok": True}


@router.get("/health")
def health_v1():
    return get_health_status("/api/v1/health")
