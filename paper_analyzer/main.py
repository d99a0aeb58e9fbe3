"""
Artifact: paper_analyzer/main.py
Purpose: Builds the FastAPI application, validates configuration at startup and mounts all routes.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added lifespan settings validation, upload page and legacy analysis route. (Paper Analyzer Team)
Preconditions:
- The provider credential (OPENAI_API_KEY or NVIDIA_API_KEY) is set in the environment or .env.
Inputs:
- Acceptable: HTTP requests to the upload page, health checks and analysis routes.
- Unacceptable: Startup without a credential (the lifespan raises and the server exits).
Postconditions:
- `app.state.settings` holds validated settings for the lifetime of the process.
Returns:
- ASGI `app` instance; `run()` serves it with uvicorn.
Errors/Exceptions:
- ConfigurationError during lifespan startup for missing or invalid configuration.
"""

import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, File, UploadFile
from fastapi.responses import FileResponse
from langchain_core.language_models.chat_models import BaseChatModel

from .api.deps import get_chat_model, get_settings
from .api.v1.router import api_v1_router
from .api.v1.routes.analyses import handle_analysis_request, read_uploads
from .api.v1.routes.health import get_health_status
from .core.config import Settings, load_settings
from .core.logging import configure_logging, get_logger

configure_logging(os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger("paper_analyzer.main")

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    logger.info(
        "Startup | provider=%s model=%s chunk_size=%d overlap=%d max_chunks=%d policy=%s concurrency=%d",
        settings.llm_provider,
        settings.llm_model,
        settings.chunk_size,
        settings.chunk_overlap,
        settings.max_chunks_per_file,
        settings.file_failure_policy,
        settings.file_concurrency,
    )
    yield


app = FastAPI(title="Research Paper Analyzer", lifespan=lifespan)
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
def index():
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@app.get("/health")
def health_legacy():
    return get_health_status("/health")


@app.post("/api/process-pdfs")
def process_pdfs_legacy(
    files: Optional[List[UploadFile]] = File(None),
    settings: Settings = Depends(get_settings),
    llm: BaseChatModel = Depends(get_chat_model),
):
    return handle_analysis_request(read_uploads(files), settings, llm, route_path="/api/process-pdfs")


def run() -> None:
    import uvicorn

    uvicorn.run(
        "paper_analyzer.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
