"""FastAPI application for the document signing services.

Exposes the processing pipeline over HTTP.

Usage (from project root, after installing the package):

    uvicorn docsign_ai.api.app:app --reload

Settings are read from the file named by DOCSIGN_SETTINGS_FILE, if set,
and from DOCSIGN_* environment variables.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from ..analysis.local_llm import LocalLLMProvider
from ..config.config_manager import ConfigurationManager
from ..config.models import ConfigurationError
from ..models.signature import SignatureData
from ..parsers.base import detect_file_type
from ..parsers.exceptions import ContentExtractionError, UnsupportedFormatError
from ..pipeline import DocumentProcessingError, DocumentProcessingPipeline


logger = logging.getLogger(__name__)

SETTINGS_FILE_VARIABLE = "DOCSIGN_SETTINGS_FILE"

app = FastAPI(title="DocSign AI API", version="0.1.0")


@lru_cache(maxsize=1)
def get_pipeline() -> DocumentProcessingPipeline:
    """Build the pipeline from settings once per process."""
    manager = ConfigurationManager()
    manager.load_settings(os.getenv(SETTINGS_FILE_VARIABLE))
    profile = manager.load_user_profile()
    return DocumentProcessingPipeline.from_settings(manager.settings, profile)


def _save_upload(upload: UploadFile, directory: Optional[Path] = None) -> Path:
    """
    Save an upload under its original name.

    Without ``directory`` a fresh temporary directory is created and kept:
    a processing result can reference the upload as its document URI.
    """
    name = Path(upload.filename or "").name
    if not name:
        raise HTTPException(status_code=400, detail="Uploaded file has no name")

    target = (directory or Path(tempfile.mkdtemp(prefix="docsign_"))) / name
    with open(target, "wb") as f:
        f.write(upload.file.read())
    return target


def _parse_json_field(name: str, value: Optional[str], expected: type) -> Any:
    if value is None or not value.strip():
        return expected()
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"'{name}' is not valid JSON: {exc}") from exc
    if not isinstance(parsed, expected):
        raise HTTPException(status_code=400, detail=f"'{name}' must be a JSON {expected.__name__}")
    return parsed


def _parse_signatures(value: Optional[str]) -> List[SignatureData]:
    items = _parse_json_field("signatures", value, list)
    if not all(isinstance(item, dict) for item in items):
        raise HTTPException(status_code=400, detail="'signatures' must be a list of objects")
    return [SignatureData.from_dict(item) for item in items]


def _file_type_for(path: Path):
    try:
        return detect_file_type(str(path))
    except UnsupportedFormatError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc


@app.post("/api/analyze")
def analyze_document(
    file: UploadFile = File(..., description="Document to analyze (.docx/.pdf)"),
    pipeline: DocumentProcessingPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Analyze an uploaded document and return fields, questions and zones."""
    with tempfile.TemporaryDirectory(prefix="docsign_") as temp_dir:
        path = _save_upload(file, Path(temp_dir))
        file_type = _file_type_for(path)

        try:
            analysis = pipeline.orchestrator.analyze_document(str(path), file_type)
        except ContentExtractionError as exc:
            logger.error(f"Content extraction failed: {exc}")
            raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"Analysis of {path.name} failed")
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    insights = pipeline.orchestrator.get_document_insights(analysis)
    return JSONResponse(
        status_code=200,
        content={"analysis": analysis.to_dict(), "insights": insights.to_dict()},
    )


@app.post("/api/process")
def process_document(
    file: UploadFile = File(..., description="Document to fill and sign (.docx/.pdf)"),
    user_data: Optional[str] = Form(None, description="JSON object of field values"),
    signatures: Optional[str] = Form(None, description="JSON array of signature artifacts"),
    fast: bool = Form(False, description="Skip the language model and the signing backend"),
    pipeline: DocumentProcessingPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """
    Run the complete pipeline on an uploaded document.

    Degraded runs still answer 200; what was skipped is listed in
    ``warnings``.
    """
    data = _parse_json_field("user_data", user_data, dict)
    signature_data = _parse_signatures(signatures)
    path = _save_upload(file)
    file_type = _file_type_for(path)

    process = pipeline.process_document_fast if fast else pipeline.process_document
    try:
        result = process(str(path), file_type, user_data=data, signature_data=signature_data or None)
    except DocumentProcessingError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception(f"Processing of {path.name} failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return JSONResponse(status_code=200, content=result.to_dict())


@app.get("/api/llm/health")
def llm_health(
    pipeline: DocumentProcessingPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Report whether the configured local language model answers."""
    provider = pipeline.orchestrator.provider_chain.primary
    if not isinstance(provider, LocalLLMProvider):
        return JSONResponse(
            status_code=200,
            content={
                "success": False,
                "message": "No local language model configured; heuristic analysis only",
                "responseTime": 0.0,
            },
        )

    return JSONResponse(status_code=200, content=provider.test_connection().to_dict())


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request, exc: ConfigurationError) -> JSONResponse:
    logger.error(f"Service misconfigured: {exc}")
    return JSONResponse(status_code=500, content={"detail": f"Service misconfigured: {exc}"})
