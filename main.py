"""
FastAPI backend for the validation rules compiler.
Accepts uploaded rule files and returns the compiled rules as JSON.
"""

from fastapi import FastAPI, UploadFile, File, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from typing import Dict, List, Any, Optional
from io import BytesIO
from pathlib import Path
import logging
import os
import tempfile

from rules_compiler import (
    SUPPORTED_EXTENSIONS,
    EXAMPLE_FORMATS,
    compile_rules_file,
    render_example,
)

# ============================================================================
# Settings
# ============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Uploads are persisted here only for the duration of a compile call
UPLOAD_DIR = os.environ.get("RULES_UPLOAD_DIR") or tempfile.gettempdir()

# Allow frontend ports in range 5173-5182 for dynamic port allocation
DEFAULT_FRONTEND_ORIGINS = [
    f"http://localhost:{port}" for port in range(5173, 5183)
] + [
    f"http://127.0.0.1:{port}" for port in range(5173, 5183)
] + ["http://localhost:3000"]

FRONTEND_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("FRONTEND_ORIGINS", "").split(",")
    if origin.strip()
] or DEFAULT_FRONTEND_ORIGINS

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Validation Rules Compiler API",
    description="Compiles validation rule files for report templates",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class ValidationRuleModel(BaseModel):
    templateId: int
    sheetId: Optional[int] = None
    field: str
    ruleType: str
    condition: str
    errorMessage: str
    severity: str
    isActive: bool
    rowRange: Optional[str] = None
    columnRange: Optional[str] = None
    cellRange: Optional[str] = None
    applyToAllRows: Optional[bool] = None


class CompileResponse(BaseModel):
    success: bool
    filename: str
    format: Optional[str] = None
    rule_count: int
    rules: List[ValidationRuleModel]
    metadata: Dict[str, Any]
    errors: List[str]


class FormatInfo(BaseModel):
    extension: str
    format: str


# ============================================================================
# Rule File Endpoints
# ============================================================================

@app.get("/api/validation-rules/formats")
async def get_supported_formats() -> List[FormatInfo]:
    """List the rule file extensions the compiler accepts."""
    return [
        FormatInfo(extension=extension, format=fmt)
        for extension, fmt in SUPPORTED_EXTENSIONS.items()
    ]


@app.post("/api/validation-rules/compile")
async def compile_rules_upload(
    template_id: int = Query(..., description="Report template the rules belong to"),
    file: UploadFile = File(...)
) -> CompileResponse:
    """
    Compile an uploaded rules file.

    Compilation is best-effort: problems are returned in ``errors`` next to
    whatever rules could be compiled, with a 200 status.
    """
    filename = Path(file.filename or "").name
    extension = Path(filename).suffix.lower()

    content = await file.read()
    # Keep the extension, the compiler picks its adapter from it
    fd, upload_path = tempfile.mkstemp(suffix=extension, dir=UPLOAD_DIR)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        result = compile_rules_file(upload_path, template_id)
    finally:
        os.unlink(upload_path)

    logger.info(
        "Compiled %s for template %d: %d rules, %d errors",
        filename, template_id, result.rule_count, len(result.errors)
    )

    payload = result.to_dict()
    return CompileResponse(
        success=not result.has_errors,
        filename=filename,
        format=SUPPORTED_EXTENSIONS.get(extension),
        rule_count=result.rule_count,
        rules=[ValidationRuleModel(**rule) for rule in payload["rules"]],
        metadata=payload["metadata"],
        errors=payload["errors"],
    )


@app.get("/api/validation-rules/example/{fmt}")
async def download_example(fmt: str):
    """Download an example rules file in the requested format."""
    if fmt not in EXAMPLE_FORMATS:
        raise HTTPException(status_code=404, detail=f"Unknown example format: {fmt}")

    filename, media_type = EXAMPLE_FORMATS[fmt]
    content = render_example(fmt)

    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn
    import argparse

    parser = argparse.ArgumentParser(description="Validation Rules Compiler API")
    parser.add_argument("--port", type=int, default=8000, help="Port to run the server on")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload (requires import string)")
    parser.add_argument("--no-reload", dest="reload", action="store_false", help="Disable auto-reload")
    parser.set_defaults(reload=False)
    args = parser.parse_args()

    if args.reload:
        # When reload is enabled, must use import string
        uvicorn.run("main:app", host=args.host, port=args.port, reload=True)
    else:
        uvicorn.run(app, host=args.host, port=args.port)
