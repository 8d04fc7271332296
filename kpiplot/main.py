import base64
import hashlib

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from .errors import PipelineError
from .models import (
    EncodedImage,
    HealthResponse,
    RenderReport,
    RenderResponse,
    RenderResult,
    ReportSummary,
)
from .pipeline import render

ACCEPTED_UPLOADS = (".csv", ".tsv", ".txt")

app = FastAPI(
    title="kpiplot",
    description="Render platform analytics exports as line charts, optionally benchmark-normalized",
    version="0.1.0",
)


def to_response(result: RenderResult) -> RenderResponse:
    return RenderResponse(
        image=EncodedImage(
            sha256=hashlib.sha256(result.image).hexdigest(),
            format=result.format,
            media_type=result.media_type,
            content_b64=base64.b64encode(result.image).decode("ascii"),
        ),
        report=RenderReport(
            summary=ReportSummary(
                points=result.points,
                warnings=len(result.warnings),
                normalized=result.normalized,
            ),
            warnings=result.warnings,
        ),
    )


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/render", response_model=RenderResponse)
async def render_upload(
    file: UploadFile = File(...),
    normalize: bool = Query(False),
    format: str = Query("png"),
):
    if not (file.filename or "").lower().endswith(ACCEPTED_UPLOADS):
        raise HTTPException(status_code=422, detail="Only CSV/TSV exports are supported")

    raw = await file.read()
    try:
        result = await run_in_threadpool(render, raw, normalize=normalize, fmt=format)
    except PipelineError as exc:
        raise HTTPException(status_code=422, detail=exc.to_detail()) from exc
    return to_response(result)
