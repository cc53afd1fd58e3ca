from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv

from .analyzer import analyze, analyze_many
from .logging_config import setup_logging
from .models import (
    AnalysisResult,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    NormalizedAppRecord,
)


# Load environment variables from the repo root .env for local dev.
_HERE = Path(__file__).resolve()
_REPO_ROOT = _HERE.parents[1]
load_dotenv(_REPO_ROOT / ".env", override=False)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    setup_logging(os.getenv("APPCHECK_LOG_LEVEL", "INFO"))
    yield


app = FastAPI(title="AppCheck Agent", version="0.1.0", lifespan=_lifespan)

_MAX_BATCH = max(1, int(os.getenv("APPCHECK_MAX_BATCH", "100")))


def _cors_allow_origins() -> list[str]:
    raw = os.getenv("APPCHECK_CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:3000"]
    return [o.strip() for o in raw.split(",") if o.strip()]


# For local dev, this defaults to allowing http://localhost:3000.
# In production, set APPCHECK_CORS_ORIGINS to your deployed frontend origins.
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/analyze", response_model=AnalysisResult)
def analyze_endpoint(record: NormalizedAppRecord):
    result = analyze(record)
    logger.info("analyzed %s: score=%d level=%s", record.url, result.risk_score, result.risk_level)
    return result


@app.post("/analyze/batch", response_model=BatchAnalyzeResponse)
def analyze_batch_endpoint(req: BatchAnalyzeRequest):
    if not req.records:
        raise HTTPException(status_code=400, detail="Please provide at least one app record.")

    limit = min(max(req.limit, 1), _MAX_BATCH)
    results = analyze_many(req.records, limit=limit)
    logger.info("batch analyzed %d of %d record(s)", len(results), len(req.records))
    return {"results": results}
