from fastapi import FastAPI, Depends, HTTPException
from pydantic import BaseModel, Field, StrictInt
from typing import Dict, List, Optional
from loguru import logger

from text_mining.application.settings import get_settings, Settings
from text_mining.application.log_setup import setup_logging
from text_mining.application.services.analysis_service import AnalysisService
from text_mining.application.services.term_stats import InvalidInputError

# Configure logging once
setup_logging()

app = FastAPI(title="Text Mining (Word and Document Frequency)")

# --- Dependencies ---
def settings_dep() -> Settings:
    return get_settings()

# Single AnalysisService instance for the app lifetime
_analysis_service: AnalysisService | None = None
def analysis_service_dep(settings: Settings = Depends(settings_dep)) -> AnalysisService:
    global _analysis_service
    # Lazy initialization; build on first request
    if _analysis_service is None:
        _analysis_service = AnalysisService.build(settings)
    return _analysis_service


def _unprocessable(route: str, e: InvalidInputError) -> HTTPException:
    logger.warning("Rejected {} request: {}", route, e)
    return HTTPException(status_code=422, detail=str(e))


# --- Schemas ---
class CountItem(BaseModel):
    document: str
    term: str
    # no coercion: true, "3" and 2.0 are not counts
    count: StrictInt

class CountRequest(BaseModel):
    # {"Emma": ["emma", "by", "jane", "austen", ...], ...}
    documents: Dict[str, List[str]]

class TfIdfRequest(BaseModel):
    counts: List[CountItem]

class TopTermsRequest(BaseModel):
    counts: List[CountItem]
    n: Optional[int] = Field(default=None, description="Terms per document (defaults to settings)")
    with_ties: Optional[bool] = None

class ZipfRequest(BaseModel):
    counts: List[CountItem]
    min_rank: Optional[int] = None
    max_rank: Optional[int] = None


# --- Endpoints ---
@app.get("/", tags=["meta"])
def root(settings: Settings = Depends(settings_dep)):
    return {
        "ok": True,
        "app_name": settings.app_name,
        "environment": settings.app_env,
        "debug": settings.debug,
    }

@app.post("/counts", tags=["counts"])
def counts(body: CountRequest, svc: AnalysisService = Depends(analysis_service_dep)):
    try:
        rows = svc.count(body.documents)
    except InvalidInputError as e:
        raise _unprocessable("/counts", e)
    return [{"document": r.document, "term": r.term, "count": r.count} for r in rows]

@app.post("/tf-idf", tags=["tf-idf"])
def tf_idf(body: TfIdfRequest, svc: AnalysisService = Depends(analysis_service_dep)):
    try:
        stats = svc.tf_idf([c.model_dump() for c in body.counts])
    except InvalidInputError as e:
        raise _unprocessable("/tf-idf", e)
    return [s.as_dict() for s in stats]

@app.post("/tf-idf/top", tags=["tf-idf"])
def tf_idf_top(body: TopTermsRequest, svc: AnalysisService = Depends(analysis_service_dep)):
    try:
        top = svc.top_terms([c.model_dump() for c in body.counts], n=body.n, with_ties=body.with_ties)
    except InvalidInputError as e:
        raise _unprocessable("/tf-idf/top", e)
    return {document: [r.as_dict() for r in ranked] for document, ranked in top.items()}

@app.post("/zipf", tags=["zipf"])
def zipf(body: ZipfRequest, svc: AnalysisService = Depends(analysis_service_dep)):
    try:
        rows, fit = svc.zipf(
            [c.model_dump() for c in body.counts],
            min_rank=body.min_rank,
            max_rank=body.max_rank,
        )
    except InvalidInputError as e:
        raise _unprocessable("/zipf", e)
    return {"rows": [r.as_dict() for r in rows], "fit": fit.as_dict()}
