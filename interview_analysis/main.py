"""
FastAPI Backend for Interview Response Analysis
"""
import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from interview_analysis.core.config import settings
from interview_analysis.core.exceptions import (
    AnalysisError,
    ConfigurationError,
    ContentAnalysisFailure,
    TranscriptionExhausted,
    TranscriptionTimeout,
)
from interview_analysis.core.orchestrator import AnalysisOrchestrator, build_orchestrator
from interview_analysis.models.interview_domains import INTERVIEW_DOMAINS, get_all_domains, get_domain_by_id
from interview_analysis.schemas.data_models import AnalysisReport, MediaPayload

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Interview Analysis API",
    description="Multi-modal interview response analysis and scoring",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global orchestrator instance
orchestrator: Optional[AnalysisOrchestrator] = None


# Request Models
class StandardAnalysisRequest(BaseModel):
    question: str
    response: str
    domain_id: Optional[str] = None
    level: Optional[str] = None
    expected_keywords: List[str] = []


@app.on_event("startup")
async def startup_event():
    """Build every remote client once; refuse to start when configuration is missing"""
    global orchestrator
    if orchestrator is not None:
        return

    try:
        orchestrator = build_orchestrator(settings)
    except ConfigurationError as e:
        logger.error(f"❌ Cannot start analysis pipeline: {e}")
        raise

    logger.info("✅ Interview Analysis API started successfully")


def _require_orchestrator() -> AnalysisOrchestrator:
    if not orchestrator:
        raise HTTPException(status_code=503, detail="System not initialized")
    return orchestrator


def _http_error(e: AnalysisError) -> HTTPException:
    # TranscriptionTimeout is a TranscriptionExhausted, check it first
    if isinstance(e, TranscriptionTimeout):
        return HTTPException(status_code=504, detail=str(e))
    if isinstance(e, TranscriptionExhausted):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ContentAnalysisFailure):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, ConfigurationError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def _split_keywords(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [k.strip() for k in raw.split(",") if k.strip()]


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Interview Analysis API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    if not orchestrator:
        return {"status": "initializing", "services": {}}
    return {"status": "healthy", "services": orchestrator.get_status()}


@app.get("/domains")
async def list_domains():
    return {
        "categories": {
            category: [d.id for d in domains] for category, domains in INTERVIEW_DOMAINS.items()
        },
        "domains": [asdict(d) for d in get_all_domains()],
    }


@app.get("/domains/{domain_id}")
async def get_domain(domain_id: str):
    domain = get_domain_by_id(domain_id)
    if domain is None:
        raise HTTPException(status_code=404, detail=f"Unknown domain: {domain_id}")
    return asdict(domain)


@app.post("/analysis/standard", response_model=AnalysisReport)
async def analyze_standard(request: StandardAnalysisRequest):
    """Content-only analysis of a typed answer"""
    pipeline = _require_orchestrator()
    if not request.question.strip() or not request.response.strip():
        raise HTTPException(status_code=400, detail="question and response are required")

    try:
        return await pipeline.analyze_standard(
            question=request.question,
            response_text=request.response,
            domain_id=request.domain_id,
            level=request.level,
            expected_keywords=request.expected_keywords,
        )
    except AnalysisError as e:
        logger.error(f"❌ Standard analysis failed: {e}")
        raise _http_error(e)


@app.post("/analysis/advanced", response_model=AnalysisReport)
async def analyze_advanced(
    question: str = Form(...),
    domain_id: Optional[str] = Form(None),
    level: Optional[str] = Form(None),
    expected_keywords: Optional[str] = Form(None),
    language_code: Optional[str] = Form(None),
    audio: UploadFile = File(...),
    video: Optional[UploadFile] = File(None),
):
    """Full analysis of a recorded answer: audio required, video optional"""
    pipeline = _require_orchestrator()

    audio_bytes = await audio.read()
    if not audio_bytes:
        raise HTTPException(status_code=400, detail="Audio file is empty")
    audio_payload = MediaPayload(data=audio_bytes, mime_type=audio.content_type or "audio/webm")

    video_payload = None
    if video is not None:
        video_bytes = await video.read()
        if video_bytes:
            video_payload = MediaPayload(data=video_bytes, mime_type=video.content_type or "video/webm")

    logger.info(f"📥 Advanced analysis request: audio {audio_payload.size_mb:.2f}MB, "
                f"video {'%.2fMB' % video_payload.size_mb if video_payload else 'none'}")

    try:
        return await pipeline.analyze_advanced(
            question=question,
            audio=audio_payload,
            video=video_payload,
            domain_id=domain_id,
            level=level,
            expected_keywords=_split_keywords(expected_keywords),
            language_code=language_code,
        )
    except AnalysisError as e:
        logger.error(f"❌ Advanced analysis failed: {e}", exc_info=True)
        raise _http_error(e)


if __name__ == "__main__":
    import uvicorn

    # Run the server
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
