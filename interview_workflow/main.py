"""
Interview Workflow - FastAPI Backend

Multi-round interview service:
- SCREENING -> TECHNICAL -> SCENARIO rounds with weighted scorecards
- Structured memory accumulated across rounds
- Audit log of every workflow event
- Optional SQL storage, Redis live-state cache and LLM server

Compatible with DeepSeek / llama.cpp REST API.
"""
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

from interview_workflow.errors import (
    InterviewError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from interview_workflow.interview.orchestrator import InterviewOrchestrator
from interview_workflow.models.schemas import (
    ApiModel,
    InterviewResult,
    LiveState,
    PublicState,
    SeniorityLevel,
)
from interview_workflow.utils.config import config
from interview_workflow.wiring import build_orchestrator

logging.basicConfig(
    level=config.logging.level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ================================================================
# FastAPI App Initialization
# ================================================================

app = FastAPI(
    title="Interview Workflow API",
    description="Multi-round interview workflow with scorecards and structured memory",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ================================================================
# Orchestrator
# ================================================================

# Built on first use so importing the app never touches the database or Redis
_orchestrator: Optional[InterviewOrchestrator] = None


def get_orchestrator() -> InterviewOrchestrator:
    """Lazy build the orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(config)
    return _orchestrator


# ================================================================
# Request Models
# ================================================================

class StartInterviewRequest(ApiModel):
    candidate_id: Optional[str] = None
    role: str = Field(default=config.interview.default_role, min_length=1)
    level: SeniorityLevel = SeniorityLevel(config.interview.default_level)
    resume_text: Optional[str] = None
    resume_file_name: Optional[str] = None


class AnswerRequest(ApiModel):
    session_id: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    question_id: Optional[str] = None


# ================================================================
# Error Mapping
# ================================================================

_STATUS_BY_ERROR = {
    ValidationError: 400,
    NotFoundError: 404,
    InvalidStateError: 409,
}


@app.exception_handler(InterviewError)
async def interview_error_handler(request: Request, exc: InterviewError):
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code == 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


@app.exception_handler(ConnectionError)
async def connection_error_handler(request: Request, exc: ConnectionError):
    logger.error(f"{request.method} {request.url.path}: AI provider unreachable: {exc}")
    return JSONResponse(status_code=502, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())})


# ================================================================
# API Endpoints
# ================================================================

@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "running",
        "version": "1.0.0",
        "service": "Interview Workflow",
        "rounds": [cfg.get_config() for cfg in config.interview.rounds.values()],
    }


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/interview/start", status_code=201, response_model=PublicState, response_model_by_alias=True)
def start_interview(
    request: StartInterviewRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    """
    Start a new interview session.

    Args:
        request: Role, level and optional resume text

    Returns:
        Public state with the first screening question
    """
    return orchestrator.start_interview(
        role=request.role,
        level=request.level,
        candidate_id=request.candidate_id,
        resume_text=request.resume_text,
        resume_file_name=request.resume_file_name,
    )


@app.post("/interview/answer", response_model=PublicState, response_model_by_alias=True)
def submit_answer(
    request: AnswerRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    """
    Submit the candidate's answer to the active question.

    Returns:
        Updated public state (next question, round verdict or final decision)
    """
    return orchestrator.submit_answer(
        session_id=request.session_id,
        answer=request.answer,
        question_id=request.question_id,
    )


@app.get("/interview/state", response_model=PublicState, response_model_by_alias=True)
def get_state(
    session_id: str = Query(..., alias="sessionId", min_length=1),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.get_state(session_id)


@app.get("/interview/result", response_model=InterviewResult, response_model_by_alias=True)
def get_result(
    session_id: str = Query(..., alias="sessionId", min_length=1),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    """Decision summary with scorecards and the audit log. 409 until the interview ends."""
    return orchestrator.get_result(session_id)


@app.get("/interview/live", response_model=LiveState, response_model_by_alias=True)
def get_live_state(
    session_id: str = Query(..., alias="sessionId", min_length=1),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    live = orchestrator.get_live_state(session_id)
    if live is None:
        raise NotFoundError(f"No live state for session {session_id}")
    return live


# ================================================================
# Main Entry Point
# ================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
