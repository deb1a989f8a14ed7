from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import logging, os, typing as t

# ---- Core imports ----
from learning_core.config import AUDIT_EXPORT_ENABLED, ALLOWED_MIME_TYPES
from learning_core.errors import PlatformError
from learning_core.formatting import format_file_size, format_time
from learning_core.scheduler import AsyncioScheduler
from learning_core.store import LearningPlatform
from learning_core.types import Direction, FileMetadata
from learning_core.audit_export import to_json as audit_to_json, to_csv as audit_to_csv

log = logging.getLogger(__name__)

# one owner for all state; endpoints are async so timer ticks share the loop with requests
PLATFORM = LearningPlatform(scheduler=AsyncioScheduler())

app = FastAPI(title="Learning Platform API")


@app.get("/")
def root():
    return {"status": "ok", "service": "learning-platform-api"}


ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


@app.exception_handler(PlatformError)
async def _platform_error(_request: Request, exc: PlatformError):
    log.info("request rejected: %s %s", type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": type(exc).__name__})


# ---- Schemas ----
class StartReq(BaseModel):
    assessment_id: str

class AnswerReq(BaseModel):
    question_id: str
    option_index: int

class AdvanceReq(BaseModel):
    direction: Direction

class GenerateReq(BaseModel):
    topic: str | None = None

class DocumentReq(BaseModel):
    name: str
    size: int = Field(ge=0)
    type: str


# ---- Helpers ----
def _serialize_attempt() -> dict[str, t.Any] | None:
    at = PLATFORM.active_attempt
    if at is None:
        return None
    body = at.to_dict()
    body["timeLabel"] = format_time(at.time_remaining_seconds)
    q = PLATFORM.attempts.current_question()
    body["question"] = q.to_dict() if q is not None else None
    assessment = PLATFORM.catalog.get(at.assessment_id)
    body["totalQuestions"] = len(assessment.questions)
    return body


def _serialize_document(doc) -> dict[str, t.Any]:
    body = doc.to_dict()
    body["sizeLabel"] = format_file_size(doc.size)
    return body


# ---- Health ----
@app.get("/health")
def health():
    return {
        "assessments": len(PLATFORM.assessments),
        "documents": len(PLATFORM.documents),
        "attempt_active": PLATFORM.active_attempt is not None,
        "audit_export_enabled": AUDIT_EXPORT_ENABLED,
        "allowed_types": list(ALLOWED_MIME_TYPES),
    }


# ---- Catalog ----
@app.get("/assessments")
async def list_assessments():
    return {"assessments": [a.to_dict() for a in PLATFORM.assessments]}


@app.post("/assessments/generate")
async def generate_assessment(req: GenerateReq | None = Body(None)):
    a = PLATFORM.generate_assessment(req.topic if req is not None else None)
    return {"assessment": a.to_dict()}


@app.post("/documents/{doc_id}/assessment")
async def generate_from_document(doc_id: str):
    a = PLATFORM.generate_from_document(doc_id)
    return {"assessment": a.to_dict()}


# ---- Attempt ----
@app.post("/attempt/start")
async def start_attempt(req: StartReq):
    PLATFORM.start_attempt(req.assessment_id)
    return {"attempt": _serialize_attempt()}


@app.get("/attempt")
async def get_attempt():
    return {"attempt": _serialize_attempt()}


@app.post("/attempt/answer")
async def record_answer(req: AnswerReq):
    PLATFORM.record_answer(req.question_id, req.option_index)
    return {"attempt": _serialize_attempt()}


@app.post("/attempt/advance")
async def advance(req: AdvanceReq):
    idx = PLATFORM.advance(req.direction)
    return {"index": idx, "attempt": _serialize_attempt()}


@app.post("/attempt/submit")
async def submit_attempt():
    res = PLATFORM.submit_attempt()
    if res is None:
        return {"submitted": False, "result": None}
    return {"submitted": True, "result": res.to_dict()}


@app.delete("/attempt")
async def abandon_attempt():
    return {"ok": PLATFORM.abandon_attempt()}


@app.get("/assessments/{assessment_id}/result")
async def get_result(assessment_id: str):
    return PLATFORM.attempt_result(assessment_id).to_dict()


@app.get("/assessments/{assessment_id}/result/audit.json")
async def get_audit_json(assessment_id: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    res = PLATFORM.attempt_result(assessment_id)
    return audit_to_json(res)


@app.get("/assessments/{assessment_id}/result/audit.csv")
async def get_audit_csv(assessment_id: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    res = PLATFORM.attempt_result(assessment_id)
    body = audit_to_csv(res)
    filename = f"{assessment_id}_audit.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


# ---- Documents ----
@app.get("/documents")
async def list_documents():
    return {"documents": [_serialize_document(d) for d in PLATFORM.documents]}


@app.post("/documents")
async def submit_document(req: DocumentReq):
    doc = PLATFORM.submit_document(FileMetadata(name=req.name, size=req.size, type=req.type))
    return {"document": _serialize_document(doc)}


@app.delete("/documents/{doc_id}")
async def remove_document(doc_id: str):
    doc = PLATFORM.remove_document(doc_id)
    return {"ok": True, "id": doc.id}


# ---- Notifications / progress ----
@app.get("/notifications")
async def list_notifications(kind: str | None = Query(None, description="Filter by notification kind")):
    return {"notifications": [n.to_dict() for n in PLATFORM.notifications(kind)]}


@app.get("/progress")
async def get_progress():
    return PLATFORM.progress_summary()
