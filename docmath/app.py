# docmath/app.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Literal, Optional
import os, logging

from docmath.gemini_client import (
    AIServiceError,
    chat,
    generate_quiz,
    summarize,
    translate,
)
from docmath.utils.latex_render import render

app = FastAPI(title="docmath")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup logging
logger = logging.getLogger(__name__)

# ---------- request bodies ----------

class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: Optional[str] = Field(None, alias="documentId")
    content: str = Field(..., min_length=1)


class TranslateBody(_Body):
    target_language: str = Field(..., alias="targetLanguage", min_length=1)


class SummarizeBody(_Body):
    length: Literal["short", "medium", "detailed"] = "medium"


class QuizBody(_Body):
    count: int = Field(5, ge=1, le=20)
    difficulty: Literal["easy", "medium", "hard"] = "medium"


class ChatBody(_Body):
    message: str = Field(..., min_length=1)


class RenderBody(BaseModel):
    content: Optional[str] = None

# ---------- envelope helpers ----------

def ok(data: dict) -> dict:
    return {"success": True, "data": data}


def fail(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _ai_failure(e: Exception, what: str) -> JSONResponse:
    if isinstance(e, AIServiceError):
        logger.warning(f"{what} failed ({e.category}): {e}")
        return fail(str(e), 502)
    logger.error(f"{what} failed: {e}")
    return fail(f"Failed to {what} using Gemini API: {e}", 500)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return fail(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return fail("Invalid request: " + "; ".join(problems), 422)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return fail(f"Internal server error: {exc.__class__.__name__}", 500)

# ---------- API ----------

@app.post("/api/translate")
def translate_route(body: TranslateBody):
    logger.info(f"Translating document {body.document_id} to {body.target_language}")
    try:
        translated = translate(body.content, body.target_language)
    except Exception as e:
        return _ai_failure(e, "translate content")
    return ok({"translatedContent": translated, "html": render(translated)})


@app.post("/api/summarize")
def summarize_route(body: SummarizeBody):
    logger.info(f"Summarizing document {body.document_id} with length {body.length}")
    try:
        summary = summarize(body.content, body.length)
    except Exception as e:
        return _ai_failure(e, "generate summary")
    return ok({"summary": summary, "html": render(summary)})


@app.post("/api/quiz")
def quiz_route(body: QuizBody):
    logger.info(f"Generating {body.count} {body.difficulty} quizzes for document {body.document_id}")
    try:
        questions = generate_quiz(body.content, body.count, body.difficulty)
    except Exception as e:
        return _ai_failure(e, "generate quiz")
    return ok({"quiz": {"questions": questions}})


@app.post("/api/chat")
def chat_route(body: ChatBody):
    logger.info(f"[Chat] Document: {body.document_id}, Message: {body.message[:50]!r}")
    try:
        reply = chat(body.content, body.message)
    except Exception as e:
        return _ai_failure(e, "generate chat response")
    return ok({"botResponse": reply, "html": render(reply)})


@app.post("/api/render")
def render_route(body: RenderBody):
    return ok({"html": render(body.content)})


@app.get("/health")
def health():
    return {"ok": True}
