from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator, Callable, Optional

from fastapi import Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from agents.chat_agent import ChatAgent
from docling_pipeline.config import get_settings
from docling_pipeline.parser import extract_text
from rag_core.indexing import build_vector_store
from rag_core.retrieval import SearchSettings

_log = logging.getLogger(__name__)

TextExtractor = Callable[[bytes, str], str]


class ApiError(Exception):
    """Error rendered to the client as {"error": message}."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    _log.info("Building vector store from %s", settings.input_dir)
    store = build_vector_store(settings)
    app.state.agent = ChatAgent(
        store=store,
        search_settings=SearchSettings(
            top_k=settings.top_k,
            similarity_threshold=settings.similarity_threshold,
        ),
    )
    _log.info("Vector store ready with %d chunks", store.count())
    yield


app = FastAPI(title="AI Chatbot API", lifespan=lifespan)

# CORS: allow public frontend and local dev without credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "form"))
        problems.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(problems) or "Bad request"})


def get_agent(request: Request) -> ChatAgent:
    return request.app.state.agent


def get_text_extractor() -> TextExtractor:
    return extract_text


AgentDep = Annotated[ChatAgent, Depends(get_agent)]
ExtractorDep = Annotated[TextExtractor, Depends(get_text_extractor)]


class ChatRequest(BaseModel):
    message: Optional[str] = None


def _require(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise ApiError(400, message)
    return value


def _internal_error(endpoint: str, exc: Exception) -> ApiError:
    _log.exception("Request to %s failed", endpoint)
    return ApiError(500, f"Error in {endpoint}: {exc}")


@app.post("/api/chat")
def chat(req: ChatRequest, agent: AgentDep) -> dict[str, str]:
    """Pure AI chat (no documents)."""
    message = _require(req.message, "Message cannot be empty")
    try:
        reply = agent.chat(message)
    except Exception as exc:  # noqa: BLE001
        raise _internal_error("/chat", exc) from exc
    return {"response": reply}


@app.get("/api/ask")
def ask(agent: AgentDep, question: Annotated[Optional[str], Query()] = None) -> dict[str, str]:
    question = _require(question, "Question cannot be empty")
    try:
        reply = agent.chat(question)
    except Exception as exc:  # noqa: BLE001
        raise _internal_error("/ask", exc) from exc
    return {"response": reply}


@app.post("/api/rag/chat")
def rag_chat(req: ChatRequest, agent: AgentDep) -> dict[str, str]:
    """Chat answered from the indexed documents."""
    message = _require(req.message, "Message cannot be empty")
    try:
        reply = agent.rag_chat(message)
    except Exception as exc:  # noqa: BLE001
        raise _internal_error("/rag/chat", exc) from exc
    return {"response": reply}


@app.get("/api/health")
async def health() -> dict[str, str]:
    return {"status": "UP", "service": "AI Chatbot"}


@app.post("/api/analyze")
def analyze_resume(
    agent: AgentDep,
    extractor: ExtractorDep,
    file: Annotated[UploadFile, File()],
) -> dict[str, str]:
    """Extract the uploaded resume and ask for skills, a rating and improvements."""
    try:
        resume_text = extractor(file.file.read(), file.filename or "")
        result = agent.analyze_resume(resume_text)
    except Exception as exc:  # noqa: BLE001
        raise _internal_error("/analyze", exc) from exc
    return {"analysis": result}


@app.post("/api/ats-check")
def ats_check(
    agent: AgentDep,
    extractor: ExtractorDep,
    file: Annotated[UploadFile, File()],
    jd: Annotated[str, Form()],
) -> dict[str, str]:
    """Score the uploaded resume against a job description."""
    try:
        resume_text = extractor(file.file.read(), file.filename or "")
        result = agent.ats_check(resume_text, jd)
    except Exception as exc:  # noqa: BLE001
        raise _internal_error("/ats-check", exc) from exc
    return {"atsReport": result}


__all__ = ["app", "get_agent", "get_text_extractor"]
